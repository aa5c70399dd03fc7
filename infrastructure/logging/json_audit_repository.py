# infrastructure/logging/json_audit_repository.py
import json
import logging
from pathlib import Path
from datetime import datetime, timezone
from collections import deque
import threading
from typing import Any, List

from domain.entities.trade import Trade
from application.interfaces.audit_repository import IAuditRepository

logger = logging.getLogger(__name__)


class JsonAuditRepository(IAuditRepository):
    """
    Implementação de IAuditRepository que salva eventos em JSON Lines (.jsonl)
    a partir de uma thread de escrita em background, segura para múltiplas threads.

    Arquivos gerados em log_dir:
        audit.jsonl  - uma linha por mutação de trade
        system.jsonl - eventos de sistema
    """

    def __init__(self, log_dir='logs', flush_interval=5, start_writer=True):
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)

        # Buffers em memória antes de escrever no disco, um lock por buffer
        self.buffers = {
            'audit': deque(),
            'system': deque()
        }
        self.locks = {name: threading.Lock() for name in self.buffers.keys()}

        self.flush_interval = flush_interval
        self._stop_event = threading.Event()
        self.writer_thread = None
        if start_writer:
            self.writer_thread = threading.Thread(
                target=self._writer_loop,
                daemon=True,
                name="AuditJournalWriter"
            )
            self.writer_thread.start()

    def _convert_to_serializable(self, obj: Any) -> Any:
        """Converte objetos complexos para formato serializável."""
        if isinstance(obj, datetime):
            return obj.isoformat()
        elif hasattr(obj, 'model_dump'):  # Pydantic models
            return obj.model_dump(mode='json', by_alias=True)
        elif hasattr(obj, 'value'):  # Enums
            return obj.value
        elif isinstance(obj, dict):
            return {k: self._convert_to_serializable(v) for k, v in obj.items()}
        elif isinstance(obj, (list, tuple)):
            return [self._convert_to_serializable(item) for item in obj]
        elif isinstance(obj, (str, int, float, bool, type(None))):
            return obj
        else:
            return str(obj)

    def save_trade_event(self, event_type: str, trade: Trade) -> None:
        """Registra a mutação mais recente do trade (entrada 0 do histórico)."""
        latest = trade.history[0] if trade.history else None
        entry = {
            'event': event_type,
            'tradeRef': trade.trade_ref,
            'status': trade.status.value,
            'notional': trade.notional,
            'updatedAt': trade.updated_at.isoformat(),
            'action': self._convert_to_serializable(latest.action) if latest else None,
            'user': latest.user if latest else None,
            'note': latest.note if latest else None,
        }
        with self.locks['audit']:
            self.buffers['audit'].append(entry)

    def save_system_event(self, event_type: str, data: dict) -> None:
        try:
            entry = self._convert_to_serializable(dict(data))
        except Exception as e:
            logger.error(f"Erro ao preparar evento de sistema {event_type}: {e}", exc_info=True)
            return
        entry['event'] = event_type
        entry['timestamp'] = datetime.now(timezone.utc).isoformat()
        with self.locks['system']:
            self.buffers['system'].append(entry)

    def _writer_loop(self):
        """Loop de escrita em background."""
        while not self._stop_event.wait(self.flush_interval):
            self.flush()

    def flush(self):
        """Move os eventos dos buffers para os arquivos."""
        for log_type, buffer in self.buffers.items():
            # Drena o buffer inteiro de uma vez, minimizando o tempo com o lock
            with self.locks[log_type]:
                items_to_write = list(buffer)
                buffer.clear()

            if items_to_write:
                self._write_batch_append(log_type, items_to_write)

    def _write_batch_append(self, log_type: str, batch: List[dict]):
        """Escreve um lote em modo append, um objeto JSON por linha."""
        file_path = self.log_dir / f"{log_type}.jsonl"

        try:
            with open(file_path, 'a', encoding='utf-8') as f:
                for item in batch:
                    json.dump(item, f, ensure_ascii=False)
                    f.write('\n')

            logger.debug(f"Batch de {len(batch)} items escritos para {file_path}")

        except OSError as e:
            logger.error(f"Erro ao escrever batch de auditoria para {log_type}: {e}", exc_info=True)

    def close(self):
        """Finaliza o repositório garantindo que todos os eventos sejam salvos."""
        logger.info("Finalizando o diário de auditoria...")
        self._stop_event.set()

        if self.writer_thread and self.writer_thread.is_alive():
            self.writer_thread.join(timeout=self.flush_interval + 1)

        self.flush()
        logger.info("Diário de auditoria finalizado.")
