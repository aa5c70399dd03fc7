import logging
import secrets
import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from domain.entities.trade import (
    BookingRequest,
    HistoryAction,
    Trade,
    TradeAmendment,
    TradeHistoryEntry,
    TradeStatus,
)
from domain.exceptions import InvalidStateError, LedgerError, NotFoundError, ValidationError
from domain.repositories.trade_store import ITradeStore

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _describe_errors(exc: PydanticValidationError) -> str:
    parts = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", ())) or "trade"
        parts.append(f"{field}: {err.get('msg')}")
    return "; ".join(parts)


class TradeMemoryStore(ITradeStore):
    """
    Implementação em memória do ledger de trades.
    Única fonte da verdade: os registros nunca saem daqui, apenas cópias.

    Cada mutação constrói e valida o novo registro antes de substituí-lo
    no mapa, então uma falha deixa o registro armazenado intacto.
    """

    MAX_REF_ATTEMPTS = 100

    def __init__(
        self,
        ref_prefix: str = "NEW",
        default_user: str = "user_ui",
        clock: Optional[Callable[[], datetime]] = None,
        ref_generator: Optional[Callable[[], str]] = None,
    ):
        """
        Args:
            ref_prefix: Prefixo dos tradeRefs gerados (ex: NEW:UI:1a2b3c)
            default_user: Usuário registrado na auditoria quando nenhum é informado
            clock: Fonte de tempo (injetável para testes)
            ref_generator: Gerador do sufixo aleatório dos refs
        """
        self.ref_prefix = ref_prefix
        self.default_user = default_user
        self.clock = clock or _utc_now
        self.ref_generator = ref_generator or (lambda: secrets.token_hex(3))

        self._trades: Dict[str, Trade] = {}
        self._last_timestamp: Optional[datetime] = None
        self.lock = threading.RLock()

        # Estatísticas
        self.stats = {
            'booked': 0,
            'amended': 0,
            'verified': 0,
            'cancelled': 0,
            'loaded': 0,
            'rejected': 0
        }

        logger.info(f"TradeMemoryStore inicializado com ref_prefix={ref_prefix}")

    def __len__(self) -> int:
        with self.lock:
            return len(self._trades)

    # --- Mutações ---

    def book(self, request: Union[BookingRequest, dict], user: Optional[str] = None) -> Trade:
        """Registra um novo trade LIVE com uma única entrada BOOK."""
        with self.lock:
            try:
                request = self._coerce(BookingRequest, request)
                timestamp = self._next_timestamp()
                trade = self._build(
                    trade_ref=self._generate_ref(request.source),
                    status=TradeStatus.LIVE,
                    subject=request.subject,
                    source=request.source,
                    counterparty=request.counterparty,
                    notional=request.notional,
                    updated_at=timestamp,
                    history=[TradeHistoryEntry(
                        timestamp=timestamp,
                        action=HistoryAction.BOOK,
                        user=user or self.default_user,
                        note="Manual Booking"
                    )]
                )
            except ValidationError as e:
                self.stats['rejected'] += 1
                logger.warning(f"Booking rejeitado: {e}")
                raise

            self._commit(trade)
            self.stats['booked'] += 1

            logger.info(
                f"Trade registrado: {trade.trade_ref} - {trade.subject} "
                f"{trade.counterparty} {trade.notional:,.2f}"
            )
            return trade.model_copy(deep=True)

    def amend(
        self,
        trade_ref: str,
        patch: Union[TradeAmendment, dict],
        user: Optional[str] = None
    ) -> Trade:
        """Aplica apenas os campos informados a um trade LIVE."""
        with self.lock:
            try:
                current = self._require(trade_ref)
                if not current.is_live:
                    raise InvalidStateError(trade_ref, current.status.value, "amend")

                changes = self._coerce(TradeAmendment, patch).changes()
                changed_fields = sorted(
                    name for name, value in changes.items() if getattr(current, name) != value
                )
                note = f"Amended {', '.join(changed_fields)}" if changed_fields else "Amended details"

                timestamp = self._next_timestamp()
                entry = TradeHistoryEntry(
                    timestamp=timestamp,
                    action=HistoryAction.AMEND,
                    user=user or self.default_user,
                    note=note
                )
                fields = current.model_dump()
                fields.update(changes)
                fields.update(updated_at=timestamp, history=[entry, *current.history])
                trade = self._build(**fields)
            except LedgerError as e:
                self.stats['rejected'] += 1
                logger.warning(f"Amend rejeitado para {trade_ref}: {e}")
                raise

            self._commit(trade)
            self.stats['amended'] += 1

            logger.info(f"Trade {trade_ref} alterado: {note}")
            return trade.model_copy(deep=True)

    def transition(
        self,
        trade_ref: str,
        target: Union[TradeStatus, str],
        user: Optional[str] = None
    ) -> Trade:
        """Move um trade LIVE para VERIFIED ou CANCELLED. Os dois estados são terminais."""
        with self.lock:
            try:
                current = self._require(trade_ref)
                target = self._coerce_target(target)
                if not current.is_live:
                    raise InvalidStateError(trade_ref, current.status.value, f"transição para {target.value}")

                timestamp = self._next_timestamp()
                entry = TradeHistoryEntry(
                    timestamp=timestamp,
                    action=HistoryAction(target.value),
                    user=user or self.default_user,
                    note=f"Status changed to {target.value}"
                )
                trade = current.model_copy(update={
                    'status': target,
                    'updated_at': timestamp,
                    'history': [entry, *current.history]
                })
            except LedgerError as e:
                self.stats['rejected'] += 1
                logger.warning(f"Transição rejeitada para {trade_ref}: {e}")
                raise

            self._commit(trade)
            self.stats[target.value.lower()] += 1

            logger.info(f"Trade {trade_ref} transicionou: {current.status.value} -> {target.value}")
            return trade.model_copy(deep=True)

    def load(self, trades: Iterable[Trade]) -> None:
        """Carrega registros já existentes, ex: dados de demonstração."""
        trades = list(trades)
        with self.lock:
            refs = [t.trade_ref for t in trades]
            duplicated = sorted({ref for ref in refs if ref in self._trades or refs.count(ref) > 1})
            if duplicated:
                raise ValidationError(f"tradeRefs duplicados: {', '.join(duplicated)}")

            for trade in trades:
                self._trades[trade.trade_ref] = trade.model_copy(deep=True)
                if self._last_timestamp is None or trade.updated_at > self._last_timestamp:
                    self._last_timestamp = trade.updated_at

            self.stats['loaded'] += len(trades)
            logger.info(f"{len(trades)} trades carregados no ledger")

    # --- Consultas ---

    def get_all(self) -> List[Trade]:
        """Retorna cópias de todos os trades. Quem chama deve ordenar explicitamente."""
        with self.lock:
            records = list(self._trades.values())
        return [trade.model_copy(deep=True) for trade in records]

    def get_by_ref(self, trade_ref: str) -> Trade:
        with self.lock:
            trade = self._require(trade_ref)
        return trade.model_copy(deep=True)

    def get_stats(self) -> Dict[str, Any]:
        """Retorna estatísticas de uso do ledger."""
        with self.lock:
            by_status = {status.value: 0 for status in TradeStatus}
            for trade in self._trades.values():
                by_status[trade.status.value] += 1

            return {
                'operations': self.stats.copy(),
                'total_trades': len(self._trades),
                'by_status': by_status,
                'last_update': self._last_timestamp.isoformat() if self._last_timestamp else None
            }

    # --- Internos ---

    def _require(self, trade_ref: str) -> Trade:
        trade = self._trades.get(trade_ref)
        if trade is None:
            raise NotFoundError(trade_ref)
        return trade

    def _commit(self, trade: Trade) -> None:
        self._trades[trade.trade_ref] = trade
        self._last_timestamp = trade.updated_at

    def _coerce(self, model, data):
        if isinstance(data, model):
            return data
        try:
            return model.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(_describe_errors(e)) from e

    def _coerce_target(self, target) -> TradeStatus:
        try:
            target = TradeStatus(target)
        except ValueError as e:
            raise ValidationError(f"Status desconhecido: {target}") from e
        if target == TradeStatus.LIVE:
            raise ValidationError("Transição só é permitida para VERIFIED ou CANCELLED")
        return target

    def _build(self, **fields) -> Trade:
        try:
            return Trade.model_validate(fields)
        except PydanticValidationError as e:
            raise ValidationError(_describe_errors(e)) from e

    def _generate_ref(self, source: str) -> str:
        source_tag = source.upper().replace("INTERNAL_", "") or "UI"
        for _ in range(self.MAX_REF_ATTEMPTS):
            trade_ref = f"{self.ref_prefix}:{source_tag}:{self.ref_generator()}"
            if trade_ref not in self._trades:
                return trade_ref
            logger.debug(f"Colisão de tradeRef {trade_ref}, gerando outro")
        raise RuntimeError(f"Não foi possível gerar um tradeRef único após {self.MAX_REF_ATTEMPTS} tentativas")

    def _next_timestamp(self) -> datetime:
        # updated_at é estritamente crescente dentro do ledger
        now = self.clock()
        if self._last_timestamp is not None and now <= self._last_timestamp:
            now = self._last_timestamp + timedelta(microseconds=1)
        return now
