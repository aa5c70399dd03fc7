import csv
import io
import logging
from pathlib import Path
from typing import Iterable, Union

from domain.entities.trade import Trade

logger = logging.getLogger(__name__)


def _format_notional(notional: float) -> str:
    return str(int(notional)) if float(notional).is_integer() else repr(float(notional))


class CsvTradeExporter:
    """Exporta o blotter em CSV, cabeçalho na primeira linha."""

    HEADER = ['tradeRef', 'status', 'subject', 'counterparty', 'notional', 'updatedAt']

    def to_rows(self, trades: Iterable[Trade]):
        for trade in trades:
            yield [
                trade.trade_ref,
                trade.status.value,
                trade.subject,
                trade.counterparty,
                _format_notional(trade.notional),
                trade.updated_at.isoformat(),
            ]

    def to_csv(self, trades: Iterable[Trade]) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator='\n')
        writer.writerow(self.HEADER)
        writer.writerows(self.to_rows(trades))
        return buffer.getvalue()

    def export(self, trades: Iterable[Trade], path: Union[str, Path]) -> Path:
        """Escreve o CSV em disco e retorna o caminho gerado."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        content = self.to_csv(trades)
        path.write_text(content, encoding='utf-8')
        logger.info(f"Blotter exportado para {path} ({content.count(chr(10)) - 1} trades)")
        return path
