# application/services/trade_query_engine.py
"""
Motor de consulta do blotter.
Função pura: snapshot + parâmetros de visualização -> lista ordenada e KPIs.
Não guarda estado e não faz I/O.
"""

from enum import Enum
from typing import Any, Callable, Dict, List, Sequence

from pydantic import BaseModel, ConfigDict

from domain.entities.trade import Trade, TradeStatus


class StatusFilter(str, Enum):
    ALL = "ALL"
    LIVE = "LIVE"
    VERIFIED = "VERIFIED"
    CANCELLED = "CANCELLED"


class SortKey(str, Enum):
    STATUS = "status"
    UPDATED_AT = "updatedAt"
    TRADE_REF = "tradeRef"
    NOTIONAL = "notional"


class SortDir(str, Enum):
    ASC = "asc"
    DESC = "desc"


class ViewParams(BaseModel):
    """Parâmetros de visualização vindos da camada de apresentação."""
    model_config = ConfigDict(frozen=True)

    search_term: str = ""
    status_filter: StatusFilter = StatusFilter.ALL
    sort_key: SortKey = SortKey.UPDATED_AT
    sort_dir: SortDir = SortDir.DESC


class TradeKpis(BaseModel):
    """Métricas agregadas, sempre sobre o conjunto completo de trades."""
    model_config = ConfigDict(frozen=True)

    total: int = 0
    live_exposure: float = 0.0
    pending_count: int = 0


# Lexicográfico para strings, numérico para notional, cronológico para updatedAt
SORT_ACCESSORS: Dict[SortKey, Callable[[Trade], Any]] = {
    SortKey.STATUS: lambda t: t.status.value,
    SortKey.UPDATED_AT: lambda t: t.updated_at,
    SortKey.TRADE_REF: lambda t: t.trade_ref,
    SortKey.NOTIONAL: lambda t: t.notional,
}


def _resolve_sort_key(sort_key) -> SortKey:
    try:
        return SortKey(sort_key)
    except ValueError:
        raise ValueError(
            f"sort_key desconhecido: {sort_key!r} (esperado um de {[k.value for k in SortKey]})"
        ) from None


class TradeQueryEngine:
    """Transforma um snapshot de trades na visão exibida pelo blotter."""

    @staticmethod
    def matches_search(trade: Trade, search_term: str) -> bool:
        """Busca case-insensitive em tradeRef, counterparty ou subject."""
        if not search_term:
            return True
        needle = search_term.lower()
        return (
            needle in trade.trade_ref.lower()
            or needle in trade.counterparty.lower()
            or needle in trade.subject.lower()
        )

    @staticmethod
    def matches_status(trade: Trade, status_filter: StatusFilter) -> bool:
        if status_filter == StatusFilter.ALL:
            return True
        return trade.status.value == status_filter.value

    def view(self, trades: Sequence[Trade], params: ViewParams) -> List[Trade]:
        """
        Aplica busca, filtro de status e ordenação, nessa ordem.

        A ordenação é estável nas duas direções: empates mantêm a ordem
        relativa da sequência filtrada.

        Raises:
            ValueError: sort_key desconhecido (erro de programação)
        """
        sort_key = _resolve_sort_key(params.sort_key)
        accessor = SORT_ACCESSORS[sort_key]

        filtered = [
            t for t in trades
            if self.matches_search(t, params.search_term)
            and self.matches_status(t, params.status_filter)
        ]

        # sorted(reverse=True) preserva a ordem original dos empates
        return sorted(filtered, key=accessor, reverse=params.sort_dir == SortDir.DESC)

    def kpis(self, trades: Sequence[Trade]) -> TradeKpis:
        """KPIs globais; independem de busca, filtro e ordenação."""
        live = [t for t in trades if t.status == TradeStatus.LIVE]
        return TradeKpis(
            total=len(trades),
            live_exposure=sum(t.notional for t in live),
            pending_count=len(live)
        )
