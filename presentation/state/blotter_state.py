# presentation/state/blotter_state.py
"""
Estado transitório da tela do blotter (busca, filtro, ordenação, linha
expandida e toasts). Nunca vaza para o ledger: a cada render chama as
funções puras do motor de consulta sobre um snapshot novo.
"""

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Deque, List, Optional, Sequence

from domain.entities.trade import Trade
from application.services.trade_query_engine import (
    SortDir,
    SortKey,
    StatusFilter,
    TradeKpis,
    TradeQueryEngine,
    ViewParams,
)


@dataclass(frozen=True)
class Toast:
    """Notificação curta exibida ao usuário."""
    message: str
    level: str = "info"  # info, success, warning, error
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class BlotterSnapshot:
    """Resultado de um render: linhas visíveis e KPIs globais."""
    rows: List[Trade]
    kpis: TradeKpis
    expanded: Optional[Trade] = None


STATUS_FILTER_CYCLE = [StatusFilter.ALL, StatusFilter.LIVE, StatusFilter.VERIFIED, StatusFilter.CANCELLED]


class BlotterViewState:
    """Estado de visualização mantido pela camada de apresentação."""

    def __init__(self, query_engine: Optional[TradeQueryEngine] = None, max_toasts: int = 5):
        self.query_engine = query_engine or TradeQueryEngine()
        self.search_term = ""
        self.status_filter = StatusFilter.ALL
        self.sort_key = SortKey.UPDATED_AT
        self.sort_dir = SortDir.DESC
        self.expanded_ref: Optional[str] = None
        self.toasts: Deque[Toast] = deque(maxlen=max_toasts)

    @property
    def params(self) -> ViewParams:
        return ViewParams(
            search_term=self.search_term,
            status_filter=self.status_filter,
            sort_key=self.sort_key,
            sort_dir=self.sort_dir
        )

    def set_search(self, term: str):
        self.search_term = term.strip()

    def set_status_filter(self, status_filter):
        self.status_filter = StatusFilter(status_filter)

    def cycle_status_filter(self) -> StatusFilter:
        """ALL -> LIVE -> VERIFIED -> CANCELLED -> ALL."""
        idx = STATUS_FILTER_CYCLE.index(self.status_filter)
        self.status_filter = STATUS_FILTER_CYCLE[(idx + 1) % len(STATUS_FILTER_CYCLE)]
        return self.status_filter

    def toggle_sort(self, sort_key) -> None:
        """Mesmo cabeçalho inverte a direção; outro cabeçalho ordena ascendente."""
        sort_key = SortKey(sort_key)
        if sort_key == self.sort_key:
            self.sort_dir = SortDir.ASC if self.sort_dir == SortDir.DESC else SortDir.DESC
        else:
            self.sort_key = sort_key
            self.sort_dir = SortDir.ASC

    def toggle_expanded(self, trade_ref: str) -> Optional[str]:
        self.expanded_ref = None if self.expanded_ref == trade_ref else trade_ref
        return self.expanded_ref

    def push_toast(self, message: str, level: str = "info") -> Toast:
        toast = Toast(message=message, level=level)
        self.toasts.append(toast)
        return toast

    def dismiss_toasts(self):
        self.toasts.clear()

    def render(self, trades: Sequence[Trade]) -> BlotterSnapshot:
        """KPIs sempre sobre o conjunto completo; linhas conforme busca/filtro/ordenação."""
        rows = self.query_engine.view(trades, self.params)
        expanded = None
        if self.expanded_ref:
            expanded = next((t for t in trades if t.trade_ref == self.expanded_ref), None)
            if expanded is None:
                self.expanded_ref = None
        return BlotterSnapshot(rows=rows, kpis=self.query_engine.kpis(trades), expanded=expanded)
