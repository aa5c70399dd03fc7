from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional
from domain.entities.trade import BookingRequest, Trade, TradeAmendment, TradeStatus


class ITradeStore(ABC):
    """Interface do repositório de trades seguindo Clean Architecture."""

    @abstractmethod
    def book(self, request: BookingRequest, user: Optional[str] = None) -> Trade:
        """Registra um novo trade LIVE com uma entrada BOOK."""

    @abstractmethod
    def amend(self, trade_ref: str, patch: TradeAmendment, user: Optional[str] = None) -> Trade:
        """Aplica um patch parcial a um trade LIVE."""

    @abstractmethod
    def transition(self, trade_ref: str, target: TradeStatus, user: Optional[str] = None) -> Trade:
        """Move um trade LIVE para VERIFIED ou CANCELLED."""

    @abstractmethod
    def get_all(self) -> List[Trade]:
        """Retorna cópias de todos os trades (ordem sem significado)."""

    @abstractmethod
    def get_by_ref(self, trade_ref: str) -> Trade:
        """Retorna a cópia de um trade ou levanta NotFoundError."""

    @abstractmethod
    def load(self, trades: Iterable[Trade]) -> None:
        """Carrega registros já existentes (seed)."""

    @abstractmethod
    def get_stats(self) -> Dict[str, Any]:
        """Retorna estatísticas de uso do repositório."""
