# application/interfaces/system_event_bus.py
from abc import ABC, abstractmethod
from typing import Callable, Any


class TradeEvents:
    """Tipos de evento publicados pelo ledger."""
    TRADE_BOOKED = "TRADE_BOOKED"
    TRADE_AMENDED = "TRADE_AMENDED"
    TRADE_STATUS_CHANGED = "TRADE_STATUS_CHANGED"
    TRADES_LOADED = "TRADES_LOADED"
    SYSTEM_SHUTDOWN = "SYSTEM_SHUTDOWN"


class ISystemEventBus(ABC):
    """Interface para o barramento de eventos do sistema."""

    @abstractmethod
    def subscribe(self, event_type: str, handler: Callable):
        """Inscreve um handler para um tipo de evento."""

    @abstractmethod
    def unsubscribe(self, event_type: str, handler: Callable):
        """Remove a inscrição de um handler."""

    @abstractmethod
    def publish(self, event_type: str, data: Any):
        """Publica um evento para todos os seus assinantes."""
