# application/interfaces/audit_repository.py
from abc import ABC, abstractmethod
from domain.entities.trade import Trade


class IAuditRepository(ABC):
    """Interface para o diário de auditoria das mutações do ledger."""

    @abstractmethod
    def save_trade_event(self, event_type: str, trade: Trade) -> None:
        """Registra uma mutação aplicada a um trade."""

    @abstractmethod
    def save_system_event(self, event_type: str, data: dict) -> None:
        """Registra um evento de sistema (carga, shutdown...)."""

    @abstractmethod
    def flush(self) -> None:
        """Garante que todos os dados em buffer sejam salvos."""

    @abstractmethod
    def close(self) -> None:
        """Finaliza o repositório salvando o que restou nos buffers."""
