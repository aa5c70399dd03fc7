# orchestration/audit_handlers.py
import logging
from typing import Any, Dict

from application.interfaces.audit_repository import IAuditRepository
from application.interfaces.system_event_bus import ISystemEventBus, TradeEvents

logger = logging.getLogger(__name__)


class AuditEventHandlers:
    """Liga os eventos do ledger ao diário de auditoria."""

    TRADE_EVENTS = (
        TradeEvents.TRADE_BOOKED,
        TradeEvents.TRADE_AMENDED,
        TradeEvents.TRADE_STATUS_CHANGED,
    )

    def __init__(self, event_bus: ISystemEventBus, audit_repo: IAuditRepository):
        self.event_bus = event_bus
        self.audit_repo = audit_repo
        self.events_recorded = 0

    def subscribe_to_events(self):
        for event_type in self.TRADE_EVENTS:
            self.event_bus.subscribe(event_type, self._make_trade_handler(event_type))
        self.event_bus.subscribe(TradeEvents.TRADES_LOADED, self.on_trades_loaded)
        self.event_bus.subscribe(TradeEvents.SYSTEM_SHUTDOWN, self.on_system_shutdown)
        logger.info("AuditEventHandlers inscritos no barramento")

    def _make_trade_handler(self, event_type: str):
        def handle(data: Dict[str, Any]):
            self.audit_repo.save_trade_event(event_type, data['trade'])
            self.events_recorded += 1
        handle.__qualname__ = f"AuditEventHandlers.on_{event_type.lower()}"
        return handle

    def on_trades_loaded(self, data: Dict[str, Any]):
        self.audit_repo.save_system_event(TradeEvents.TRADES_LOADED, {'count': data.get('count', 0)})

    def on_system_shutdown(self, data: Dict[str, Any]):
        self.audit_repo.save_system_event(TradeEvents.SYSTEM_SHUTDOWN, data)
        self.audit_repo.flush()
