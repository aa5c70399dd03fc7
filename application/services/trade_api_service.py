# application/services/trade_api_service.py
"""
Fronteira assíncrona entre a apresentação e o ledger.
Cada chamada aguarda a latência configurada, delega ao repositório e publica
o evento correspondente no barramento. Erros do ledger sobem inalterados.
"""

import asyncio
import logging
from typing import Dict, List, Optional, Union

from domain.entities.trade import BookingRequest, Trade, TradeAmendment, TradeStatus
from domain.repositories.trade_store import ITradeStore
from application.interfaces.system_event_bus import ISystemEventBus, TradeEvents

logger = logging.getLogger(__name__)


class TradeApiService:
    """Serviço de trades usado pela interface (fetch/book/amend/status)."""

    def __init__(
        self,
        store: ITradeStore,
        event_bus: Optional[ISystemEventBus] = None,
        config: Optional[Dict] = None
    ):
        self.store = store
        self.event_bus = event_bus
        self.config = config or {}

        self.fetch_latency = float(self.config.get('fetch_latency', 0.0))
        self.book_latency = float(self.config.get('book_latency', 0.0))
        self.amend_latency = float(self.config.get('amend_latency', 0.0))
        self.status_latency = float(self.config.get('status_latency', 0.0))

    async def _delay(self, seconds: float):
        if seconds > 0:
            await asyncio.sleep(seconds)

    def _publish(self, event_type: str, data):
        if self.event_bus:
            self.event_bus.publish(event_type, data)

    async def fetch_trades(self) -> List[Trade]:
        """Retorna cópias independentes de todos os trades."""
        await self._delay(self.fetch_latency)
        return self.store.get_all()

    async def get_trade(self, trade_ref: str) -> Trade:
        await self._delay(self.fetch_latency)
        return self.store.get_by_ref(trade_ref)

    async def book_trade(self, request: Union[BookingRequest, dict], user: Optional[str] = None) -> Trade:
        await self._delay(self.book_latency)
        trade = self.store.book(request, user=user)
        self._publish(TradeEvents.TRADE_BOOKED, {'trade': trade})
        return trade

    async def amend_trade(
        self,
        trade_ref: str,
        patch: Union[TradeAmendment, dict],
        user: Optional[str] = None
    ) -> Trade:
        await self._delay(self.amend_latency)
        trade = self.store.amend(trade_ref, patch, user=user)
        self._publish(TradeEvents.TRADE_AMENDED, {'trade': trade})
        return trade

    async def update_trade_status(
        self,
        trade_ref: str,
        status: Union[TradeStatus, str],
        user: Optional[str] = None
    ) -> Trade:
        await self._delay(self.status_latency)
        trade = self.store.transition(trade_ref, status, user=user)
        self._publish(TradeEvents.TRADE_STATUS_CHANGED, {
            'trade_ref': trade_ref,
            'new_status': trade.status,
            'trade': trade
        })
        return trade

    async def verify_trade(self, trade_ref: str, user: Optional[str] = None) -> Trade:
        return await self.update_trade_status(trade_ref, TradeStatus.VERIFIED, user=user)

    async def cancel_trade(self, trade_ref: str, user: Optional[str] = None) -> Trade:
        return await self.update_trade_status(trade_ref, TradeStatus.CANCELLED, user=user)
