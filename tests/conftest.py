from datetime import datetime, timedelta, timezone

import pytest

from domain.entities.trade import Trade, TradeStatus
from infrastructure.store.trade_memory_store import TradeMemoryStore

BASE_TIME = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    """Relógio controlado: avança `step` a cada leitura."""

    def __init__(self, start=BASE_TIME, step=timedelta(seconds=1)):
        self.now = start
        self.step = step

    def __call__(self):
        current = self.now
        self.now = self.now + self.step
        return current


def make_trade(ref, status=TradeStatus.LIVE, notional=1_000_000, counterparty="GS",
               subject="VANILLA_SWAPTION", minutes=0):
    return Trade(
        trade_ref=ref,
        status=status,
        subject=subject,
        source="INTERNAL_UI",
        counterparty=counterparty,
        notional=notional,
        updated_at=BASE_TIME + timedelta(minutes=minutes),
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return TradeMemoryStore(clock=clock)


@pytest.fixture
def booking():
    return {'subject': "VANILLA_SWAPTION", 'source': "INTERNAL_UI", 'counterparty': "GS", 'notional': 1_000_000}
