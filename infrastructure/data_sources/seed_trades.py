# infrastructure/data_sources/seed_trades.py
"""Trades de demonstração carregados no ledger ao iniciar o blotter."""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

from domain.entities.trade import HistoryAction, Trade, TradeHistoryEntry, TradeStatus

SEED_TRADES = [
    {
        'trade_ref': "SWAPTION:UI:99a8b1",
        'status': TradeStatus.LIVE,
        'subject': "VANILLA_SWAPTION",
        'source': "INTERNAL_UI",
        'counterparty': "GOLDMAN_SACHS",
        'notional': 1_000_000,
        'age': timedelta(0),
    },
    {
        'trade_ref': "FX:BLOOMBERG:22c4d5",
        'status': TradeStatus.VERIFIED,
        'subject': "FX_OPTION",
        'source': "BLOOMBERG",
        'counterparty': "JPMORGAN",
        'notional': 5_500_000,
        'age': timedelta(hours=1),
    },
    {
        'trade_ref': "SWAPTION:UI:11f2e3",
        'status': TradeStatus.CANCELLED,
        'subject': "BERMUDAN_SWAPTION",
        'source': "INTERNAL_UI",
        'counterparty': "CITI",
        'notional': 2_000_000,
        'age': timedelta(hours=2),
    },
]


def _seed_history(trade_ref: str, status: TradeStatus, updated_at: datetime, user: str) -> List[TradeHistoryEntry]:
    # BOOK e UPDATE mais antigos; trades terminais ganham a entrada da transição
    booked_at = updated_at - timedelta(seconds=100)
    history = [
        TradeHistoryEntry(
            timestamp=updated_at - timedelta(seconds=50),
            action=HistoryAction.UPDATE,
            user="trader_1",
            note="Updated notional"
        ),
        TradeHistoryEntry(
            timestamp=booked_at,
            action=HistoryAction.BOOK,
            user=user,
            note=f"Trade {trade_ref} booked via API"
        ),
    ]
    if status.is_terminal:
        history.insert(0, TradeHistoryEntry(
            timestamp=updated_at,
            action=HistoryAction(status.value),
            user="trader_1",
            note=f"Status changed to {status.value}"
        ))
    return history


def build_seed_trades(now: Optional[datetime] = None, user: str = "system") -> List[Trade]:
    """Monta os trades de demonstração com horários relativos a `now`."""
    now = now or datetime.now(timezone.utc)
    trades = []
    for seed in SEED_TRADES:
        updated_at = now - seed['age']
        trades.append(Trade(
            trade_ref=seed['trade_ref'],
            status=seed['status'],
            subject=seed['subject'],
            source=seed['source'],
            counterparty=seed['counterparty'],
            notional=seed['notional'],
            updated_at=updated_at,
            history=_seed_history(seed['trade_ref'], seed['status'], updated_at, user)
        ))
    return trades
