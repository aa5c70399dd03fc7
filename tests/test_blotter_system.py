import pytest
from rich.console import Console

from domain.entities.trade import HistoryAction, TradeStatus
from infrastructure.data_sources.seed_trades import build_seed_trades
from orchestration.blotter_system import BlotterSystem
from tests.conftest import BASE_TIME


@pytest.fixture
def system(tmp_path):
    system = BlotterSystem(
        console=Console(record=True, width=200),
        system_config={'log_dir': str(tmp_path / "logs"), 'audit_flush_interval': 60}
    )
    yield system
    system.shutdown()


def test_seed_trades_match_demo_blotter():
    trades = build_seed_trades(now=BASE_TIME)

    assert [t.trade_ref for t in trades] == ["SWAPTION:UI:99a8b1", "FX:BLOOMBERG:22c4d5", "SWAPTION:UI:11f2e3"]
    assert [t.status for t in trades] == [TradeStatus.LIVE, TradeStatus.VERIFIED, TradeStatus.CANCELLED]
    assert [e.action for e in trades[0].history] == [HistoryAction.UPDATE, HistoryAction.BOOK]
    assert trades[1].history[0].action == HistoryAction.VERIFIED
    for trade in trades:
        timestamps = [e.timestamp for e in trade.history]
        assert timestamps == sorted(timestamps, reverse=True)


def test_initialize_loads_seed(system):
    assert system.initialize()
    assert len(system.store) == 3


def test_initialize_without_seed(system):
    assert system.initialize(seed=False)
    assert len(system.store) == 0


def test_headless_print_and_export(system, tmp_path):
    system.initialize()

    system.print_blotter()
    output = system.console.export_text()
    path = system.export_csv(tmp_path / "trades.csv")

    assert "SWAPTION:UI:99a8b1" in output
    assert "$1,000,000.00" in output
    assert len(path.read_text(encoding='utf-8').splitlines()) == 4


def test_shutdown_writes_audit_journal(system, tmp_path):
    system.initialize()
    system.shutdown()

    journal = (tmp_path / "logs" / "system.jsonl").read_text(encoding='utf-8')
    assert "TRADES_LOADED" in journal
    assert "SYSTEM_SHUTDOWN" in journal
