from domain.entities.trade import TradeStatus
from application.services.trade_query_engine import TradeKpis
from presentation.formatters.trade_formatter import TradeFormatter
from tests.conftest import make_trade


def test_currency():
    assert TradeFormatter().format_currency(1_000_000) == "$1,000,000.00"
    assert TradeFormatter("BRL").format_currency(2.5) == "R$2.50"
    assert TradeFormatter("CHF").format_currency(1) == "CHF 1.00"


def test_status_badge_colors():
    formatter = TradeFormatter()
    assert "green" in formatter.status_badge(TradeStatus.VERIFIED)
    assert "red" in formatter.status_badge(TradeStatus.CANCELLED)
    assert "blue" in formatter.status_badge(TradeStatus.LIVE)


def test_cancelled_rows_are_struck_through():
    row = TradeFormatter().format_row(make_trade("X", status=TradeStatus.CANCELLED))

    assert len(row) == 7
    assert row[2] == "[dim strike]X[/dim strike]"
    assert row[-1] == "$1,000,000.00"


def test_kpi_line():
    line = TradeFormatter().format_kpis(TradeKpis(total=3, live_exposure=1_000_000, pending_count=1))

    assert "$1,000,000.00" in line
    assert "[bold]3[/bold]" in line
