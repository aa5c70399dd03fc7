from application.services.trade_query_engine import SortDir, SortKey, StatusFilter
from domain.entities.trade import TradeStatus
from presentation.state.blotter_state import BlotterViewState
from tests.conftest import make_trade


def sample_trades():
    return [
        make_trade("B", notional=200, minutes=2),
        make_trade("A", notional=100, counterparty="CITI", minutes=1),
        make_trade("C", status=TradeStatus.VERIFIED, notional=300, minutes=3),
    ]


def test_defaults_sort_newest_first():
    state = BlotterViewState()
    snapshot = state.render(sample_trades())

    assert [t.trade_ref for t in snapshot.rows] == ["C", "B", "A"]
    assert snapshot.expanded is None


def test_toggle_sort_same_key_flips_direction():
    state = BlotterViewState()

    state.toggle_sort("notional")
    assert (state.sort_key, state.sort_dir) == (SortKey.NOTIONAL, SortDir.ASC)

    state.toggle_sort(SortKey.NOTIONAL)
    assert state.sort_dir == SortDir.DESC

    state.toggle_sort("tradeRef")
    assert (state.sort_key, state.sort_dir) == (SortKey.TRADE_REF, SortDir.ASC)


def test_cycle_status_filter_wraps_around():
    state = BlotterViewState()
    seen = [state.cycle_status_filter() for _ in range(4)]

    assert seen == [StatusFilter.LIVE, StatusFilter.VERIFIED, StatusFilter.CANCELLED, StatusFilter.ALL]


def test_kpis_reflect_full_set_while_rows_are_filtered():
    state = BlotterViewState()
    state.set_search("citi")
    state.set_status_filter("LIVE")

    snapshot = state.render(sample_trades())

    assert [t.trade_ref for t in snapshot.rows] == ["A"]
    assert snapshot.kpis.total == 3
    assert snapshot.kpis.pending_count == 2
    assert snapshot.kpis.live_exposure == 300


def test_expanded_row_toggles_and_clears_when_missing():
    state = BlotterViewState()

    assert state.toggle_expanded("A") == "A"
    assert state.render(sample_trades()).expanded.trade_ref == "A"
    assert state.toggle_expanded("A") is None

    state.toggle_expanded("GONE")
    assert state.render(sample_trades()).expanded is None
    assert state.expanded_ref is None


def test_toasts_keep_latest_only():
    state = BlotterViewState(max_toasts=2)
    for i in range(3):
        state.push_toast(f"msg {i}", "success")

    assert [t.message for t in state.toasts] == ["msg 1", "msg 2"]
    state.dismiss_toasts()
    assert not state.toasts


def test_search_term_is_trimmed():
    state = BlotterViewState()
    state.set_search("  gs ")
    assert state.params.search_term == "gs"
