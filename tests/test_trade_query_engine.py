from collections import Counter

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from domain.entities.trade import TradeStatus
from application.services.trade_query_engine import (
    SortDir,
    SortKey,
    StatusFilter,
    TradeQueryEngine,
    ViewParams,
)
from tests.conftest import make_trade

engine = TradeQueryEngine()


@pytest.fixture
def trades():
    return [
        make_trade("SWAPTION:UI:99a8b1", counterparty="GOLDMAN_SACHS", notional=1_000_000, minutes=3),
        make_trade("FX:BLOOMBERG:22c4d5", status=TradeStatus.VERIFIED, counterparty="JPMORGAN",
                   subject="FX_OPTION", notional=5_500_000, minutes=2),
        make_trade("SWAPTION:UI:11f2e3", status=TradeStatus.CANCELLED, counterparty="CITI",
                   subject="BERMUDAN_SWAPTION", notional=2_000_000, minutes=1),
    ]


def refs(trades):
    return [t.trade_ref for t in trades]


class TestView:

    def test_sort_by_ref_ascending(self):
        a = make_trade("Z")
        b = make_trade("A")

        result = engine.view([a, b], ViewParams(sort_key="tradeRef", sort_dir="asc"))

        assert result == [b, a]

    def test_default_params_sort_newest_first(self, trades):
        assert refs(engine.view(trades, ViewParams())) == refs(trades)

    @pytest.mark.parametrize("term,expected", [
        ("swaption", ["SWAPTION:UI:11f2e3", "SWAPTION:UI:99a8b1"]),  # subject e ref
        ("jpm", ["FX:BLOOMBERG:22c4d5"]),                            # counterparty
        ("Bermudan", ["SWAPTION:UI:11f2e3"]),
        ("99A8", ["SWAPTION:UI:99a8b1"]),
        ("nothing-matches", []),
    ])
    def test_search_is_case_insensitive_over_three_fields(self, trades, term, expected):
        params = ViewParams(search_term=term, sort_key=SortKey.TRADE_REF, sort_dir=SortDir.ASC)
        assert refs(engine.view(trades, params)) == expected

    @pytest.mark.parametrize("status_filter,expected", [
        (StatusFilter.LIVE, ["SWAPTION:UI:99a8b1"]),
        (StatusFilter.VERIFIED, ["FX:BLOOMBERG:22c4d5"]),
        (StatusFilter.CANCELLED, ["SWAPTION:UI:11f2e3"]),
    ])
    def test_status_filter(self, trades, status_filter, expected):
        assert refs(engine.view(trades, ViewParams(status_filter=status_filter))) == expected

    def test_search_and_filter_combine(self, trades):
        params = ViewParams(search_term="swaption", status_filter="LIVE")
        assert refs(engine.view(trades, params)) == ["SWAPTION:UI:99a8b1"]

    def test_numeric_sort_on_notional(self):
        small = make_trade("A", notional=9)
        big = make_trade("B", notional=10)

        assert engine.view([big, small], ViewParams(sort_key="notional", sort_dir="asc")) == [small, big]
        assert engine.view([small, big], ViewParams(sort_key="notional", sort_dir="desc")) == [big, small]

    def test_sort_by_status_is_lexicographic(self, trades):
        result = engine.view(trades, ViewParams(sort_key="status", sort_dir="asc"))
        assert [t.status.value for t in result] == ["CANCELLED", "LIVE", "VERIFIED"]

    @pytest.mark.parametrize("sort_dir", ["asc", "desc"])
    def test_ties_keep_filtered_order(self, sort_dir):
        first = make_trade("A", notional=100)
        second = make_trade("B", notional=100)
        third = make_trade("C", notional=100)

        result = engine.view([second, third, first], ViewParams(sort_key="notional", sort_dir=sort_dir))

        assert result == [second, third, first]

    def test_empty_input(self):
        assert engine.view([], ViewParams(search_term="x")) == []

    def test_unknown_sort_key_is_rejected(self, trades):
        with pytest.raises(ValueError):
            ViewParams(sort_key="counterparty")

        params = ViewParams.model_construct(
            search_term="", status_filter=StatusFilter.ALL, sort_key="counterparty", sort_dir=SortDir.ASC
        )
        with pytest.raises(ValueError):
            engine.view(trades, params)

    def test_view_does_not_mutate_input(self, trades):
        original = list(trades)
        engine.view(trades, ViewParams(sort_key="notional", sort_dir="asc"))
        assert trades == original


class TestKpis:

    def test_scenario_book_then_verify(self, store):
        trade = store.book({'counterparty': "GS", 'notional': 1_000_000})

        kpis = engine.kpis(store.get_all())
        assert kpis.total == 1
        assert kpis.live_exposure == 1_000_000
        assert kpis.pending_count == 1

        store.transition(trade.trade_ref, TradeStatus.VERIFIED)

        kpis = engine.kpis(store.get_all())
        assert kpis.pending_count == 0
        assert kpis.live_exposure == 0

    def test_only_live_trades_count_as_exposure(self, trades):
        kpis = engine.kpis(trades)

        assert kpis.total == 3
        assert kpis.live_exposure == 1_000_000
        assert kpis.pending_count == 1

    def test_empty(self):
        kpis = engine.kpis([])
        assert (kpis.total, kpis.live_exposure, kpis.pending_count) == (0, 0, 0)


# --- Propriedades ---

trade_strategy = st.builds(
    make_trade,
    ref=st.text(alphabet="ABCXYZ:019", min_size=1, max_size=6),
    status=st.sampled_from(list(TradeStatus)),
    notional=st.integers(min_value=0, max_value=10_000_000),
    counterparty=st.sampled_from(["GS", "JPMORGAN", "CITI"]),
    minutes=st.integers(min_value=0, max_value=5),
)

params_strategy = st.builds(
    ViewParams,
    search_term=st.sampled_from(["", "a", "gs", "x", "SWAP"]),
    status_filter=st.sampled_from(list(StatusFilter)),
    sort_key=st.sampled_from(list(SortKey)),
    sort_dir=st.sampled_from(list(SortDir)),
)


@settings(max_examples=100)
@given(trades=st.lists(trade_strategy, max_size=12), sort_key=st.sampled_from(list(SortKey)),
       sort_dir=st.sampled_from(list(SortDir)))
def test_unfiltered_view_is_a_permutation(trades, sort_key, sort_dir):
    result = engine.view(trades, ViewParams(sort_key=sort_key, sort_dir=sort_dir))

    assert Counter(map(id, result)) == Counter(map(id, trades))


@settings(max_examples=100)
@given(trades=st.lists(trade_strategy, max_size=12), sort_key=st.sampled_from(list(SortKey)),
       sort_dir=st.sampled_from(list(SortDir)))
def test_sort_is_stable_in_both_directions(trades, sort_key, sort_dir):
    accessor = {
        SortKey.STATUS: lambda t: t.status.value,
        SortKey.UPDATED_AT: lambda t: t.updated_at,
        SortKey.TRADE_REF: lambda t: t.trade_ref,
        SortKey.NOTIONAL: lambda t: t.notional,
    }[sort_key]
    position = {id(t): i for i, t in enumerate(trades)}

    result = engine.view(trades, ViewParams(sort_key=sort_key, sort_dir=sort_dir))

    for before, after in zip(result, result[1:]):
        if accessor(before) == accessor(after):
            assert position[id(before)] < position[id(after)]


@settings(max_examples=100)
@given(trades=st.lists(trade_strategy, max_size=12), params=params_strategy)
def test_kpis_ignore_view_params(trades, params):
    visible = engine.view(trades, params)

    assert engine.kpis(trades) == engine.kpis(list(reversed(trades)))
    assert engine.kpis(trades).total == len(trades)
    assert len(visible) <= len(trades)
