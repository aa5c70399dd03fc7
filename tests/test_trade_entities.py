import pytest
from pydantic import ValidationError as PydanticValidationError

from domain.entities.trade import BookingRequest, Trade, TradeAmendment, TradeStatus
from tests.conftest import make_trade


def test_payload_uses_canonical_field_names():
    payload = make_trade("SWAPTION:UI:99a8b1").to_payload()

    assert set(payload) == {
        'tradeRef', 'status', 'subject', 'source', 'counterparty', 'notional', 'updatedAt', 'history'
    }
    assert payload['status'] == "LIVE"
    assert Trade.model_validate(payload) == make_trade("SWAPTION:UI:99a8b1")


def test_trade_is_frozen():
    trade = make_trade("A")
    with pytest.raises(PydanticValidationError):
        trade.status = TradeStatus.VERIFIED


def test_terminal_statuses():
    assert not TradeStatus.LIVE.is_terminal
    assert TradeStatus.VERIFIED.is_terminal
    assert TradeStatus.CANCELLED.is_terminal


def test_amendment_changes_only_lists_given_fields():
    assert TradeAmendment(notional=5).changes() == {'notional': 5.0}
    assert TradeAmendment().changes() == {}


def test_booking_request_defaults():
    request = BookingRequest(counterparty="GS", notional=1)
    assert (request.subject, request.source) == ("VANILLA_SWAPTION", "INTERNAL_UI")


@pytest.mark.parametrize("notional", [float("inf"), float("nan"), -1])
def test_trade_requires_finite_non_negative_notional(notional):
    with pytest.raises(PydanticValidationError):
        make_trade("A", notional=notional)


def test_patch_models_forbid_unknown_fields():
    with pytest.raises(PydanticValidationError):
        TradeAmendment.model_validate({'status': "CANCELLED"})
    with pytest.raises(PydanticValidationError):
        BookingRequest.model_validate({'counterparty': "GS", 'notional': 1, 'tradeRef': "X"})
