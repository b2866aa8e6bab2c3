"""Unit tests for deposit bookkeeping, billing, and lifecycle transitions."""

from __future__ import annotations

import pytest

from vickrey.auction.fsm import AuctionEvent, AuctionState, transition
from vickrey.auction.models import Bid
from vickrey.ledger.billing import deposit_for, settlement_price
from vickrey.ledger.deposits import DepositLedger


class TestDepositLedger:
    def test_settle_pays_out_once(self):
        ledger = DepositLedger()
        ledger.record("A", 275.0)
        assert ledger.outstanding("A") == 275.0
        assert ledger.settle("A") == 275.0
        assert ledger.settle("A") is None
        assert ledger.outstanding("A") == 0.0
        entry = ledger.get("A")
        assert entry.amount == 275.0
        assert entry.settled

    def test_never_funded_is_distinct_from_refunded(self):
        ledger = DepositLedger()
        ledger.record("A", 10.0)
        ledger.settle("A")
        assert "A" in ledger
        assert "B" not in ledger
        assert ledger.get("B") is None
        assert ledger.outstanding("B") == 0.0

    def test_rejects_duplicate_record(self):
        ledger = DepositLedger()
        ledger.record("A", 10.0)
        with pytest.raises(KeyError):
            ledger.record("A", 20.0)
        assert len(ledger) == 1


class TestBilling:
    def test_deposit_is_ten_percent_by_default(self):
        assert deposit_for(2750) == pytest.approx(275)
        assert deposit_for(2750, rate=0.2) == pytest.approx(550)

    def test_settlement_uses_second_lowest(self):
        assert settlement_price(Bid("B", 2500.0), Bid("A", 2750.0), 2) == 2750.0

    def test_settlement_with_single_bid_uses_own_amount(self):
        assert settlement_price(Bid("S", 1000.0), Bid("S", 1000.0), 1) == 1000.0
        assert settlement_price(Bid("S", 1000.0), None, 1) == 1000.0

    def test_settlement_without_bids(self):
        assert settlement_price(None, None, 0) is None


class TestLifecycle:
    def test_forward_transitions(self):
        state = transition(AuctionState.OPEN, AuctionEvent.BID_ACCEPTED)
        assert state is AuctionState.OPEN
        state = transition(state, AuctionEvent.AUCTION_CLOSED)
        assert state is AuctionState.ENDED
        assert transition(state, AuctionEvent.ITEM_DELIVERED) is AuctionState.DELIVERED

    @pytest.mark.parametrize(
        "state, event",
        [
            (AuctionState.OPEN, AuctionEvent.ITEM_DELIVERED),
            (AuctionState.ENDED, AuctionEvent.BID_ACCEPTED),
            (AuctionState.ENDED, AuctionEvent.AUCTION_CLOSED),
            (AuctionState.DELIVERED, AuctionEvent.ITEM_DELIVERED),
        ],
    )
    def test_invalid_transitions(self, state, event):
        with pytest.raises(ValueError):
            transition(state, event)
