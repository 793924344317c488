import subprocess
from unittest.mock import patch

import pytest

from voteledger.errors import (
    AlreadyReleased,
    InsufficientPayment,
    InvalidAmount,
    TransferFailed,
    Unauthorized,
    VoteQuotaExceeded,
)
from voteledger.ledger import FeeLedger
from voteledger.payout import BalancePayout, CommandPayout

from conftest import ALICE, BOB, OWNER

CONTROLLER = "voting-controller"


class BrokenPayout:
    def transfer(self, to, amount):
        raise ConnectionError("node unreachable")


def test_pay_to_vote_counts_and_escrows(ledger):
    assert ledger.pay_to_vote(CONTROLLER, ALICE, 1) == 1
    assert ledger.pay_to_vote(CONTROLLER, ALICE, 3) == 2
    assert ledger.get_total_paid_votes(ALICE) == 2
    assert ledger.get_total_paid_votes(BOB) == 0
    # overpayment is kept
    assert ledger.get_escrow().balance == 4


def test_pay_to_vote_only_from_controller(ledger):
    with pytest.raises(Unauthorized):
        ledger.pay_to_vote(ALICE, ALICE, 1)
    assert ledger.get_total_paid_votes(ALICE) == 0
    assert ledger.get_escrow().balance == 0


def test_insufficient_payment(ledger):
    ledger.update_fees(OWNER, 5)
    with pytest.raises(InsufficientPayment):
        ledger.pay_to_vote(CONTROLLER, ALICE, 4)
    assert ledger.get_total_paid_votes(ALICE) == 0
    assert ledger.get_escrow().balance == 0


def test_negative_payment(ledger):
    with pytest.raises(InvalidAmount):
        ledger.pay_to_vote(CONTROLLER, ALICE, -1)


def test_quota_ceiling(ledger):
    ledger.update_max_paid_votes(OWNER, 2)
    ledger.pay_to_vote(CONTROLLER, ALICE, 1)
    ledger.pay_to_vote(CONTROLLER, ALICE, 1)
    with pytest.raises(VoteQuotaExceeded):
        ledger.pay_to_vote(CONTROLLER, ALICE, 1)
    assert ledger.get_total_paid_votes(ALICE) == 2
    assert ledger.get_escrow().balance == 2


def test_lowered_ceiling_is_not_retroactive(ledger):
    for _ in range(3):
        ledger.pay_to_vote(CONTROLLER, ALICE, 1)
    ledger.update_max_paid_votes(OWNER, 1)
    assert ledger.get_total_paid_votes(ALICE) == 3
    with pytest.raises(VoteQuotaExceeded):
        ledger.pay_to_vote(CONTROLLER, ALICE, 1)
    assert ledger.pay_to_vote(CONTROLLER, BOB, 1) == 1


def test_fee_updates_are_owner_only(ledger):
    with pytest.raises(Unauthorized):
        ledger.update_fees(ALICE, 0)
    with pytest.raises(Unauthorized):
        ledger.update_max_paid_votes(ALICE, 100)
    with pytest.raises(Unauthorized):
        ledger.update_free_vote_limit(ALICE, 100)
    fees = ledger.get_fee_config()
    assert (fees.fee_amount, fees.free_vote_limit, fees.max_paid_votes) == (1, 5, 10)


def test_negative_fee_rejected(ledger):
    with pytest.raises(InvalidAmount):
        ledger.update_fees(OWNER, -1)
    assert ledger.get_fee_config().fee_amount == 1


def test_release_funds_once(ledger):
    ledger.pay_to_vote(CONTROLLER, ALICE, 2)
    ledger.pay_to_vote(CONTROLLER, BOB, 3)
    escrow = ledger.release_funds(OWNER, "0xwinner")
    assert escrow.released is True
    assert escrow.balance == 0
    assert escrow.released_to == "0xwinner"
    assert ledger.payout.balance_of("0xwinner") == 5

    with pytest.raises(AlreadyReleased):
        ledger.release_funds(OWNER, "0xwinner")
    assert ledger.payout.balance_of("0xwinner") == 5
    assert ledger.get_escrow().balance == 0


def test_release_requires_owner(ledger):
    ledger.pay_to_vote(CONTROLLER, ALICE, 2)
    with pytest.raises(Unauthorized):
        ledger.release_funds(ALICE, ALICE)
    assert ledger.get_escrow().balance == 2
    assert ledger.released is False


def test_no_payments_after_release(ledger):
    ledger.release_funds(OWNER, "0xwinner")
    with pytest.raises(AlreadyReleased):
        ledger.pay_to_vote(CONTROLLER, ALICE, 1)


def test_failed_transfer_leaves_escrow_untouched():
    ledger = FeeLedger(OWNER, 1, 0, 10, payout=BrokenPayout())
    ledger.bind_controller(OWNER, CONTROLLER)
    ledger.pay_to_vote(CONTROLLER, ALICE, 7)
    with pytest.raises(TransferFailed):
        ledger.release_funds(OWNER, "0xwinner")
    escrow = ledger.get_escrow()
    assert (escrow.balance, escrow.released) == (7, False)
    assert [e.kind for e in ledger.events.events()] == ["ControllerBound", "VotePaid"]


def test_balance_payout_rejects_empty_recipient():
    ledger = FeeLedger(OWNER, 1, 0, 10, payout=BalancePayout())
    with pytest.raises(TransferFailed):
        ledger.release_funds(OWNER, "")
    assert ledger.released is False


def test_constructor_rejects_negative_config():
    with pytest.raises(InvalidAmount):
        FeeLedger(OWNER, -1, 5, 10)


def _completed(returncode, stdout="", stderr=""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


def test_command_payout_extracts_transaction_id():
    payout = CommandPayout("transfer-cli --to {to} --amount {amount}")
    with patch("voteledger.payout.subprocess.run", return_value=_completed(0, "ok. Transaction ID: abc123")) as run:
        assert payout.transfer("0xwinner", 9) == "abc123"
    assert run.call_args[0][0] == ["transfer-cli", "--to", "0xwinner", "--amount", "9"]


@pytest.mark.parametrize("result", [
    _completed(1, stderr="Error: endorsement failure"),
    _completed(0, stdout="submitted, no id"),
])
def test_command_payout_failures(result):
    payout = CommandPayout("transfer-cli {to} {amount}")
    with patch("voteledger.payout.subprocess.run", return_value=result):
        with pytest.raises(TransferFailed):
            payout.transfer("0xwinner", 1)


def test_command_payout_failure_rolls_back_release():
    ledger = FeeLedger(OWNER, 1, 0, 10, payout=CommandPayout("transfer-cli {to} {amount}"))
    ledger.bind_controller(OWNER, CONTROLLER)
    ledger.pay_to_vote(CONTROLLER, ALICE, 1)
    with patch("voteledger.payout.subprocess.run", side_effect=FileNotFoundError("transfer-cli")):
        with pytest.raises(TransferFailed):
            ledger.release_funds(OWNER, "0xwinner")
    assert ledger.get_escrow().balance == 1
    assert ledger.released is False
