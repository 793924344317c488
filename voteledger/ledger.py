# voteledger/ledger.py
import logging

from .errors import (
    AlreadyReleased,
    ElectionError,
    InsufficientPayment,
    InvalidAmount,
    TransferFailed,
    Unauthorized,
    VoteQuotaExceeded,
)
from .events import EventLog
from .models.fee_model import Escrow, FeeConfig
from .payout import BalancePayout
from .transaction import Store, TransactionManager

logger = logging.getLogger(__name__)


def _check_amount(name: str, value: int):
    if value < 0:
        raise InvalidAmount(f"{name} must not be negative (got {value}).")


class FeeLedger(Store):
    """
    Owns the fee configuration, the per-voter paid vote counters and the
    escrow that collects every accepted payment until it is released.
    """

    def __init__(
        self,
        owner: str,
        fee_amount: int,
        free_vote_limit: int,
        max_paid_votes: int,
        payout=None,
        transactions: TransactionManager = None,
    ):
        for name, value in (
            ("fee_amount", fee_amount),
            ("free_vote_limit", free_vote_limit),
            ("max_paid_votes", max_paid_votes),
        ):
            _check_amount(name, value)
        self.owner = owner
        self.payout = payout if payout is not None else BalancePayout()
        self.transactions = transactions if transactions is not None else TransactionManager(EventLog())
        self._state = {
            "fees": FeeConfig(
                fee_amount=fee_amount,
                free_vote_limit=free_vote_limit,
                max_paid_votes=max_paid_votes,
            ),
            "paid_votes": {},
            "escrow": Escrow(),
            "controller": None,
        }

    @property
    def events(self) -> EventLog:
        return self.transactions.event_log

    def _require_owner(self, caller: str):
        if caller != self.owner:
            raise Unauthorized(f"{caller} is not the ledger owner.")

    def _participants(self):
        if isinstance(self.payout, Store):
            return (self, self.payout)
        return (self,)

    # --- Administration ---

    def bind_controller(self, caller: str, controller: str):
        with self.transactions.atomic(self):
            self._require_owner(caller)
            self._touch("controller")
            self._state["controller"] = controller
            self.events.record("ControllerBound", component="ledger", controller=controller)

    def update_fees(self, caller: str, new_fee: int):
        with self.transactions.atomic(self):
            self._require_owner(caller)
            _check_amount("fee_amount", new_fee)
            self._touch("fees")
            self._state["fees"].fee_amount = new_fee
            self.events.record("FeeUpdated", fee_amount=new_fee)
        logger.info(f"Vote fee set to {new_fee}")

    def update_max_paid_votes(self, caller: str, max_paid_votes: int):
        # voters already above a lowered ceiling keep their votes
        with self.transactions.atomic(self):
            self._require_owner(caller)
            _check_amount("max_paid_votes", max_paid_votes)
            self._touch("fees")
            self._state["fees"].max_paid_votes = max_paid_votes
            self.events.record("MaxPaidVotesUpdated", max_paid_votes=max_paid_votes)

    def update_free_vote_limit(self, caller: str, free_vote_limit: int):
        with self.transactions.atomic(self):
            self._require_owner(caller)
            _check_amount("free_vote_limit", free_vote_limit)
            self._touch("fees")
            self._state["fees"].free_vote_limit = free_vote_limit
            self.events.record("FreeVoteLimitUpdated", free_vote_limit=free_vote_limit)

    # --- Controller-only ---

    def pay_to_vote(self, caller: str, voter: str, payment: int) -> int:
        """
        Account one paid vote for ``voter``. The whole payment goes to
        escrow; anything above the fee is not refunded.
        """
        with self.transactions.atomic(self):
            if self._state["controller"] is None or caller != self._state["controller"]:
                raise Unauthorized(f"{caller} may not take vote payments.")
            _check_amount("payment", payment)
            escrow = self._state["escrow"]
            if escrow.released:
                raise AlreadyReleased("Escrow was already released; no further payments are accepted.")
            fees = self._state["fees"]
            used = self._state["paid_votes"].get(voter, 0)
            if used >= fees.max_paid_votes:
                raise VoteQuotaExceeded(f"{voter} already used {used} of {fees.max_paid_votes} paid votes.")
            if payment < fees.fee_amount:
                raise InsufficientPayment(f"Payment {payment} is below the vote fee {fees.fee_amount}.")
            self._touch("paid_votes", voter)
            self._touch("escrow")
            self._state["paid_votes"][voter] = used + 1
            escrow.balance += payment
            self.events.record("VotePaid", voter=voter, payment=payment, paid_votes=used + 1)
            return used + 1

    # --- Escrow ---

    def release_funds(self, caller: str, winner_address: str) -> Escrow:
        with self.transactions.atomic(*self._participants()):
            self._require_owner(caller)
            escrow = self._state["escrow"]
            if escrow.released:
                raise AlreadyReleased(f"Funds were already released to {escrow.released_to}.")
            amount = escrow.balance
            try:
                txn_id = self.payout.transfer(winner_address, amount)
            except ElectionError:
                raise
            except Exception as e:
                raise TransferFailed(f"Transfer of {amount} to {winner_address} failed: {e}")
            self._touch("escrow")
            escrow.balance = 0
            escrow.released = True
            escrow.released_to = winner_address
            escrow.transaction_id = txn_id
            self.events.record("FundsReleased", to=winner_address, amount=amount, transaction_id=txn_id)
        logger.info(f"Released {amount} to {winner_address} (txn {txn_id})")
        return escrow.model_copy()

    # --- Reads ---

    def get_total_paid_votes(self, voter: str) -> int:
        with self.transactions.reading():
            return self._state["paid_votes"].get(voter, 0)

    def get_fee_config(self) -> FeeConfig:
        with self.transactions.reading():
            return self._state["fees"].model_copy()

    def get_escrow(self) -> Escrow:
        with self.transactions.reading():
            return self._state["escrow"].model_copy()

    @property
    def released(self) -> bool:
        with self.transactions.reading():
            return self._state["escrow"].released

    @property
    def controller(self):
        return self._state["controller"]

    # --- Persistence ---

    def dump(self):
        return {
            "owner": self.owner,
            "fees": self._state["fees"].model_dump(),
            "paid_votes": dict(self._state["paid_votes"]),
            "escrow": self._state["escrow"].model_dump(),
            "controller": self._state["controller"],
        }

    def load(self, data):
        fees = FeeConfig.model_validate(data["fees"])
        escrow = Escrow.model_validate(data.get("escrow", {}))
        self._touch_all()
        self._state = {
            "fees": fees,
            "paid_votes": dict(data.get("paid_votes", {})),
            "escrow": escrow,
            "controller": data.get("controller"),
        }
