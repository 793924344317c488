# voteledger/controller.py
import logging
from typing import List

from .errors import (
    AlreadyRegistered,
    CandidateInactive,
    CandidateNotFound,
    InvalidPeriod,
    NotRegistered,
    UnexpectedPayment,
    Unauthorized,
)
from .ledger import FeeLedger
from .models.election_model import Candidate, Phase
from .models.vote_model import VoteReceipt, Voter
from .registry import CandidateRegistry
from .transaction import Store

logger = logging.getLogger(__name__)

DEFAULT_CONTROLLER_ADDRESS = "voting-controller"


class ElectionController(Store):
    """
    Voter registration, vote casting and winner determination.

    The controller owns the voter records and their free vote counters. It
    reads the period and candidates from the registry and the quota from
    the ledger, and changes their state only through their own operations,
    all inside one transaction per call.

    There is no stored phase. ``phase()`` derives it from the clock, the
    voting period and whether the escrow has been released.
    """

    def __init__(self, registry: CandidateRegistry, ledger: FeeLedger, address: str = DEFAULT_CONTROLLER_ADDRESS):
        if registry.transactions is not ledger.transactions:
            raise ValueError("Registry and ledger must share one TransactionManager.")
        self.registry = registry
        self.ledger = ledger
        self.address = address
        self.transactions = registry.transactions
        self._state = {"voters": {}}

    @property
    def events(self):
        return self.transactions.event_log

    def phase(self) -> Phase:
        with self.transactions.reading():
            if self.ledger.released:
                return Phase.FINALIZED
            period = self.registry.get_voting_period()
            now = self.transactions.clock.now()
        if period is None or now < period.start:
            return Phase.NOT_STARTED
        if now < period.end:
            return Phase.OPEN
        return Phase.CLOSED

    def register_voter(self, caller: str) -> Voter:
        with self.transactions.atomic(self):
            voter = self._state["voters"].get(caller)
            if voter is not None and voter.registered:
                raise AlreadyRegistered(f"{caller} is already registered.")
            self._touch("voters", caller)
            voter = Voter(principal=caller, registered=True)
            self._state["voters"][caller] = voter
            self.events.record("VoterRegistered", voter=caller)
        logger.info(f"Voter {caller} registered")
        return self.get_voter(caller)

    def vote(self, caller: str, candidate_id: int, payment: int = 0) -> VoteReceipt:
        with self.transactions.atomic(self, self.registry, self.ledger):
            phase = self.phase()
            if phase is not Phase.OPEN:
                raise InvalidPeriod(f"Voting is not open (phase: {phase.value}).")
            voter = self._state["voters"].get(caller)
            if voter is None or not voter.registered:
                raise NotRegistered(f"{caller} is not a registered voter.")
            if not self.registry.get_candidate(candidate_id).active:
                raise CandidateInactive(f"Candidate {candidate_id} is not active.")

            fees = self.ledger.get_fee_config()
            paid = voter.free_votes_used >= fees.free_vote_limit
            if paid:
                self.ledger.pay_to_vote(self.address, caller, payment)
            else:
                if payment:
                    raise UnexpectedPayment(
                        f"Vote {voter.free_votes_used + 1} of {fees.free_vote_limit} is free; payment must be 0."
                    )
                self._touch("voters", caller)
                voter.free_votes_used += 1

            total = self.registry.record_vote(self.address, candidate_id)
            self.events.record("VoteCast", voter=caller, candidate_id=candidate_id, paid=paid, payment=payment)
        return VoteReceipt(
            voter=caller,
            candidate_id=candidate_id,
            paid=paid,
            payment=payment,
            candidate_total_votes=total,
        )

    def get_winner(self) -> Candidate:
        """Active candidate with the most votes. Ties go to the lowest id."""
        active = self.registry.active_candidates()
        if not active:
            raise CandidateNotFound("There are no active candidates.")
        return max(active, key=lambda c: (c.total_votes, -c.id))

    def release_to_winner(self, caller: str):
        with self.transactions.atomic(self):
            if caller != self.ledger.owner:
                raise Unauthorized(f"{caller} is not the ledger owner.")
            phase = self.phase()
            if phase in (Phase.NOT_STARTED, Phase.OPEN):
                raise InvalidPeriod(f"Funds can only be released after voting closes (phase: {phase.value}).")
            winner = self.get_winner()
            return self.ledger.release_funds(caller, winner.address)

    def get_voter(self, principal: str) -> Voter:
        with self.transactions.reading():
            voter = self._state["voters"].get(principal)
            if voter is None:
                voter = Voter(principal=principal)
            return voter.model_copy(update={"paid_votes_used": self.ledger.get_total_paid_votes(principal)})

    def get_all_voters(self) -> List[Voter]:
        with self.transactions.reading():
            return [self.get_voter(p) for p in list(self._state["voters"])]

    def dump(self):
        return {
            "address": self.address,
            "voters": [
                v.model_dump(include={"principal", "registered", "free_votes_used"})
                for v in self._state["voters"].values()
            ],
        }

    def load(self, data):
        voters = [Voter.model_validate(v) for v in data.get("voters", [])]
        self._touch_all()
        self._state = {"voters": {v.principal: v for v in voters}}
