# voteledger/registry.py
import logging
from typing import List, Optional, Tuple

from .errors import CandidateInactive, CandidateNotFound, InvalidPeriod, Unauthorized
from .events import EventLog
from .models.election_model import Candidate, VotingPeriod
from .transaction import Store, TransactionManager

logger = logging.getLogger(__name__)


class CandidateRegistry(Store):
    """
    Owns the candidate records and the voting period.

    Administrative calls are restricted to ``owner``. Vote tallies only move
    through ``record_vote``, which only the bound controller principal may call.
    """

    def __init__(
        self,
        owner: str,
        transactions: TransactionManager = None,
        initial_candidate: Optional[Tuple[str, str]] = None,
        voting_period: Optional[Tuple[int, int]] = None,
    ):
        self.owner = owner
        self.transactions = transactions if transactions is not None else TransactionManager(EventLog())
        self._state = {
            "candidates": {},
            "next_id": 1,
            "period": None,
            "controller": None,
        }
        if initial_candidate:
            self.add_candidate(owner, *initial_candidate)
        if voting_period:
            self.update_voting_period(owner, *voting_period)

    @property
    def events(self) -> EventLog:
        return self.transactions.event_log

    def _require_owner(self, caller: str):
        if caller != self.owner:
            raise Unauthorized(f"{caller} is not the registry owner.")

    def _candidate(self, candidate_id: int) -> Candidate:
        candidate = self._state["candidates"].get(candidate_id)
        if candidate is None:
            raise CandidateNotFound(f"Candidate {candidate_id} not found.")
        return candidate

    # --- Administration ---

    def bind_controller(self, caller: str, controller: str):
        with self.transactions.atomic(self):
            self._require_owner(caller)
            self._touch("controller")
            self._state["controller"] = controller
            self.events.record("ControllerBound", component="registry", controller=controller)

    def add_candidate(self, caller: str, name: str, address: str) -> int:
        with self.transactions.atomic(self):
            self._require_owner(caller)
            candidate_id = self._state["next_id"]
            self._touch("candidates", candidate_id)
            self._touch("next_id")
            self._state["candidates"][candidate_id] = Candidate(id=candidate_id, name=name, address=address)
            self._state["next_id"] = candidate_id + 1
            self.events.record("CandidateAdded", id=candidate_id, name=name, address=address)
        logger.info(f"Candidate {candidate_id} ({name}) added")
        return candidate_id

    def deactivate_candidate(self, caller: str, candidate_id: int):
        with self.transactions.atomic(self):
            self._require_owner(caller)
            candidate = self._candidate(candidate_id)
            # deactivating twice is a no-op
            if not candidate.active:
                return
            self._touch("candidates", candidate_id)
            candidate.active = False
            self.events.record("CandidateDeactivated", id=candidate_id)
        logger.info(f"Candidate {candidate_id} deactivated")

    def update_voting_period(self, caller: str, start: int, end: int):
        with self.transactions.atomic(self):
            self._require_owner(caller)
            if start >= end:
                raise InvalidPeriod(f"Voting period start ({start}) must be before end ({end}).")
            current = self._state["period"]
            if current is not None and current.contains(self.transactions.clock.now()):
                logger.warning(f"Voting period changed while voting is open: {current.start}-{current.end} -> {start}-{end}")
            self._touch("period")
            self._state["period"] = VotingPeriod(start=start, end=end)
            self.events.record("VotingPeriodUpdated", start=start, end=end)

    # --- Controller-only ---

    def record_vote(self, caller: str, candidate_id: int) -> int:
        with self.transactions.atomic(self):
            if self._state["controller"] is None or caller != self._state["controller"]:
                raise Unauthorized(f"{caller} may not record votes.")
            candidate = self._candidate(candidate_id)
            if not candidate.active:
                raise CandidateInactive(f"Candidate {candidate_id} is not active.")
            self._touch("candidates", candidate_id)
            candidate.total_votes += 1
            return candidate.total_votes

    # --- Reads ---

    def get_candidate(self, candidate_id: int) -> Candidate:
        with self.transactions.reading():
            return self._candidate(candidate_id).model_copy()

    def get_candidate_details(self, candidate_id: int) -> Tuple[int, str, str, int, bool]:
        with self.transactions.reading():
            return self._candidate(candidate_id).details()

    def get_all_candidates(self) -> List[int]:
        with self.transactions.reading():
            return list(self._state["candidates"])

    def active_candidates(self) -> List[Candidate]:
        with self.transactions.reading():
            return [c.model_copy() for c in self._state["candidates"].values() if c.active]

    def get_voting_period(self) -> Optional[VotingPeriod]:
        with self.transactions.reading():
            period = self._state["period"]
            return period.model_copy() if period is not None else None

    @property
    def controller(self) -> Optional[str]:
        return self._state["controller"]

    # --- Persistence ---

    def dump(self):
        period = self._state["period"]
        return {
            "owner": self.owner,
            "candidates": [c.model_dump() for c in self._state["candidates"].values()],
            "next_id": self._state["next_id"],
            "period": period.model_dump() if period else None,
            "controller": self._state["controller"],
        }

    def load(self, data):
        candidates = [Candidate.model_validate(c) for c in data.get("candidates", [])]
        period = data.get("period")
        self._touch_all()
        self._state = {
            "candidates": {c.id: c for c in candidates},
            "next_id": data.get("next_id", len(candidates) + 1),
            "period": VotingPeriod.model_validate(period) if period else None,
            "controller": data.get("controller"),
        }
