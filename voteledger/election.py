# voteledger/election.py
# Wires the registry, the ledger and the controller into one deployed election.
import logging

from .clock import SystemClock
from .config import Settings
from .controller import ElectionController
from .events import EventLog
from .ledger import FeeLedger
from .payout import BalancePayout, CommandPayout
from .registry import CandidateRegistry
from .transaction import Store, TransactionManager

logger = logging.getLogger(__name__)


class Election:
    def __init__(self, registry: CandidateRegistry, ledger: FeeLedger, controller: ElectionController):
        self.registry = registry
        self.ledger = ledger
        self.controller = controller

    @property
    def transactions(self) -> TransactionManager:
        return self.controller.transactions

    @property
    def events(self) -> EventLog:
        return self.transactions.event_log

    def _stores(self):
        stores = [self.registry, self.ledger, self.controller]
        if isinstance(self.ledger.payout, Store):
            stores.append(self.ledger.payout)
        return stores

    def dump(self, events: bool = True):
        with self.transactions.reading():
            data = {
                "registry": self.registry.dump(),
                "ledger": self.ledger.dump(),
                "controller": self.controller.dump(),
            }
            if events:
                data["events"] = self.events.dump()
            if isinstance(self.ledger.payout, BalancePayout):
                data["accounts"] = self.ledger.payout.dump()
        return data

    def load(self, data):
        with self.transactions.atomic(*self._stores()):
            self.registry.load(data["registry"])
            self.ledger.load(data["ledger"])
            self.controller.load(data["controller"])
            if isinstance(self.ledger.payout, BalancePayout):
                self.ledger.payout.load(data.get("accounts"))
            if "events" in data:
                self.events.load(data["events"])
        self.registry.owner = data["registry"].get("owner", self.registry.owner)
        self.ledger.owner = data["ledger"].get("owner", self.ledger.owner)

        # registry and ledger bindings name the stored address
        address = data["controller"].get("address")
        if address and address != self.controller.address:
            logger.warning(f"Controller address {self.controller.address} differs from the stored {address}; keeping {address}")
            self.controller.address = address


def create_election(settings: Settings = None, clock=None, payout=None, sinks=None) -> Election:
    """
    Deploy a fresh election: registry (with the initial candidate), fee
    ledger and controller, with the controller bound to both.
    """
    settings = settings if settings is not None else Settings()
    transactions = TransactionManager(EventLog(clock if clock is not None else SystemClock(), sinks))

    if payout is None:
        payout = CommandPayout(settings.payout_command) if settings.payout_command else BalancePayout()

    initial_candidate = None
    if settings.initial_candidate_name and settings.initial_candidate_address:
        initial_candidate = (settings.initial_candidate_name, settings.initial_candidate_address)
    voting_period = None
    if settings.voting_start is not None and settings.voting_end is not None:
        voting_period = (settings.voting_start, settings.voting_end)

    owner = settings.owner_address
    registry = CandidateRegistry(owner, transactions, initial_candidate, voting_period)
    ledger = FeeLedger(
        owner,
        settings.vote_fee,
        settings.free_vote_limit,
        settings.max_paid_votes,
        payout=payout,
        transactions=transactions,
    )
    controller = ElectionController(registry, ledger, settings.controller_address)
    registry.bind_controller(owner, controller.address)
    ledger.bind_controller(owner, controller.address)
    logger.info(f"Election deployed by {owner} (fee={settings.vote_fee}, free={settings.free_vote_limit}, paid={settings.max_paid_votes})")
    return Election(registry, ledger, controller)
