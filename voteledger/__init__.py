from .controller import ElectionController
from .election import Election, create_election
from .ledger import FeeLedger
from .registry import CandidateRegistry

__all__ = [
    "CandidateRegistry",
    "Election",
    "ElectionController",
    "FeeLedger",
    "create_election",
]
