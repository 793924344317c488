import pytest
from fastapi.testclient import TestClient

from voteledger.clock import ManualClock
from voteledger.config import Settings
from voteledger.election import create_election
from voteledger.main import create_app
from voteledger.security import create_access_token

OWNER = "0xowner"
ALICE = "0xalice"
BOB = "0xbob"
CAROL = "0xcarol"

START = 1_000
END = 2_000


@pytest.fixture
def settings():
    return Settings(
        owner_address=OWNER,
        controller_address="voting-controller",
        initial_candidate_name=None,
        initial_candidate_address=None,
        voting_start=START,
        voting_end=END,
        vote_fee=1,
        free_vote_limit=5,
        max_paid_votes=10,
        payout_command="",
        secret_key="test-secret",
        state_path="",
        mongo_uri="",
    )


@pytest.fixture
def clock():
    return ManualClock(START)


@pytest.fixture
def election(settings, clock):
    return create_election(settings, clock=clock)


@pytest.fixture
def registry(election):
    return election.registry


@pytest.fixture
def ledger(election):
    return election.ledger


@pytest.fixture
def controller(election):
    return election.controller


@pytest.fixture
def client(settings, election):
    app = create_app(settings, election=election)
    return TestClient(app)


@pytest.fixture
def auth(settings):
    def headers(principal):
        token = create_access_token({"sub": principal}, settings)
        return {"Authorization": f"Bearer {token}"}

    return headers
