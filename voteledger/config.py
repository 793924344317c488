# voteledger/config.py
# Central place for election defaults and service settings.
# Every value can be overridden from the environment or a .env file.
import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()


def _int_env(name: str, default: Optional[int]) -> Optional[int]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return int(value)


# --- Election ---
# Owner of the registry and the ledger (the deployer account)
OWNER_ADDRESS = os.getenv("OWNER_ADDRESS", "0x0000000000000000000000000000000000000001")
# Principal the controller uses towards the registry and the ledger
CONTROLLER_ADDRESS = os.getenv("CONTROLLER_ADDRESS", "voting-controller")

INITIAL_CANDIDATE_NAME = os.getenv("INITIAL_CANDIDATE_NAME", "Initial Candidate")
INITIAL_CANDIDATE_ADDRESS = os.getenv("INITIAL_CANDIDATE_ADDRESS", OWNER_ADDRESS)

# Unix timestamps; voting stays closed until both are set
VOTING_START = _int_env("VOTING_START", None)
VOTING_END = _int_env("VOTING_END", None)

# --- Fees (smallest currency unit) ---
VOTE_FEE = _int_env("VOTE_FEE", 1)
FREE_VOTE_LIMIT = _int_env("FREE_VOTE_LIMIT", 5)
MAX_PAID_VOTES = _int_env("MAX_PAID_VOTES", 10)

# External transfer command for escrow release, e.g.
# "peer chaincode invoke ... {to} {amount}". Empty keeps payouts in process.
PAYOUT_COMMAND = os.getenv("PAYOUT_COMMAND", "")

# --- Security & JWT ---
# In production, use secure, environment-variable-based secrets
SECRET_KEY = os.getenv("SECRET_KEY", "a_very_secret_key_for_dev_only")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = _int_env("ACCESS_TOKEN_EXPIRE_MINUTES", 30)

# --- Persistence ---
# JSON snapshot of the whole election, rewritten after every commit
STATE_PATH = os.getenv("STATE_PATH", "")
# Event log mirror; disabled unless MONGO_URI is set
MONGO_URI = os.getenv("MONGO_URI", "")
MONGO_DB = os.getenv("MONGO_DB", "voting_system")
LOG_COLLECTION_NAME = "logs"

# --- HTTP ---
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",") if o.strip()]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


class Settings(BaseModel):
    owner_address: str = OWNER_ADDRESS
    controller_address: str = CONTROLLER_ADDRESS
    initial_candidate_name: Optional[str] = INITIAL_CANDIDATE_NAME
    initial_candidate_address: Optional[str] = INITIAL_CANDIDATE_ADDRESS
    voting_start: Optional[int] = VOTING_START
    voting_end: Optional[int] = VOTING_END
    vote_fee: int = Field(default=VOTE_FEE, ge=0)
    free_vote_limit: int = Field(default=FREE_VOTE_LIMIT, ge=0)
    max_paid_votes: int = Field(default=MAX_PAID_VOTES, ge=0)
    payout_command: str = PAYOUT_COMMAND
    secret_key: str = SECRET_KEY
    algorithm: str = ALGORITHM
    access_token_expire_minutes: int = ACCESS_TOKEN_EXPIRE_MINUTES
    state_path: str = STATE_PATH
    mongo_uri: str = MONGO_URI
    mongo_db: str = MONGO_DB
    cors_origins: List[str] = CORS_ORIGINS
    log_level: str = LOG_LEVEL
