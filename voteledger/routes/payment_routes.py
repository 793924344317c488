from fastapi import APIRouter, Depends

from ..dependencies import get_election
from ..election import Election
from ..schemas import FeeUpdate, FreeVoteLimitUpdate, MaxPaidVotesUpdate, ReleaseRequest
from ..security import get_caller

payment_router = APIRouter(prefix="/payment", tags=["Payment"])


@payment_router.get("/fees")
def get_fees(election: Election = Depends(get_election)):
    return election.ledger.get_fee_config()


@payment_router.put("/fees")
def update_fees(update: FeeUpdate, caller: str = Depends(get_caller), election: Election = Depends(get_election)):
    election.ledger.update_fees(caller, update.fee_amount)
    return election.ledger.get_fee_config()


@payment_router.put("/max-paid-votes")
def update_max_paid_votes(
    update: MaxPaidVotesUpdate,
    caller: str = Depends(get_caller),
    election: Election = Depends(get_election),
):
    election.ledger.update_max_paid_votes(caller, update.max_paid_votes)
    return election.ledger.get_fee_config()


@payment_router.put("/free-vote-limit")
def update_free_vote_limit(
    update: FreeVoteLimitUpdate,
    caller: str = Depends(get_caller),
    election: Election = Depends(get_election),
):
    election.ledger.update_free_vote_limit(caller, update.free_vote_limit)
    return election.ledger.get_fee_config()


@payment_router.get("/paid-votes/{principal}")
def get_total_paid_votes(principal: str, election: Election = Depends(get_election)):
    return {"voter": principal, "paid_votes": election.ledger.get_total_paid_votes(principal)}


@payment_router.get("/escrow")
def get_escrow(election: Election = Depends(get_election)):
    return election.ledger.get_escrow()


@payment_router.post("/release")
def release_funds(
    request: ReleaseRequest,
    caller: str = Depends(get_caller),
    election: Election = Depends(get_election),
):
    escrow = election.ledger.release_funds(caller, request.winner_address)
    return {"message": "Funds released.", "escrow": escrow}


@payment_router.post("/release-to-winner")
def release_to_winner(caller: str = Depends(get_caller), election: Election = Depends(get_election)):
    escrow = election.controller.release_to_winner(caller)
    return {"message": "Funds released to the winner.", "escrow": escrow}
