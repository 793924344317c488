from fastapi import APIRouter, Depends

from ..dependencies import get_election
from ..election import Election
from ..schemas import VoteIn
from ..security import get_caller

vote_router = APIRouter(prefix="/vote", tags=["Vote"])


@vote_router.post("/register", status_code=201)
def register_voter(caller: str = Depends(get_caller), election: Election = Depends(get_election)):
    voter = election.controller.register_voter(caller)
    return {"message": "Voter registered.", "voter": voter}


@vote_router.post("/cast")
def cast_vote(vote: VoteIn, caller: str = Depends(get_caller), election: Election = Depends(get_election)):
    """
    Casts a vote for the caller. Free votes are used first; once they are
    spent each vote needs a payment of at least the current fee.
    """
    receipt = election.controller.vote(caller, vote.candidate_id, vote.payment)
    return {"message": "Vote cast successfully!", "receipt": receipt}


@vote_router.get("/voters")
def get_all_voters(election: Election = Depends(get_election)):
    return {"voters": election.controller.get_all_voters()}


@vote_router.get("/voters/{principal}")
def get_voter(principal: str, election: Election = Depends(get_election)):
    return election.controller.get_voter(principal)
