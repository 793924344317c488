from fastapi import APIRouter, Depends, Query

from ..dependencies import get_election
from ..election import Election
from ..schemas import CandidateCreate, PeriodUpdate, PhaseOut, WinnerOut
from ..security import get_caller

router = APIRouter(prefix="/election", tags=["Election"])


@router.get("/candidates")
def get_all_candidates(election: Election = Depends(get_election)):
    registry = election.registry
    with election.transactions.reading():
        candidates = [registry.get_candidate(cid) for cid in registry.get_all_candidates()]
    return {"candidates": candidates}


@router.get("/candidates/{candidate_id}")
def get_candidate_details(candidate_id: int, election: Election = Depends(get_election)):
    return election.registry.get_candidate(candidate_id)


@router.post("/candidates", status_code=201)
def add_candidate(
    candidate: CandidateCreate,
    caller: str = Depends(get_caller),
    election: Election = Depends(get_election),
):
    candidate_id = election.registry.add_candidate(caller, candidate.name, candidate.address)
    return {"message": "Candidate added successfully!", "candidate_id": candidate_id}


@router.post("/candidates/{candidate_id}/deactivate")
def deactivate_candidate(
    candidate_id: int,
    caller: str = Depends(get_caller),
    election: Election = Depends(get_election),
):
    election.registry.deactivate_candidate(caller, candidate_id)
    return {"message": "Candidate deactivated.", "candidate_id": candidate_id}


@router.get("/period")
def get_voting_period(election: Election = Depends(get_election)):
    return {"period": election.registry.get_voting_period()}


@router.put("/period")
def update_voting_period(
    period: PeriodUpdate,
    caller: str = Depends(get_caller),
    election: Election = Depends(get_election),
):
    election.registry.update_voting_period(caller, period.start, period.end)
    return {"message": "Voting period updated.", "period": election.registry.get_voting_period()}


@router.get("/phase", response_model=PhaseOut)
def get_phase(election: Election = Depends(get_election)):
    with election.transactions.reading():
        period = election.registry.get_voting_period()
        phase = election.controller.phase()
    return PhaseOut(
        phase=phase.value,
        now=election.transactions.clock.now(),
        start=period.start if period else None,
        end=period.end if period else None,
    )


@router.get("/winner", response_model=WinnerOut)
def get_winner(election: Election = Depends(get_election)):
    winner = election.controller.get_winner()
    return WinnerOut(id=winner.id, name=winner.name, address=winner.address, total_votes=winner.total_votes)


@router.get("/events")
def get_events(since: int = Query(0, ge=0), election: Election = Depends(get_election)):
    with election.transactions.reading():
        events = election.events.events(since)
    return {"events": events}
