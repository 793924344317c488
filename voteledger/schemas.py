from typing import Optional

from pydantic import BaseModel, Field


class CandidateCreate(BaseModel):
    name: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)


class PeriodUpdate(BaseModel):
    start: int
    end: int


class VoteIn(BaseModel):
    candidate_id: int
    payment: int = Field(default=0, ge=0)


class FeeUpdate(BaseModel):
    fee_amount: int = Field(..., ge=0)


class MaxPaidVotesUpdate(BaseModel):
    max_paid_votes: int = Field(..., ge=0)


class FreeVoteLimitUpdate(BaseModel):
    free_vote_limit: int = Field(..., ge=0)


class ReleaseRequest(BaseModel):
    winner_address: str = Field(..., min_length=1)


class WinnerOut(BaseModel):
    id: int
    name: str
    address: str
    total_votes: int


class PhaseOut(BaseModel):
    phase: str
    now: int
    start: Optional[int] = None
    end: Optional[int] = None
