from pydantic import BaseModel, Field


class Voter(BaseModel):
    principal: str
    registered: bool = False
    free_votes_used: int = Field(default=0, ge=0)
    paid_votes_used: int = Field(default=0, ge=0)  # mirrored from the fee ledger on read


class VoteReceipt(BaseModel):
    voter: str
    candidate_id: int
    paid: bool
    payment: int = 0
    candidate_total_votes: int
