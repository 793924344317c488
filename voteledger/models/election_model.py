from enum import Enum

from pydantic import BaseModel, Field


class Candidate(BaseModel):
    id: int = Field(..., ge=1)
    name: str
    address: str
    total_votes: int = Field(default=0, ge=0)
    active: bool = True

    def details(self):
        """Tuple in the order clients render it: (id, address, name, total_votes, active)."""
        return (self.id, self.address, self.name, self.total_votes, self.active)


class VotingPeriod(BaseModel):
    start: int = Field(..., json_schema_extra={"example": 1735689600})
    end: int = Field(..., json_schema_extra={"example": 1735776000})

    def contains(self, now: int) -> bool:
        return self.start <= now < self.end


class Phase(str, Enum):
    NOT_STARTED = "NotStarted"
    OPEN = "Open"
    CLOSED = "Closed"
    FINALIZED = "Finalized"
