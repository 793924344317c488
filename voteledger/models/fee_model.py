from typing import Optional

from pydantic import BaseModel, Field


class FeeConfig(BaseModel):
    fee_amount: int = Field(..., ge=0, json_schema_extra={"example": 1})
    free_vote_limit: int = Field(..., ge=0, json_schema_extra={"example": 5})
    max_paid_votes: int = Field(..., ge=0, json_schema_extra={"example": 10})


class Escrow(BaseModel):
    balance: int = Field(default=0, ge=0)
    released: bool = False
    released_to: Optional[str] = None
    transaction_id: Optional[str] = None
