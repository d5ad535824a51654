from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator

from ovs.models.base import CamelModel, as_utc
from ovs.models.election_model import Candidate, ElectionStatus


class Vote(CamelModel):
    id: str
    user: str
    election: str
    candidate: str
    voted_at: datetime

    @field_validator("voted_at")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class VoteIn(CamelModel):
    candidate_id: str = Field(..., min_length=1)
    fingerprint_data: Optional[str] = None


class CandidateResult(Candidate):
    votes: int = 0


class ResultOutcome(str, Enum):
    WINNER = "winner"
    TIE = "tie"
    NO_VOTES = "no_votes"


class ElectionResults(CamelModel):
    id: str
    title: str
    description: str
    start_date: datetime
    end_date: datetime
    status: Optional[ElectionStatus] = None
    created_by: str
    candidates: List[CandidateResult]
    total_votes: int
    outcome: ResultOutcome
    winners: List[str] = Field(default_factory=list)
