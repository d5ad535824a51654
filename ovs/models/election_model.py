from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator, model_validator

from ovs.models.base import CamelModel, as_utc


class ElectionStatus(str, Enum):
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    ENDED = "ended"


class Candidate(CamelModel):
    id: str
    name: str
    description: str = ""
    image_url: Optional[str] = None


class Election(CamelModel):
    id: str
    title: str
    description: str
    image_url: Optional[str] = None
    candidates: List[Candidate] = Field(default_factory=list)
    start_date: datetime
    end_date: datetime
    status: Optional[ElectionStatus] = None
    created_by: str
    created_at: datetime

    @field_validator("start_date", "end_date", "created_at")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return as_utc(value)

    def get_candidate(self, candidate_id: str) -> Optional[Candidate]:
        for candidate in self.candidates:
            if candidate.id == candidate_id:
                return candidate
        return None


class ElectionOut(Election):
    user_has_voted: bool = False


# --- Request contracts ---

class CandidateIn(CamelModel):
    id: Optional[str] = None
    name: str = Field(..., examples=["Jane Doe"])
    description: str = ""
    image_url: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Candidate name is required")
        return value

    @field_validator("description")
    @classmethod
    def _strip_description(cls, value: str) -> str:
        return value.strip()


def _check_unique_candidate_ids(candidates: Optional[List[CandidateIn]]) -> None:
    if not candidates:
        return
    ids = [c.id for c in candidates if c.id]
    if len(ids) != len(set(ids)):
        raise ValueError("Candidate ids must be unique within an election")


class ElectionCreate(CamelModel):
    title: str = Field(..., examples=["Student Council 2025"])
    description: str = Field(..., examples=["Annual student council election"])
    image_url: Optional[str] = None
    candidates: List[CandidateIn] = Field(default_factory=list)
    start_date: datetime
    end_date: datetime

    @field_validator("title", "description")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Field is required")
        return value

    @field_validator("start_date", "end_date")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return as_utc(value)

    @model_validator(mode="after")
    def _check_window(self):
        if self.end_date <= self.start_date:
            raise ValueError("endDate must be after startDate")
        _check_unique_candidate_ids(self.candidates)
        return self


class ElectionUpdate(CamelModel):
    """Partial update. Supplying ``candidates`` replaces the whole set."""

    title: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    candidates: Optional[List[CandidateIn]] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @field_validator("title", "description")
    @classmethod
    def _not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.strip()
        if not value:
            raise ValueError("Field cannot be empty")
        return value

    @field_validator("start_date", "end_date")
    @classmethod
    def _utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value) if value is not None else value

    @model_validator(mode="after")
    def _check_candidates(self):
        _check_unique_candidate_ids(self.candidates)
        return self
