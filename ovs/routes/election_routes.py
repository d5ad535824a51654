import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ovs.config import API_PREFIX
from ovs.dependencies import (
    get_current_user,
    get_election_repository,
    get_vote_repository,
    require_admin,
)
from ovs.exceptions import NotFound, ValidationFailed
from ovs.lifecycle import derive_status, refresh_election, refresh_elections
from ovs.models.base import utcnow
from ovs.models.election_model import ElectionCreate, ElectionOut, ElectionStatus, ElectionUpdate
from ovs.models.user_model import User
from ovs.schemas import MessageResponse
from ovs.storage import ElectionRepository, VoteRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix=f"{API_PREFIX}/elections", tags=["Election"])


@router.post("", response_model=ElectionOut, status_code=201)
def create_election(
    election: ElectionCreate,
    admin: User = Depends(require_admin),
    elections: ElectionRepository = Depends(get_election_repository),
):
    status = derive_status(utcnow(), election.start_date, election.end_date)
    created = elections.create(election, created_by=admin.id, status=status)
    return ElectionOut(**created.model_dump())


@router.get("", response_model=List[ElectionOut])
def get_elections(
    status: Optional[str] = Query(None),
    user: User = Depends(get_current_user),
    elections: ElectionRepository = Depends(get_election_repository),
    votes: VoteRepository = Depends(get_vote_repository),
):
    # Refresh every election first so the filter sees current statuses
    items = refresh_elections(elections, elections.list())
    if status in {s.value for s in ElectionStatus}:
        items = [e for e in items if e.status == ElectionStatus(status)]

    voted = votes.voted_elections(user.id, [e.id for e in items])
    return [ElectionOut(**e.model_dump(), user_has_voted=e.id in voted) for e in items]


@router.get("/{election_id}", response_model=ElectionOut)
def get_election(
    election_id: str,
    user: User = Depends(get_current_user),
    elections: ElectionRepository = Depends(get_election_repository),
    votes: VoteRepository = Depends(get_vote_repository),
):
    election = elections.get(election_id)
    if election is None:
        raise NotFound("Election not found")
    refresh_election(elections, election)
    return ElectionOut(**election.model_dump(), user_has_voted=votes.has_voted(user.id, election.id))


@router.put("/{election_id}", response_model=ElectionOut)
def update_election(
    election_id: str,
    changes: ElectionUpdate,
    admin: User = Depends(require_admin),
    elections: ElectionRepository = Depends(get_election_repository),
    votes: VoteRepository = Depends(get_vote_repository),
):
    election = elections.get(election_id)
    if election is None:
        raise NotFound("Election not found")

    fields = changes.model_dump(exclude_unset=True, exclude={"candidates"})
    # image_url may be cleared with an explicit null, the other fields may not
    fields = {k: v for k, v in fields.items() if v is not None or k == "image_url"}

    start_date = fields.get("start_date", election.start_date)
    end_date = fields.get("end_date", election.end_date)
    if end_date <= start_date:
        raise ValidationFailed(errors={"endDate": "endDate must be after startDate"})
    fields["status"] = derive_status(utcnow(), start_date, end_date)

    if changes.candidates is not None:
        # Votes must keep pointing at a candidate of this election
        kept_ids = {c.id for c in changes.candidates if c.id}
        dropped = {v.candidate for v in votes.list_for_election(election.id)} - kept_ids
        if dropped:
            raise ValidationFailed(
                errors={"candidates": f"Cannot remove candidates that already have votes: {sorted(dropped)}"}
            )

    updated = elections.update(election.id, fields, candidates=changes.candidates)
    if updated is None:
        raise NotFound("Election not found")
    changed = sorted(fields) + (["candidates"] if changes.candidates is not None else [])
    logger.info(f"Election {election.id} updated by {admin.id}: {changed}")
    return ElectionOut(**updated.model_dump(), user_has_voted=votes.has_voted(admin.id, updated.id))


@router.delete("/{election_id}", response_model=MessageResponse)
def delete_election(
    election_id: str,
    admin: User = Depends(require_admin),
    elections: ElectionRepository = Depends(get_election_repository),
    votes: VoteRepository = Depends(get_vote_repository),
):
    election = elections.get(election_id)
    if election is None:
        raise NotFound("Election not found")
    # Election first, so a vote racing the delete is still swept up below
    elections.delete(election.id)
    removed_votes = votes.delete_for_election(election.id)
    logger.info(f"Election {election.id} deleted by {admin.id} with {removed_votes} votes")
    return MessageResponse(message="Election removed")
