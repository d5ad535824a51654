# ovs/storage.py
# Narrow storage contracts the election and voting logic depends on.
# MongoDB implementations live in storage_mongo.py.
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Protocol, Set

from ovs.models.election_model import CandidateIn, Election, ElectionCreate, ElectionStatus
from ovs.models.user_model import User, UserRole
from ovs.models.vote_model import Vote


class ElectionRepository(Protocol):
    def create(self, data: ElectionCreate, created_by: str, status: ElectionStatus) -> Election:
        ...

    def get(self, election_id: str) -> Optional[Election]:
        ...

    def list(self) -> List[Election]:
        """All elections, newest first. Callers filter on refreshed status."""
        ...

    def update(
        self,
        election_id: str,
        changes: Dict[str, Any],
        candidates: Optional[List[CandidateIn]] = None,
    ) -> Optional[Election]:
        """Apply field changes; ``candidates`` replaces the whole set when given.

        Candidates without an id are assigned a fresh one.
        """
        ...

    def set_status(self, election_id: str, status: ElectionStatus) -> None:
        ...

    def delete(self, election_id: str) -> bool:
        ...


class VoteRepository(Protocol):
    def insert(self, user_id: str, election_id: str, candidate_id: str, voted_at: datetime) -> Vote:
        """Atomically record a vote.

        Raises DuplicateVote when the (user, election) pair already has one;
        the check must be done by the store itself, never read-then-write.
        """
        ...

    def list_for_election(self, election_id: str) -> List[Vote]:
        ...

    def has_voted(self, user_id: str, election_id: str) -> bool:
        ...

    def voted_elections(self, user_id: str, election_ids: Iterable[str]) -> Set[str]:
        ...

    def delete_for_election(self, election_id: str) -> int:
        ...


class UserRepository(Protocol):
    def create(self, data: Dict[str, Any]) -> User:
        """Insert a user; raises ValidationFailed on duplicate username/email."""
        ...

    def get(self, user_id: str) -> Optional[User]:
        ...

    def find_by_login(self, username: Optional[str], email: Optional[str]) -> Optional[User]:
        ...

    def list(self) -> List[User]:
        ...

    def set_fingerprint_verified(self, user_id: str, verified: bool) -> Optional[User]:
        ...

    def set_fingerprint_template(self, user_id: str, template: str) -> Optional[User]:
        ...

    def set_role(self, user_id: str, role: UserRole) -> Optional[User]:
        ...

    def delete(self, user_id: str) -> bool:
        ...
