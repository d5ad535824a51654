import logging
from datetime import datetime
from typing import Callable, Optional

from ovs.exceptions import (
    CandidateNotFound,
    ElectionNotOngoing,
    NotFound,
    VerificationDataRequired,
    VerificationFailed,
    VerificationNotEnrolled,
)
from ovs.lifecycle import refresh_election
from ovs.models.base import utcnow
from ovs.models.election_model import ElectionStatus
from ovs.models.user_model import User
from ovs.models.vote_model import Vote
from ovs.security import fingerprint_matches
from ovs.storage import ElectionRepository, UserRepository, VoteRepository

logger = logging.getLogger(__name__)

FingerprintMatcher = Callable[[str, str], bool]


class VotingEngine:
    """Validates and records exactly one vote per user per election."""

    def __init__(
        self,
        users: UserRepository,
        elections: ElectionRepository,
        votes: VoteRepository,
        matcher: FingerprintMatcher = fingerprint_matches,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.users = users
        self.elections = elections
        self.votes = votes
        self.matcher = matcher
        self.clock = clock

    def verify_voter(self, user: User, fingerprint_data: Optional[str]) -> User:
        """Run the fingerprint gate for a voter who is not yet verified.

        A successful match is persisted immediately and is never rolled back,
        whatever happens to the vote afterwards.
        """
        if user.is_fingerprint_verified:
            return user
        if not fingerprint_data:
            raise VerificationDataRequired()
        if not user.fingerprint_template:
            raise VerificationNotEnrolled()
        if not self.matcher(user.fingerprint_template, fingerprint_data):
            logger.warning(f"Fingerprint verification failed for user {user.id}")
            raise VerificationFailed()

        verified = self.users.set_fingerprint_verified(user.id, True)
        if verified is None:
            raise NotFound("User not found.")
        logger.info(f"User {user.id} fingerprint verified while voting")
        return verified

    def cast_vote(
        self,
        voter_id: str,
        election_id: str,
        candidate_id: str,
        fingerprint_data: Optional[str] = None,
    ) -> Vote:
        user = self.users.get(voter_id)
        if user is None:
            raise NotFound("User not found.")

        self.verify_voter(user, fingerprint_data)

        election = self.elections.get(election_id)
        if election is None:
            raise NotFound("Election not found")

        # Never trust the stored status
        refresh_election(self.elections, election, self.clock())
        if election.status != ElectionStatus.ONGOING:
            raise ElectionNotOngoing(election.status)

        if election.get_candidate(candidate_id) is None:
            raise CandidateNotFound()

        vote = self.votes.insert(user.id, election.id, candidate_id, self.clock())
        logger.info(f"Vote {vote.id} cast by user {user.id} in election {election.id}")
        return vote
