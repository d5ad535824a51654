import logging
from collections import Counter
from typing import List, Sequence, Tuple

from ovs.exceptions import NotFound
from ovs.lifecycle import refresh_election
from ovs.models.vote_model import CandidateResult, ElectionResults, ResultOutcome
from ovs.storage import ElectionRepository, VoteRepository

logger = logging.getLogger(__name__)


def determine_outcome(candidates: Sequence[CandidateResult]) -> Tuple[ResultOutcome, List[str]]:
    """Winner, tie or no votes, with the ids of the leading candidates."""
    top = max((c.votes for c in candidates), default=0)
    if top == 0:
        return ResultOutcome.NO_VOTES, []
    leaders = [c.id for c in candidates if c.votes == top]
    if len(leaders) == 1:
        return ResultOutcome.WINNER, leaders
    return ResultOutcome.TIE, leaders


class ResultsAggregator:
    def __init__(self, elections: ElectionRepository, votes: VoteRepository):
        self.elections = elections
        self.votes = votes

    def compute_results(self, election_id: str) -> ElectionResults:
        election = self.elections.get(election_id)
        if election is None:
            raise NotFound("Election not found")
        refresh_election(self.elections, election)

        # One read of the ledger so every count comes from the same snapshot
        ballots = self.votes.list_for_election(election.id)
        counts = Counter(vote.candidate for vote in ballots)

        candidates = [
            CandidateResult(**candidate.model_dump(), votes=counts.get(candidate.id, 0))
            for candidate in election.candidates
        ]
        outcome, winners = determine_outcome(candidates)
        logger.debug(f"Results for election {election.id}: {len(ballots)} votes, {outcome.value}")
        return ElectionResults(
            id=election.id,
            title=election.title,
            description=election.description,
            start_date=election.start_date,
            end_date=election.end_date,
            status=election.status,
            created_by=election.created_by,
            candidates=candidates,
            total_votes=len(ballots),
            outcome=outcome,
            winners=winners,
        )
