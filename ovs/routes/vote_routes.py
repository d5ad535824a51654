from fastapi import APIRouter, Depends

from ovs.config import API_PREFIX
from ovs.dependencies import get_current_user, get_results_aggregator, get_voting_engine
from ovs.models.user_model import User
from ovs.models.vote_model import ElectionResults, Vote, VoteIn
from ovs.results import ResultsAggregator
from ovs.voting import VotingEngine

vote_router = APIRouter(prefix=f"{API_PREFIX}/elections", tags=["Vote"])


@vote_router.post("/{election_id}/vote", response_model=Vote, status_code=201)
def cast_vote(
    election_id: str,
    vote: VoteIn,
    user: User = Depends(get_current_user),
    engine: VotingEngine = Depends(get_voting_engine),
):
    """
    Casts the caller's vote. Unverified callers must send ``fingerprintData``
    matching their enrolled template.
    """
    return engine.cast_vote(user.id, election_id, vote.candidate_id, vote.fingerprint_data)


@vote_router.get("/{election_id}/results", response_model=ElectionResults)
def get_results(
    election_id: str,
    user: User = Depends(get_current_user),
    aggregator: ResultsAggregator = Depends(get_results_aggregator),
):
    return aggregator.compute_results(election_id)
