from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ovs.database.connection import election_collection, user_collection, vote_collection
from ovs.exceptions import Forbidden, NotAuthenticated
from ovs.models.user_model import User
from ovs.results import ResultsAggregator
from ovs.security import decode_access_token
from ovs.storage_mongo import MongoElectionRepository, MongoUserRepository, MongoVoteRepository
from ovs.voting import VotingEngine

bearer_scheme = HTTPBearer(auto_error=False)


def get_election_repository() -> MongoElectionRepository:
    return MongoElectionRepository(election_collection())


def get_vote_repository() -> MongoVoteRepository:
    return MongoVoteRepository(vote_collection())


def get_user_repository() -> MongoUserRepository:
    return MongoUserRepository(user_collection())


def get_voting_engine(
    users: MongoUserRepository = Depends(get_user_repository),
    elections: MongoElectionRepository = Depends(get_election_repository),
    votes: MongoVoteRepository = Depends(get_vote_repository),
) -> VotingEngine:
    return VotingEngine(users, elections, votes)


def get_results_aggregator(
    elections: MongoElectionRepository = Depends(get_election_repository),
    votes: MongoVoteRepository = Depends(get_vote_repository),
) -> ResultsAggregator:
    return ResultsAggregator(elections, votes)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    users: MongoUserRepository = Depends(get_user_repository),
) -> User:
    if credentials is None:
        raise NotAuthenticated("Not authorized, no token")
    user_id = decode_access_token(credentials.credentials)
    if not user_id:
        raise NotAuthenticated()
    user = users.get(user_id)
    if user is None:
        raise NotAuthenticated("Not authorized, user not found")
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise Forbidden()
    return user
