import logging
from typing import Optional

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database

from ovs.config import (
    ELECTIONS_COLLECTION_NAME,
    MONGO_DB,
    MONGO_URI,
    USERS_COLLECTION_NAME,
    VOTES_COLLECTION_NAME,
)

logger = logging.getLogger(__name__)

_client: Optional[MongoClient] = None
_db: Optional[Database] = None


def get_db() -> Database:
    """Return the active database, connecting on first use."""
    global _client, _db
    if _db is None:
        _client = MongoClient(MONGO_URI, tz_aware=True)
        _db = _client[MONGO_DB]
        logger.info(f"Connected to MongoDB at {MONGO_URI}, database: {MONGO_DB}")
    return _db


def set_database(db: Optional[Database]) -> None:
    """Swap the active database (used by tests to inject mongomock)."""
    global _db
    _db = db


def election_collection():
    return get_db()[ELECTIONS_COLLECTION_NAME]


def vote_collection():
    return get_db()[VOTES_COLLECTION_NAME]


def user_collection():
    return get_db()[USERS_COLLECTION_NAME]


def ensure_indexes() -> None:
    # One vote per (user, election) is enforced here, not in application code
    vote_collection().create_index(
        [("user", ASCENDING), ("election", ASCENDING)], unique=True, name="user_election_unique"
    )
    vote_collection().create_index("election")
    user_collection().create_index("username", unique=True)
    user_collection().create_index("email", unique=True)
    election_collection().create_index("status")
    election_collection().create_index([("createdAt", DESCENDING)])
    logger.info("MongoDB indexes ensured")


def ping() -> bool:
    try:
        get_db().command("ping")
        return True
    except Exception as e:
        logger.error(f"MongoDB ping failed: {e}")
        return False


def close() -> None:
    global _client, _db
    if _client is not None:
        _client.close()
        logger.info("MongoDB connection closed")
    _client = None
    _db = None
