# storage_mongo.py
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Set

from bson import ObjectId
from bson.errors import InvalidId
from pydantic.alias_generators import to_camel
from pymongo import DESCENDING, ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from ovs.exceptions import DuplicateVote, ValidationFailed
from ovs.models.base import utcnow
from ovs.models.election_model import Candidate, CandidateIn, Election, ElectionCreate, ElectionStatus
from ovs.models.user_model import User, UserRole
from ovs.models.vote_model import Vote

logger = logging.getLogger(__name__)


def to_object_id(value: Any) -> Optional[ObjectId]:
    """Parse an id string, returning None when it is not a valid ObjectId."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def _candidate_docs(candidates: List[CandidateIn]) -> List[Dict[str, Any]]:
    docs = []
    for cand in candidates:
        if cand.id:
            cand_id = to_object_id(cand.id)
            if cand_id is None:
                raise ValidationFailed(errors={"candidates": f"Invalid candidate id: {cand.id}"})
        else:
            cand_id = ObjectId()
        docs.append({
            "_id": cand_id,
            "name": cand.name,
            "description": cand.description,
            "imageUrl": cand.image_url,
        })
    return docs


def _election_from_doc(doc: Dict[str, Any]) -> Election:
    return Election(
        id=str(doc["_id"]),
        title=doc["title"],
        description=doc.get("description", ""),
        image_url=doc.get("imageUrl"),
        candidates=[
            Candidate(
                id=str(c["_id"]),
                name=c["name"],
                description=c.get("description") or "",
                image_url=c.get("imageUrl"),
            )
            for c in doc.get("candidates", [])
        ],
        start_date=doc["startDate"],
        end_date=doc["endDate"],
        status=doc.get("status"),
        created_by=str(doc["createdBy"]),
        created_at=doc["createdAt"],
    )


def _vote_from_doc(doc: Dict[str, Any]) -> Vote:
    return Vote(
        id=str(doc["_id"]),
        user=str(doc["user"]),
        election=str(doc["election"]),
        candidate=str(doc["candidate"]),
        voted_at=doc["votedAt"],
    )


def _user_from_doc(doc: Dict[str, Any]) -> User:
    return User(
        id=str(doc["_id"]),
        username=doc["username"],
        email=doc["email"],
        name=doc.get("name"),
        password_hash=doc["passwordHash"],
        role=doc.get("role", UserRole.USER.value),
        is_fingerprint_verified=doc.get("isFingerprintVerified", False),
        fingerprint_template=doc.get("fingerprintTemplate"),
        created_at=doc.get("createdAt"),
    )


class MongoElectionRepository:
    def __init__(self, collection: Collection):
        self.collection = collection

    def create(self, data: ElectionCreate, created_by: str, status: ElectionStatus) -> Election:
        doc = {
            "title": data.title,
            "description": data.description,
            "imageUrl": data.image_url,
            "candidates": _candidate_docs(data.candidates),
            "startDate": data.start_date,
            "endDate": data.end_date,
            "status": status.value,
            "createdBy": to_object_id(created_by),
            "createdAt": utcnow(),
        }
        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        logger.info(f"Election {result.inserted_id} created by {created_by}")
        return _election_from_doc(doc)

    def get(self, election_id: str) -> Optional[Election]:
        oid = to_object_id(election_id)
        if oid is None:
            return None
        doc = self.collection.find_one({"_id": oid})
        return _election_from_doc(doc) if doc else None

    def list(self) -> List[Election]:
        cursor = self.collection.find({}).sort("createdAt", DESCENDING)
        return [_election_from_doc(doc) for doc in cursor]

    def update(
        self,
        election_id: str,
        changes: Dict[str, Any],
        candidates: Optional[List[CandidateIn]] = None,
    ) -> Optional[Election]:
        oid = to_object_id(election_id)
        if oid is None:
            return None
        update = {}
        for field, value in changes.items():
            if isinstance(value, ElectionStatus):
                value = value.value
            update[to_camel(field)] = value
        if candidates is not None:
            update["candidates"] = _candidate_docs(candidates)
        if not update:
            return self.get(election_id)
        doc = self.collection.find_one_and_update(
            {"_id": oid}, {"$set": update}, return_document=ReturnDocument.AFTER
        )
        return _election_from_doc(doc) if doc else None

    def set_status(self, election_id: str, status: ElectionStatus) -> None:
        self.collection.update_one({"_id": to_object_id(election_id)}, {"$set": {"status": status.value}})

    def delete(self, election_id: str) -> bool:
        oid = to_object_id(election_id)
        if oid is None:
            return False
        return self.collection.delete_one({"_id": oid}).deleted_count > 0


class MongoVoteRepository:
    def __init__(self, collection: Collection):
        self.collection = collection

    def insert(self, user_id: str, election_id: str, candidate_id: str, voted_at: datetime) -> Vote:
        doc = {
            "user": to_object_id(user_id),
            "election": to_object_id(election_id),
            "candidate": to_object_id(candidate_id),
            "votedAt": voted_at,
        }
        # The (user, election) unique index rejects a second vote atomically
        try:
            result = self.collection.insert_one(doc)
        except DuplicateKeyError:
            logger.warning(f"Duplicate vote rejected: user {user_id}, election {election_id}")
            raise DuplicateVote()
        doc["_id"] = result.inserted_id
        return _vote_from_doc(doc)

    def list_for_election(self, election_id: str) -> List[Vote]:
        cursor = self.collection.find({"election": to_object_id(election_id)})
        return [_vote_from_doc(doc) for doc in cursor]

    def has_voted(self, user_id: str, election_id: str) -> bool:
        query = {"user": to_object_id(user_id), "election": to_object_id(election_id)}
        return self.collection.find_one(query, {"_id": 1}) is not None

    def voted_elections(self, user_id: str, election_ids: Iterable[str]) -> Set[str]:
        oids = [oid for oid in (to_object_id(e) for e in election_ids) if oid is not None]
        if not oids:
            return set()
        cursor = self.collection.find(
            {"user": to_object_id(user_id), "election": {"$in": oids}}, {"election": 1}
        )
        return {str(doc["election"]) for doc in cursor}

    def delete_for_election(self, election_id: str) -> int:
        result = self.collection.delete_many({"election": to_object_id(election_id)})
        return result.deleted_count


class MongoUserRepository:
    def __init__(self, collection: Collection):
        self.collection = collection

    def create(self, data: Dict[str, Any]) -> User:
        """
        Insert a user record.

        Args:
            data: snake_case user fields (username, email, password_hash, ...)

        Returns:
            The stored User

        Raises:
            ValidationFailed: username or email is already taken
        """
        doc = {to_camel(key): value for key, value in data.items()}
        doc.setdefault("role", UserRole.USER.value)
        doc.setdefault("isFingerprintVerified", False)
        doc["createdAt"] = utcnow()
        if isinstance(doc["role"], UserRole):
            doc["role"] = doc["role"].value
        try:
            result = self.collection.insert_one(doc)
        except DuplicateKeyError:
            field = "email" if self.collection.find_one({"email": doc["email"]}) else "username"
            logger.warning(f"Registration rejected, duplicate {field}")
            raise ValidationFailed(
                "User already exists",
                errors={field: f"User already exists with this {field}"},
            )
        doc["_id"] = result.inserted_id
        logger.info(f"User {doc['username']} ({result.inserted_id}) created")
        return _user_from_doc(doc)

    def get(self, user_id: str) -> Optional[User]:
        oid = to_object_id(user_id)
        if oid is None:
            return None
        doc = self.collection.find_one({"_id": oid})
        return _user_from_doc(doc) if doc else None

    def find_by_login(self, username: Optional[str], email: Optional[str]) -> Optional[User]:
        # A username may also be typed into the email field and vice versa
        conditions = []
        if username:
            conditions.append({"username": username})
        if email or username:
            conditions.append({"email": email or username})
        if not conditions:
            return None
        doc = self.collection.find_one({"$or": conditions})
        return _user_from_doc(doc) if doc else None

    def list(self) -> List[User]:
        return [_user_from_doc(doc) for doc in self.collection.find({}).sort("createdAt", DESCENDING)]

    def _set(self, user_id: str, fields: Dict[str, Any]) -> Optional[User]:
        oid = to_object_id(user_id)
        if oid is None:
            return None
        doc = self.collection.find_one_and_update(
            {"_id": oid}, {"$set": fields}, return_document=ReturnDocument.AFTER
        )
        return _user_from_doc(doc) if doc else None

    def set_fingerprint_verified(self, user_id: str, verified: bool) -> Optional[User]:
        return self._set(user_id, {"isFingerprintVerified": verified})

    def set_fingerprint_template(self, user_id: str, template: str) -> Optional[User]:
        return self._set(user_id, {"fingerprintTemplate": template})

    def set_role(self, user_id: str, role: UserRole) -> Optional[User]:
        return self._set(user_id, {"role": role.value})

    def delete(self, user_id: str) -> bool:
        oid = to_object_id(user_id)
        if oid is None:
            return False
        return self.collection.delete_one({"_id": oid}).deleted_count > 0
