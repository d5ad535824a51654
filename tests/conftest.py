import os
from datetime import datetime, timedelta, timezone

from cryptography.fernet import Fernet

os.environ.setdefault("FINGERPRINT_KEY", Fernet.generate_key().decode())
os.environ.setdefault("SECRET_KEY", "test-secret")

import mongomock  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from ovs.database import connection  # noqa: E402
from ovs.main import app  # noqa: E402
from ovs.models.election_model import CandidateIn, ElectionCreate  # noqa: E402
from ovs.lifecycle import derive_status  # noqa: E402
from ovs.security import create_access_token, encrypt_template, hash_password  # noqa: E402
from ovs.storage_mongo import (  # noqa: E402
    MongoElectionRepository,
    MongoUserRepository,
    MongoVoteRepository,
)

FINGERPRINT = "fp-template-0001"


@pytest.fixture
def db():
    database = mongomock.MongoClient()["ovs_test"]
    connection.set_database(database)
    connection.ensure_indexes()
    yield database
    connection.set_database(None)


@pytest.fixture
def users(db):
    return MongoUserRepository(db["users"])


@pytest.fixture
def elections(db):
    return MongoElectionRepository(db["elections"])


@pytest.fixture
def votes(db):
    return MongoVoteRepository(db["votes"])


@pytest.fixture
def make_user(users):
    counter = {"n": 0}

    def _make(role="user", verified=False, template=FINGERPRINT):
        counter["n"] += 1
        n = counter["n"]
        record = {
            "username": f"user{n}",
            "email": f"user{n}@example.com",
            "password_hash": hash_password("secret123"),
            "role": role,
            "is_fingerprint_verified": verified,
        }
        if template is not None:
            record["fingerprint_template"] = encrypt_template(template)
        return users.create(record)

    return _make


@pytest.fixture
def voter(make_user):
    return make_user(verified=True)


@pytest.fixture
def admin(make_user):
    return make_user(role="admin", verified=True)


@pytest.fixture
def make_election(elections, admin):
    def _make(start=timedelta(hours=-1), end=timedelta(hours=1), candidates=("A", "B"), title="Board"):
        now = datetime.now(timezone.utc)
        data = ElectionCreate(
            title=title,
            description=f"{title} election",
            candidates=[CandidateIn(name=name, description=f"Candidate {name}") for name in candidates],
            start_date=now + start,
            end_date=now + end,
        )
        status = derive_status(now, data.start_date, data.end_date)
        return elections.create(data, created_by=admin.id, status=status)

    return _make


@pytest.fixture
def client(db):
    return TestClient(app)


@pytest.fixture
def headers_for():
    def _headers(user):
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _headers
