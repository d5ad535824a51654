import logging
from typing import Optional

from ovs.exceptions import NotAuthenticated, NotFound
from ovs.models.user_model import User, UserOut
from ovs.schemas import AuthResponse, LoginRequest, RegisterRequest
from ovs.security import create_access_token, encrypt_template, hash_password, verify_password
from ovs.storage import UserRepository

logger = logging.getLogger(__name__)


def auth_response(user: User) -> AuthResponse:
    return AuthResponse(**UserOut.from_user(user).model_dump(), token=create_access_token(user.id))


# Create a new user with hashed password (and encrypted template, if given)
def register_user(users: UserRepository, data: RegisterRequest) -> AuthResponse:
    record = {
        "username": data.username,
        "email": str(data.email),
        "password_hash": hash_password(data.password),
        "name": data.name,
    }
    if data.role is not None:
        record["role"] = data.role
    if data.fingerprint_template:
        record["fingerprint_template"] = encrypt_template(data.fingerprint_template)
    user = users.create(record)
    return auth_response(user)


# Login by username or email
def login_user(users: UserRepository, data: LoginRequest) -> AuthResponse:
    user = users.find_by_login(data.username, data.email)
    if user is None or not verify_password(data.password, user.password_hash):
        logger.info(f"Failed login for {data.username or data.email}")
        raise NotAuthenticated("Invalid email or password")
    return auth_response(user)


def enroll_fingerprint(users: UserRepository, user_id: str, template: str) -> UserOut:
    user = users.set_fingerprint_template(user_id, encrypt_template(template))
    if user is None:
        raise NotFound("User not found")
    logger.info(f"Fingerprint template enrolled for user {user_id}")
    return UserOut.from_user(user)


# Administrative override: no proof is compared
def set_fingerprint_verified(
    users: UserRepository, user_id: str, verified: bool, actor: Optional[str] = None
) -> UserOut:
    user = users.set_fingerprint_verified(user_id, verified)
    if user is None:
        raise NotFound("User not found")
    logger.info(f"User {user_id} fingerprint verification set to {verified} by {actor or user_id}")
    return UserOut.from_user(user)
