from fastapi import APIRouter, Depends

from ovs import crud
from ovs.config import API_PREFIX
from ovs.dependencies import get_current_user, get_user_repository
from ovs.models.user_model import User, UserOut
from ovs.schemas import AuthResponse, FingerprintEnrollRequest, LoginRequest, RegisterRequest
from ovs.storage import UserRepository

auth_router = APIRouter(prefix=f"{API_PREFIX}/auth", tags=["Auth"])


@auth_router.post("/register", response_model=AuthResponse, status_code=201)
def register(data: RegisterRequest, users: UserRepository = Depends(get_user_repository)):
    return crud.register_user(users, data)


@auth_router.post("/login", response_model=AuthResponse)
def login(data: LoginRequest, users: UserRepository = Depends(get_user_repository)):
    return crud.login_user(users, data)


@auth_router.get("/me", response_model=UserOut)
def me(user: User = Depends(get_current_user)):
    return UserOut.from_user(user)


@auth_router.put("/verify-fingerprint", response_model=AuthResponse)
def mark_fingerprint_verified(
    user: User = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
):
    """Self-service override: marks the caller verified without a proof."""
    crud.set_fingerprint_verified(users, user.id, True)
    return crud.auth_response(users.get(user.id))


@auth_router.put("/fingerprint", response_model=UserOut)
def enroll_fingerprint(
    data: FingerprintEnrollRequest,
    user: User = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
):
    return crud.enroll_fingerprint(users, user.id, data.fingerprint_template)
