import logging
from typing import List

from fastapi import APIRouter, Depends

from ovs import crud
from ovs.config import API_PREFIX
from ovs.dependencies import get_user_repository, require_admin
from ovs.exceptions import NotFound
from ovs.models.user_model import User, UserOut
from ovs.schemas import FingerprintStatusUpdate, MessageResponse, RoleUpdateRequest
from ovs.storage import UserRepository

logger = logging.getLogger(__name__)

# All routes in this file require admin privileges
user_router = APIRouter(
    prefix=f"{API_PREFIX}/users", tags=["Users"], dependencies=[Depends(require_admin)]
)


@user_router.get("", response_model=List[UserOut])
def get_all_users(users: UserRepository = Depends(get_user_repository)):
    return [UserOut.from_user(u) for u in users.list()]


@user_router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: str, users: UserRepository = Depends(get_user_repository)):
    user = users.get(user_id)
    if user is None:
        raise NotFound("User not found")
    return UserOut.from_user(user)


@user_router.put("/{user_id}/role", response_model=UserOut)
def update_user_role(
    user_id: str,
    data: RoleUpdateRequest,
    admin: User = Depends(require_admin),
    users: UserRepository = Depends(get_user_repository),
):
    user = users.set_role(user_id, data.role)
    if user is None:
        raise NotFound("User not found")
    logger.info(f"User {user_id} role set to {data.role.value} by {admin.id}")
    return UserOut.from_user(user)


@user_router.put("/{user_id}/verify-fingerprint", response_model=UserOut)
def update_fingerprint_status(
    user_id: str,
    data: FingerprintStatusUpdate,
    admin: User = Depends(require_admin),
    users: UserRepository = Depends(get_user_repository),
):
    return crud.set_fingerprint_verified(users, user_id, data.is_fingerprint_verified, actor=admin.id)


@user_router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: str,
    admin: User = Depends(require_admin),
    users: UserRepository = Depends(get_user_repository),
):
    if not users.delete(user_id):
        raise NotFound("User not found")
    logger.info(f"User {user_id} deleted by {admin.id}")
    return MessageResponse(message="User removed")
