from datetime import datetime
from enum import Enum
from typing import Optional

from ovs.models.base import CamelModel


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class User(CamelModel):
    id: str
    username: str
    email: str
    name: Optional[str] = None
    password_hash: str
    role: UserRole = UserRole.USER
    is_fingerprint_verified: bool = False
    # Fernet token of the enrolled template, never exposed
    fingerprint_template: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class UserOut(CamelModel):
    id: str
    username: str
    email: str
    name: Optional[str] = None
    role: UserRole
    is_fingerprint_verified: bool
    has_fingerprint_enrolled: bool = False

    @classmethod
    def from_user(cls, user: User) -> "UserOut":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            name=user.name,
            role=user.role,
            is_fingerprint_verified=user.is_fingerprint_verified,
            has_fingerprint_enrolled=bool(user.fingerprint_template),
        )
