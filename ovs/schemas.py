from typing import Optional

from pydantic import EmailStr, Field, StrictBool, model_validator

from ovs.models.base import CamelModel
from ovs.models.user_model import UserOut, UserRole


class RegisterRequest(CamelModel):
    username: str = Field(..., min_length=3)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: Optional[UserRole] = None
    name: Optional[str] = None
    fingerprint_template: Optional[str] = None


class LoginRequest(CamelModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: str

    @model_validator(mode="after")
    def _identifier_present(self):
        if not self.username and not self.email:
            raise ValueError("username or email is required")
        return self


class AuthResponse(UserOut):
    token: str


class RoleUpdateRequest(CamelModel):
    role: UserRole


class FingerprintStatusUpdate(CamelModel):
    is_fingerprint_verified: StrictBool


class FingerprintEnrollRequest(CamelModel):
    fingerprint_template: str = Field(..., min_length=1)


class MessageResponse(CamelModel):
    message: str
