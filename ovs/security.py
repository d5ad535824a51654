import hmac
import logging
import os
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken
from jose import JWTError, jwt
from passlib.context import CryptContext

from ovs.config import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    ALGORITHM,
    FINGERPRINT_KEY,
    FINGERPRINT_KEY_FILE,
    SECRET_KEY,
)

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


# Hash a password
def hash_password(password: str) -> str:
    return pwd_context.hash(password)


# Verify a plain password against a hash
def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


# Create JWT access token
def create_access_token(user_id: str, expires_minutes: int = ACCESS_TOKEN_EXPIRE_MINUTES) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    to_encode = {"sub": user_id, "exp": expire}
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> Optional[str]:
    """Return the user id carried by a valid token, None otherwise."""
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.info(f"Rejected access token: {e}")
        return None
    return payload.get("sub")


# --- Fingerprint templates ---
# In production: use secure key management (Vault/KMS) and never hardcode keys.

@lru_cache(maxsize=1)
def get_fernet() -> Fernet:
    if FINGERPRINT_KEY:
        return Fernet(FINGERPRINT_KEY.encode())
    key_dir = os.path.dirname(FINGERPRINT_KEY_FILE)
    if key_dir:
        os.makedirs(key_dir, exist_ok=True)
    if not os.path.exists(FINGERPRINT_KEY_FILE):
        fernet_key = Fernet.generate_key()
        with open(FINGERPRINT_KEY_FILE, "wb") as kf:
            kf.write(fernet_key)
        logger.warning(f"Generated new fingerprint key at {FINGERPRINT_KEY_FILE}")
    else:
        with open(FINGERPRINT_KEY_FILE, "rb") as kf:
            fernet_key = kf.read()
    return Fernet(fernet_key)


def encrypt_template(template: str) -> str:
    return get_fernet().encrypt(template.encode("utf-8")).decode("utf-8")


def fingerprint_matches(stored_template: str, submitted: str) -> bool:
    """Compare submitted verification data verbatim with the enrolled template."""
    try:
        enrolled = get_fernet().decrypt(stored_template.encode("utf-8"))
    except InvalidToken:
        logger.error("Stored fingerprint template could not be decrypted")
        return False
    return hmac.compare_digest(enrolled, submitted.encode("utf-8"))
