# ovs/config.py
# Central place for settings and constants
import os

from dotenv import load_dotenv

load_dotenv()

# --- Database Config ---
MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
MONGO_DB = os.getenv("MONGO_DB", "online_voting_system")
ELECTIONS_COLLECTION_NAME = "elections"
VOTES_COLLECTION_NAME = "votes"
USERS_COLLECTION_NAME = "users"

# --- Security & JWT Config ---
# In production, use secure, environment-variable-based secrets
SECRET_KEY = os.getenv("SECRET_KEY", "a_very_secret_key_for_dev_only")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24 * 30))

# --- Encryption Key for fingerprint templates ---
# Either a urlsafe base64 Fernet key in the environment, or a key file that is
# generated on first use.
FINGERPRINT_KEY = os.getenv("FINGERPRINT_KEY")
FINGERPRINT_KEY_FILE = os.getenv("FINGERPRINT_KEY_FILE", "data/secret.key")

# --- HTTP ---
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
    if origin.strip()
]
API_PREFIX = "/api"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
