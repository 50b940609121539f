"""
API key helpers
"""
import hashlib
import hmac
import secrets

API_KEY_PREFIX = "mj_live_"


def generate_api_key() -> str:
    """Generate a new plain text API key"""
    return f"{API_KEY_PREFIX}{secrets.token_urlsafe(32)}"


def hash_api_key(api_key: str) -> str:
    """SHA-256 hex digest of an API key (only the hash is stored)"""
    return hashlib.sha256(api_key.encode("utf-8")).hexdigest()


def constant_time_equals(provided: str, expected: str) -> bool:
    """Compare secrets without leaking timing information"""
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))
