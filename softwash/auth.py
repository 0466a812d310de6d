import hmac
import logging
import secrets
from threading import Lock
from typing import Optional

from fastapi import Depends, Header, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import ADMIN_PASSWORD, ADMIN_TOKEN_TTL, TOKEN_STORE
from .rate_limiter import get_redis_client

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


class MemoryTokenStore:
    """Admin sessions held in this process only; a restart signs everyone out"""

    def __init__(self):
        self._tokens: set[str] = set()
        self._lock = Lock()

    def add(self, token: str) -> None:
        with self._lock:
            self._tokens.add(token)

    def contains(self, token: str) -> bool:
        with self._lock:
            return token in self._tokens

    def discard(self, token: str) -> None:
        with self._lock:
            self._tokens.discard(token)

    def clear(self) -> None:
        with self._lock:
            self._tokens.clear()


class RedisTokenStore:
    """Admin sessions shared by every worker through Redis keys with a TTL"""

    PREFIX = "admin_token:"

    def __init__(self, client, ttl: int = ADMIN_TOKEN_TTL):
        self.client = client
        self.ttl = ttl

    def add(self, token: str) -> None:
        self.client.setex(f"{self.PREFIX}{token}", self.ttl, "1")

    def contains(self, token: str) -> bool:
        return bool(self.client.exists(f"{self.PREFIX}{token}"))

    def discard(self, token: str) -> None:
        self.client.delete(f"{self.PREFIX}{token}")


def create_token_store():
    if TOKEN_STORE == "redis":
        client = get_redis_client()
        if client is not None:
            logger.info("🔐 Admin tokens stored in Redis")
            return RedisTokenStore(client)
        logger.warning("⚠️ TOKEN_STORE=redis but Redis is unavailable - using in-memory tokens")
    return MemoryTokenStore()


token_store = create_token_store()


def get_token_store():
    return token_store


def check_password(password: Optional[str]) -> bool:
    if not password:
        return False
    return hmac.compare_digest(password.encode(), ADMIN_PASSWORD.encode())


def issue_token(store) -> str:
    token = secrets.token_hex(32)
    store.add(token)
    return token


def extract_token(
    credentials: Optional[HTTPAuthorizationCredentials],
    x_admin_token: Optional[str],
) -> Optional[str]:
    if x_admin_token:
        return x_admin_token
    if credentials and credentials.credentials:
        return credentials.credentials
    return None


async def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    x_admin_token: Optional[str] = Header(None),
    store=Depends(get_token_store),
) -> str:
    """
    Accepts the token from the X-Admin-Token header or an Authorization: Bearer header.
    Every failure gets the same 401 so callers cannot tell a missing token from a stale one.
    """
    token = extract_token(credentials, x_admin_token)
    if not token or not store.contains(token):
        raise HTTPException(status_code=401, detail="Unauthorized")
    return token
