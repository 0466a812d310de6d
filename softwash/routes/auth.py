import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..auth import check_password, get_token_store, issue_token, require_admin
from ..rate_limiter import rate_limit_login

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Admin Authentication"])


class LoginRequest(BaseModel):
    password: Optional[str] = None


@router.post("/login")
async def login(
    data: LoginRequest,
    _: None = Depends(rate_limit_login),
    store=Depends(get_token_store),
):
    """Exchange the admin password for a session token"""
    if not check_password(data.password):
        logger.warning("⚠️ Failed admin login attempt")
        return {"success": False, "message": "Invalid password"}

    token = issue_token(store)
    logger.info("🔐 Admin logged in")
    return {"success": True, "token": token}


@router.post("/logout")
async def logout(token: str = Depends(require_admin), store=Depends(get_token_store)):
    store.discard(token)
    logger.info("🔐 Admin logged out")
    return {"success": True}
