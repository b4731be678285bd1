"""
Admin Auth — Signed, expiring bearer tokens for the dashboard.
Token format: "<username>:<expiry-epoch>.<hmac>"
"""
import hmac
import time
from datetime import datetime
from typing import Optional

from fastapi import Header, HTTPException

from paydesk.config import get_settings
from paydesk.utils.hashing import hmac_sha256, signatures_match


class AdminAuthService:

    @staticmethod
    def check_credentials(username: str, password: str) -> bool:
        settings = get_settings()
        user_ok = hmac.compare_digest(username.encode(), settings.ADMIN_USERNAME.encode())
        pass_ok = hmac.compare_digest(password.encode(), settings.ADMIN_PASSWORD.encode())
        return user_ok and pass_ok

    @staticmethod
    def issue_token(username: str) -> tuple[str, datetime]:
        settings = get_settings()
        expiry = int(time.time()) + settings.ADMIN_TOKEN_TTL_MINUTES * 60
        expires_at = datetime.utcfromtimestamp(expiry)
        body = f"{username}:{expiry}"
        return f"{body}.{hmac_sha256(settings.SECRET_KEY, body)}", expires_at

    @staticmethod
    def verify_token(token: str) -> Optional[str]:
        """Return the username for a valid, unexpired token, else None."""
        body, _, signature = token.rpartition(".")
        if not body or not signatures_match(hmac_sha256(get_settings().SECRET_KEY, body), signature):
            return None
        username, _, expiry = body.rpartition(":")
        if not expiry.isdigit() or int(expiry) < time.time():
            return None
        return username


def require_admin(authorization: str = Header(None)) -> str:
    """FastAPI dependency: requires `Authorization: Bearer <token>`."""
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="Admin token required")
    username = AdminAuthService.verify_token(authorization[7:].strip())
    if not username:
        raise HTTPException(status_code=401, detail="Invalid or expired admin token")
    return username
