"""
Session gate for protected pages.

``ensure_session`` runs on every page render. Without a stored token it
answers "unauthenticated" without touching the network; otherwise it asks
``/auth/me``. Any failure there (rejected token, backend down, garbage body)
is reported the same way and the stored credentials are dropped. The
resolved user lives only as long as the render that asked for it.
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional
import logging

from pydantic import ValidationError
import requests

from .models import User
from .repository import ClientStore, TOKEN_KEY, USER_KEY
from .services.api_client import ApiClient

logger = logging.getLogger(__name__)

FORBIDDEN_TITLE = "Không có quyền truy cập"
FORBIDDEN_DETAIL = "Bạn cần quyền Admin để truy cập trang này"
LOGIN_FAILED = "Đăng nhập thất bại"


class SessionStatus(str, Enum):
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"


@dataclass
class SessionResult:
    status: SessionStatus
    user: Optional[User] = None

    @property
    def ok(self) -> bool:
        return self.status is SessionStatus.AUTHENTICATED

    @property
    def needs_login(self) -> bool:
        return self.status is SessionStatus.UNAUTHENTICATED


def _unauthenticated(store: ClientStore) -> SessionResult:
    store.clear_auth()
    return SessionResult(SessionStatus.UNAUTHENTICATED)


def ensure_session(store: ClientStore, client: ApiClient, require_admin: bool = False) -> SessionResult:
    if not store.token:
        return SessionResult(SessionStatus.UNAUTHENTICATED)

    try:
        resp = client.get_me()
        if not resp.success or not isinstance(resp.data, dict):
            logger.info("Session rejected by backend: %s", resp.message)
            return _unauthenticated(store)
        user = User.model_validate(resp.data)
    except (requests.RequestException, ValidationError) as e:
        logger.warning("Session check failed: %s", e)
        return _unauthenticated(store)

    client.role = user.role
    if require_admin and not user.has_admin_role:
        return SessionResult(SessionStatus.FORBIDDEN, user)
    return SessionResult(SessionStatus.AUTHENTICATED, user)


def login(store: ClientStore, client: ApiClient, email: str, password: str) -> Optional[str]:
    """Log in and persist the token. Returns an error message, or None on success."""
    try:
        resp = client.login(email, password)
    except requests.RequestException as e:
        logger.warning("Login request failed: %s", e)
        return LOGIN_FAILED
    data = resp.data if isinstance(resp.data, dict) else {}
    token = data.get("token")
    if not resp.success or not token:
        return resp.message or LOGIN_FAILED
    store.set(TOKEN_KEY, token)
    if isinstance(data.get("user"), dict):
        store.set_json(USER_KEY, data["user"])
    return None


def logout(store: ClientStore) -> None:
    store.clear_session()
