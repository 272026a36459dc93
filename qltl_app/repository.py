from __future__ import annotations
from contextlib import closing
from typing import Any, Dict, Optional
import json, logging, time

from .db import connect, migrate

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"
USER_KEY = "user"
DASHBOARD_TAB_KEY = "dashboardActiveTab"
LECTURER_TAB_KEY = "lecturerDashboardActiveTab"

SESSION_KEYS = (TOKEN_KEY, USER_KEY, DASHBOARD_TAB_KEY, LECTURER_TAB_KEY)


class ClientStore:
    """Small persisted key/value store for the browser-side session.

    Holds the auth token, the cached profile and the last opened dashboard
    tab. Created once at app start (``init``) and emptied on logout
    (``clear_session``). Writes are last-writer-wins.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path

    def init(self) -> "ClientStore":
        migrate(self.db_path)
        return self

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        with closing(connect(self.db_path)) as conn:
            row = conn.execute("SELECT value FROM client_state WHERE key=?", (key,)).fetchone()
        return row[0] if row else default

    def set(self, key: str, value: str) -> None:
        with closing(connect(self.db_path)) as conn, conn:
            conn.execute(
                "INSERT OR REPLACE INTO client_state(key, value, updated) VALUES(?,?,?)",
                (key, value, int(time.time())),
            )

    def delete(self, *keys: str) -> None:
        with closing(connect(self.db_path)) as conn, conn:
            conn.executemany("DELETE FROM client_state WHERE key=?", [(k,) for k in keys])

    def get_json(self, key: str) -> Optional[Dict[str, Any]]:
        raw = self.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Discarding unreadable value stored under %r", key)
            self.delete(key)
            return None

    def set_json(self, key: str, data: Dict[str, Any]) -> None:
        self.set(key, json.dumps(data, ensure_ascii=False))

    @property
    def token(self) -> Optional[str]:
        return self.get(TOKEN_KEY) or None

    def clear_auth(self) -> None:
        self.delete(TOKEN_KEY, USER_KEY)

    def clear_session(self) -> None:
        self.delete(*SESSION_KEYS)
