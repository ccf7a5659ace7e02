"""Persistent user session record.

A single JSON file holds the logged-in user under the ``smo_user`` key so
that a restart of the dashboard does not require logging in again.
"""

from __future__ import annotations

import json
import os

from pydantic import ValidationError

from src.core.logging import get_logger
from src.core.settings import AppSettings, get_settings
from src.domain.models.operation import UserSession

log = get_logger(__name__)

SESSION_KEY = "smo_user"


class SessionStore:
    """Reads and writes the stored user record."""

    def __init__(self, path: str | None = None, settings: AppSettings | None = None):
        self.path = path or (settings or get_settings()).session_file

    def load(self) -> UserSession | None:
        """Stored user, or None. Unreadable content is cleared."""
        if not os.path.exists(self.path):
            return None
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
            return UserSession.model_validate(data[SESSION_KEY])
        except (OSError, ValueError, KeyError, TypeError, ValidationError) as e:
            log.warning("stored_session_corrupt", path=self.path, error=str(e))
            self.clear()
            return None

    def save(self, user: UserSession) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump({SESSION_KEY: user.model_dump()}, f, indent=2, ensure_ascii=False)
        log.info("session_saved", username=user.username)

    def clear(self) -> None:
        """Remove the stored record (logout)."""
        try:
            os.remove(self.path)
            log.info("session_cleared", path=self.path)
        except FileNotFoundError:
            pass
