"""API key provider for the direct Gemini path.

Architectural role:
    Owns the API key state consumed by `eliza.core.assistant`: the current key
    string plus a "last known working" flag that callers flip after a
    successful generation.

Key resolution:
    1. A user-supplied key set via `set_user_key` (takes precedence).
    2. The configured default key (`GEMINI_API_KEY` or `config/gemini.key`).

Side effects:
    `mark_key_as_working` / `mark_key_as_failed` mutate in-memory state only.
    Nothing is persisted.
"""

import logging
import threading
from dataclasses import dataclass

from eliza.llm.provider_config import GEMINI_KEY_FILE, load_key


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeyStatus:
    """Reported health of the current key.

    Attributes:
        is_valid: A key is available and has not been marked as failed.
        key_type: `"user"`, `"default"` or `"none"`.
        last_known_working: A generation succeeded with the current key.
    """

    is_valid: bool
    key_type: str
    last_known_working: bool = False


class ApiKeyManager:
    def __init__(self, default_key: str | None = None, key_file: str | None = GEMINI_KEY_FILE):
        self._lock = threading.Lock()
        self._default_key = default_key if default_key is not None else load_key(key_file)
        self._user_key = None
        self._working = False
        self._failed = False

    def set_user_key(self, key: str | None) -> None:
        """Install (or clear, with a falsy value) a user-supplied key."""
        with self._lock:
            self._user_key = (key or "").strip() or None
            self._working = False
            self._failed = False
        logger.info("User API key %s", "installed" if key else "cleared")

    def get_current_api_key(self) -> str | None:
        with self._lock:
            return self._user_key or self._default_key

    def mark_key_as_working(self) -> None:
        with self._lock:
            self._working = True
            self._failed = False

    def mark_key_as_failed(self) -> None:
        with self._lock:
            self._working = False
            self._failed = True

    def get_key_status(self) -> KeyStatus:
        with self._lock:
            if self._user_key:
                key_type = "user"
            elif self._default_key:
                key_type = "default"
            else:
                key_type = "none"
            return KeyStatus(
                is_valid=key_type != "none" and not self._failed,
                key_type=key_type,
                last_known_working=self._working,
            )
