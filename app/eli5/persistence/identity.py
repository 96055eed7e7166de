"""
Purpose: Persisted "logged in as" record so a reload restores the session
without asking for credentials again. Narrow read/write/clear interface; the
UI receives an instance through AppContext instead of touching files itself.

One file serves every browser, so records are kept per browser token:
{"<browser token>": {"eli5_user": {id, email, name}}}. A store only ever
sees the record filed under its own token.
"""

from __future__ import annotations

import json
import secrets
import threading
from pathlib import Path
from typing import Optional

from eli5.config.logging import get_logger
from eli5.models import User

logger = get_logger(__name__)

IDENTITY_KEY = "eli5_user"

# Streamlit serves every browser session from threads of one process.
_file_lock = threading.Lock()


def new_browser_token() -> str:
    return secrets.token_urlsafe(16)


class LocalIdentityStore:
    def __init__(self, path: Path, client_key: str, key: str = IDENTITY_KEY) -> None:
        if not (client_key or "").strip():
            raise ValueError("client_key is required")
        self.path = Path(path)
        self.client_key = client_key
        self.key = key

    def _load(self) -> dict:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning("identity_unreadable", path=str(self.path), error=str(e))
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data), encoding="utf-8")

    def read(self) -> Optional[User]:
        with _file_lock:
            entry = self._load().get(self.client_key)
        record = entry.get(self.key) if isinstance(entry, dict) else None
        if not record:
            return None
        try:
            return User.from_record(record)
        except (KeyError, TypeError) as e:
            logger.warning("identity_malformed", path=str(self.path), error=str(e))
            return None

    def write(self, user: User) -> None:
        with _file_lock:
            data = self._load()
            entry = data.get(self.client_key)
            if not isinstance(entry, dict):
                entry = {}
            entry[self.key] = user.to_record()
            data[self.client_key] = entry
            self._save(data)
        logger.info("identity_saved", user_id=user.id)

    def clear(self) -> None:
        with _file_lock:
            data = self._load()
            entry = data.get(self.client_key)
            if isinstance(entry, dict) and entry.pop(self.key, None) is not None:
                if not entry:
                    data.pop(self.client_key)
                self._save(data)
        logger.info("identity_cleared")
