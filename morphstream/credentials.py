"""Local key-value storage for the API credential."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from .errors import InputError

logger = logging.getLogger(__name__)

API_KEY_NAME = "tm_apiKey"
CONFIG_DIR_ENV = "MORPHSTREAM_CONFIG_DIR"
CREDENTIALS_FILE = "credentials.json"


def default_path() -> Path:
    base = os.environ.get(CONFIG_DIR_ENV)
    root = Path(base) if base else Path.home() / ".config" / "morphstream"
    return root / CREDENTIALS_FILE


class CredentialStore:
    """A JSON file of string values, keyed by name.

    The store does not interpret the credential beyond requiring it to be
    non-blank.
    """

    def __init__(self, path: str | os.PathLike[str] | None = None) -> None:
        self.path = Path(path) if path is not None else default_path()

    def load(self, key: str = API_KEY_NAME) -> str | None:
        value = self._read().get(key)
        return value if isinstance(value, str) and value else None

    def save(self, value: str, key: str = API_KEY_NAME) -> str:
        """Store ``value`` trimmed. Returns what was stored."""
        cleaned = value.strip()
        if not cleaned:
            raise InputError(message="Refusing to store an empty credential")
        data = self._read()
        data[key] = cleaned
        self._write(data)
        return cleaned

    def clear(self, key: str = API_KEY_NAME) -> None:
        data = self._read()
        if data.pop(key, None) is not None:
            self._write(data)

    def _read(self) -> dict[str, Any]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable credential store %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(".tmp")
        tmp.write_text(json.dumps(data, indent=2), encoding="utf-8")
        os.chmod(tmp, 0o600)
        tmp.replace(self.path)
