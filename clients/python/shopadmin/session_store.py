"""Durable storage for the signed-in session."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

SESSION_SLOT = "supabase.auth.token"


def default_home() -> Path:
    """Directory holding shopadmin's local state (``$SHOPADMIN_HOME`` or ``~/.shopadmin``)."""
    home = os.environ.get("SHOPADMIN_HOME")
    return Path(home) if home else Path.home() / ".shopadmin"


@runtime_checkable
class SessionStore(Protocol):
    """Named slots holding JSON-serializable values."""

    def load(self, name: str) -> Any | None: ...
    def save(self, name: str, value: Any) -> None: ...
    def remove(self, name: str) -> None: ...


class MemorySessionStore:
    """Process-local store, mostly for tests and short-lived scripts."""

    def __init__(self) -> None:
        self._slots: dict[str, str] = {}

    def load(self, name: str) -> Any | None:
        raw = self._slots.get(name)
        return None if raw is None else json.loads(raw)

    def save(self, name: str, value: Any) -> None:
        self._slots[name] = json.dumps(value)

    def remove(self, name: str) -> None:
        self._slots.pop(name, None)


class FileSessionStore:
    """One JSON file per slot inside ``directory``.

    Writes go to a temporary file that is then renamed over the slot, so a
    reader sees either the previous value or the new one.
    """

    def __init__(self, directory: str | Path | None = None) -> None:
        self.directory = Path(directory) if directory else default_home()

    def _path(self, name: str) -> Path:
        return self.directory / f"{name}.json"

    def load(self, name: str) -> Any | None:
        path = self._path(name)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable session slot %s", path)
            return None

    def save(self, name: str, value: Any) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.directory, prefix=f".{name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(value, fh)
            os.replace(tmp, self._path(name))
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def remove(self, name: str) -> None:
        self._path(name).unlink(missing_ok=True)
