"""Persistence for todolist: serialized format and key-value stores."""

import json
import os
from typing import Any, Dict, List, Optional, Protocol

from .models import Task, DEFAULT_KEY, list_path

FIELDS = ("id", "text", "completed", "createdAt")


class StorageError(Exception):
    """Base class for persistence failures."""


class PersistenceLoadFailure(StorageError):
    """Prior state is unreadable or malformed."""


class PersistenceSaveFailure(StorageError):
    """The store rejected a write."""


class PersistenceService(Protocol):
    def load(self) -> Optional[str]:
        ...

    def save(self, data: str) -> None:
        ...


def serialize_tasks(tasks: List[Task]) -> str:
    """Encode the collection as a JSON array, stored order preserved."""
    return json.dumps(
        [
            {"id": t.id, "text": t.text, "completed": t.completed, "createdAt": t.created_at}
            for t in tasks
        ],
        ensure_ascii=False,
    )


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _task_from_entry(entry: Any, position: int) -> Task:
    if not isinstance(entry, dict):
        raise PersistenceLoadFailure(f"entry {position} is not an object")
    missing = [k for k in FIELDS if k not in entry]
    if missing:
        raise PersistenceLoadFailure(f"entry {position} is missing {', '.join(missing)}")
    tid, text = entry["id"], entry["text"]
    completed, created_at = entry["completed"], entry["createdAt"]
    if not _is_int(tid) or not _is_int(created_at):
        raise PersistenceLoadFailure(f"entry {position} has a non-integer id or createdAt")
    if not isinstance(completed, bool):
        raise PersistenceLoadFailure(f"entry {position} has a non-boolean completed flag")
    if not isinstance(text, str) or not text.strip():
        raise PersistenceLoadFailure(f"entry {position} has empty text")
    return Task(id=tid, text=text, completed=completed, created_at=created_at)


def deserialize_tasks(data: str) -> List[Task]:
    """Decode a serialized collection.

    Raises PersistenceLoadFailure for anything that is not a JSON array of
    well-formed task objects with unique ids. Unknown keys are ignored.
    """
    try:
        raw = json.loads(data)
    except (TypeError, ValueError, RecursionError) as e:
        raise PersistenceLoadFailure(f"invalid JSON: {e}") from e
    if not isinstance(raw, list):
        raise PersistenceLoadFailure("stored value is not a list")

    tasks = [_task_from_entry(entry, i) for i, entry in enumerate(raw)]
    seen: Dict[int, int] = {}
    for i, t in enumerate(tasks):
        if t.id in seen:
            raise PersistenceLoadFailure(f"entries {seen[t.id]} and {i} share id {t.id}")
        seen[t.id] = i
    return tasks


class FileStore:
    """Local key-value storage: the value for `key` lives in {directory}/{key}.json."""

    def __init__(self, directory: Optional[str] = None, key: str = DEFAULT_KEY):
        self.key = key
        self.path = list_path(key, directory)

    def load(self) -> Optional[str]:
        """Return the stored text, or None when nothing was saved yet."""
        if not os.path.exists(self.path):
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceLoadFailure(f"cannot read {self.path}: {e}") from e

    def save(self, data: str) -> None:
        """Replace the file, creating the data directory if needed.

        The data goes to a sibling temp file first and is moved over the old
        file only once fully written, so a failed save leaves prior state intact.
        """
        tmp_path = self.path + ".tmp"
        try:
            payload = data.encode("utf-8")
            os.makedirs(os.path.dirname(os.path.abspath(self.path)), exist_ok=True)
            with open(tmp_path, "wb") as f:
                f.write(payload)
            os.replace(tmp_path, self.path)
        except (OSError, UnicodeError) as e:
            if os.path.isfile(tmp_path):
                os.remove(tmp_path)
            raise PersistenceSaveFailure(f"cannot write {self.path}: {e}") from e


class MemoryStore:
    """In-memory store; optionally rejects every write."""

    def __init__(self, initial: Optional[str] = None, fail_saves: bool = False):
        self.data = initial
        self.fail_saves = fail_saves
        self.saves = 0

    def load(self) -> Optional[str]:
        return self.data

    def save(self, data: str) -> None:
        if self.fail_saves:
            raise PersistenceSaveFailure("memory store is read-only")
        self.data = data
        self.saves += 1
