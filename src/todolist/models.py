"""Data models and constants for todolist."""

import os
from dataclasses import dataclass
from typing import Optional, Union

DEFAULT_DIR = os.path.expanduser(os.environ.get("TODOLIST_HOME") or "~/.todolist")
DEFAULT_KEY = "todos"
LOG_FILENAME = "todolist.log"


def list_path(key: str = DEFAULT_KEY, directory: Optional[str] = None) -> str:
    """Return the full path for a storage key: ~/.todolist/{key}.json"""
    return os.path.join(directory or DEFAULT_DIR, f"{key}.json")


@dataclass(frozen=True)
class Task:
    """A single to-do item.

    Fields:
        id: Unique integer id, allocated from a millisecond timestamp.
        text: Trimmed, non-empty text.
        completed: Completion flag.
        created_at: Millisecond timestamp taken when the task was added.
    """

    id: int
    text: str
    completed: bool = False
    created_at: int = 0


@dataclass(frozen=True)
class Idle:
    """No task is being edited."""


@dataclass(frozen=True)
class Editing:
    """Exactly one task is being edited; `text` is the pending draft."""

    task_id: int
    text: str


EditState = Union[Idle, Editing]
