"""todolist - a small persistent to-do list."""

__version__ = "1.0.0"

from .models import Task, Idle, Editing, DEFAULT_DIR, DEFAULT_KEY
from .storage import (
    FileStore,
    MemoryStore,
    PersistenceLoadFailure,
    PersistenceSaveFailure,
    StorageError,
    serialize_tasks,
    deserialize_tasks,
)
from .core import derived_view
from .manager import Outcome, TaskListManager

__all__ = [
    "Task",
    "Idle",
    "Editing",
    "DEFAULT_DIR",
    "DEFAULT_KEY",
    "FileStore",
    "MemoryStore",
    "PersistenceLoadFailure",
    "PersistenceSaveFailure",
    "StorageError",
    "serialize_tasks",
    "deserialize_tasks",
    "derived_view",
    "Outcome",
    "TaskListManager",
]
