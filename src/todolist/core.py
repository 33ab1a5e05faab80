"""Task list helpers (pure functions, no I/O)."""

import time
from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

from .models import Task


def now_ms() -> int:
    """Current wall-clock time in integer milliseconds."""
    return int(time.time() * 1000)


def next_task_id(tasks: Sequence[Task], now: int) -> int:
    """Allocate an id from the clock reading, bumped past every id in use."""
    highest = max((t.id for t in tasks), default=None)
    if highest is not None and now <= highest:
        return highest + 1
    return now


def find_task(tasks: Sequence[Task], task_id: int) -> Optional[Task]:
    """Return the task with the given id, or None."""
    for t in tasks:
        if t.id == task_id:
            return t
    return None


def prepend_task(tasks: Sequence[Task], text: str, now: int) -> Tuple[List[Task], Task]:
    """Return (new collection, new task) with a fresh task in front."""
    task = Task(id=next_task_id(tasks, now), text=text, completed=False, created_at=now)
    return [task] + list(tasks), task


def toggle_task(tasks: Sequence[Task], task_id: int) -> List[Task]:
    """Return a copy of the collection with one task's completion flipped."""
    return [replace(t, completed=not t.completed) if t.id == task_id else t for t in tasks]


def rename_task(tasks: Sequence[Task], task_id: int, text: str) -> List[Task]:
    """Return a copy of the collection with one task's text replaced."""
    return [replace(t, text=text) if t.id == task_id else t for t in tasks]


def remove_task(tasks: Sequence[Task], task_id: int) -> List[Task]:
    """Return a copy of the collection without the given task."""
    return [t for t in tasks if t.id != task_id]


def matches_search(task: Task, term: str) -> bool:
    """Case-insensitive substring match; an empty term matches everything."""
    return term.lower() in task.text.lower()


def derived_view(tasks: Sequence[Task], term: str = "") -> List[Task]:
    """Filter by search term, then order open before completed, newest first.

    sorted() is stable, so equal created_at values keep their stored order.
    """
    filtered = [t for t in tasks if matches_search(t, term)]
    return sorted(filtered, key=lambda t: (t.completed, -t.created_at))
