"""The task list manager: owns the collection, edit mode and search term."""

import enum
import logging
from typing import Callable, List, Optional, Tuple

from .core import (
    derived_view,
    find_task,
    now_ms,
    prepend_task,
    remove_task,
    rename_task,
    toggle_task,
)
from .models import Editing, EditState, Idle, Task
from .storage import (
    PersistenceLoadFailure,
    PersistenceSaveFailure,
    PersistenceService,
    deserialize_tasks,
    serialize_tasks,
)

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class Outcome(enum.Enum):
    """What an operation did. Callers wired to a UI may ignore it."""

    APPLIED = "applied"
    VALIDATION_FAILED = "validation_failed"
    NOT_FOUND = "not_found"


class TaskListManager:
    """In-memory task collection persisted through a PersistenceService.

    The constructor performs the single startup load. Every applied mutation
    is followed by one save; the first failed save switches the manager to
    in-memory operation for the rest of the session.
    """

    def __init__(self, store: PersistenceService, clock: Callable[[], int] = now_ms):
        self.store = store
        self.clock = clock
        self._tasks: List[Task] = []
        self._search_term = ""
        self._edit: EditState = Idle()
        self._listeners: List[Listener] = []
        self.persisting = True
        self._load()

    # -------------------- persistence --------------------
    def _load(self) -> None:
        try:
            data = self.store.load()
            if data is None:
                logger.info("No saved tasks; starting empty")
                return
            self._tasks = deserialize_tasks(data)
        except PersistenceLoadFailure as e:
            logger.warning("Ignoring saved tasks: %s", e)
            self._tasks = []
            return
        logger.info("Loaded %d tasks", len(self._tasks))

    def _save(self) -> None:
        if not self.persisting:
            return
        try:
            self.store.save(serialize_tasks(self._tasks))
        except PersistenceSaveFailure as e:
            logger.error("Failed to save tasks, continuing in memory: %s", e)
            self.persisting = False

    def _commit(self, tasks: List[Task]) -> None:
        self._tasks = tasks
        self._save()
        self._notify()

    # -------------------- observers --------------------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call `listener` after every state change; returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    # -------------------- queries --------------------
    @property
    def tasks(self) -> Tuple[Task, ...]:
        return tuple(self._tasks)

    @property
    def search_term(self) -> str:
        return self._search_term

    @property
    def edit_state(self) -> EditState:
        return self._edit

    @property
    def is_editing(self) -> bool:
        return isinstance(self._edit, Editing)

    def derived_view(self) -> List[Task]:
        return derived_view(self._tasks, self._search_term)

    # -------------------- task operations --------------------
    def add(self, text: str) -> Outcome:
        text = text.strip()
        if not text:
            return Outcome.VALIDATION_FAILED
        tasks, task = prepend_task(self._tasks, text, self.clock())
        logger.debug("Added task %d", task.id)
        self._commit(tasks)
        return Outcome.APPLIED

    def toggle_complete(self, task_id: int) -> Outcome:
        if find_task(self._tasks, task_id) is None:
            return Outcome.NOT_FOUND
        logger.debug("Toggled task %d", task_id)
        self._commit(toggle_task(self._tasks, task_id))
        return Outcome.APPLIED

    def delete(self, task_id: int) -> Outcome:
        if find_task(self._tasks, task_id) is None:
            return Outcome.NOT_FOUND
        if isinstance(self._edit, Editing) and self._edit.task_id == task_id:
            self._edit = Idle()
        logger.debug("Deleted task %d", task_id)
        self._commit(remove_task(self._tasks, task_id))
        return Outcome.APPLIED

    def clear_all(self) -> Outcome:
        self._edit = Idle()
        logger.debug("Cleared %d tasks", len(self._tasks))
        self._commit([])
        return Outcome.APPLIED

    # -------------------- edit mode --------------------
    def start_edit(self, task_id: int) -> Outcome:
        """Enter edit mode for a task, superseding any edit in progress."""
        task = find_task(self._tasks, task_id)
        if task is None:
            return Outcome.NOT_FOUND
        self._edit = Editing(task_id=task.id, text=task.text)
        self._notify()
        return Outcome.APPLIED

    def set_edit_text(self, text: str) -> Outcome:
        if not isinstance(self._edit, Editing):
            return Outcome.NOT_FOUND
        self._edit = Editing(task_id=self._edit.task_id, text=text)
        self._notify()
        return Outcome.APPLIED

    def cancel_edit(self) -> Outcome:
        self._edit = Idle()
        self._notify()
        return Outcome.APPLIED

    def commit_edit(self, text: Optional[str] = None) -> Outcome:
        """Apply the pending edit text. Empty text keeps edit mode open."""
        if text is not None:
            self.set_edit_text(text)
        edit = self._edit
        if not isinstance(edit, Editing):
            return Outcome.NOT_FOUND
        new_text = edit.text.strip()
        if not new_text:
            return Outcome.VALIDATION_FAILED
        self._edit = Idle()
        if find_task(self._tasks, edit.task_id) is None:
            self._notify()
            return Outcome.NOT_FOUND
        logger.debug("Edited task %d", edit.task_id)
        self._commit(rename_task(self._tasks, edit.task_id, new_text))
        return Outcome.APPLIED

    # -------------------- search --------------------
    def set_search_term(self, term: str) -> None:
        self._search_term = term
        self._notify()

    def __str__(self) -> str:
        done = sum(1 for t in self._tasks if t.completed)
        return f"{len(self._tasks)} tasks, {done} completed"
