"""Curses-based terminal user interface for todolist."""

import curses
import locale
import logging
import unicodedata
from typing import List, Optional

from .manager import Outcome, TaskListManager
from .models import Editing, Task

logger = logging.getLogger(__name__)

HELP_TEXT = [
    "todolist - Keymap",
    "Movement:  up/k up   down/j down   PgUp/PgDn page   g top   G bottom",
    "Actions:   a add   e edit   space/x toggle done   d delete   C clear all",
    "Search:    / set search term (empty submission clears it)",
    "System:    ? help   q quit",
    "",
    "Prompts: Enter submits, ESC cancels",
    "Markers: [ ] open    [x] completed",
]


def format_row(position: int, task: Task, width: int) -> str:
    """Render one task line, eliding text that does not fit in `width`."""
    marker = "[x]" if task.completed else "[ ]"
    left = f"{position:>4}. {marker} "
    avail = max(0, width - 1 - len(left))
    text = task.text
    if len(text) > avail:
        text = text[: max(avail - 3, 0)] + ("..." if avail > 0 else "")
    return left + text


def header_line(manager: TaskListManager) -> str:
    """Title line: counts, active search term, and persistence state."""
    parts = [f"todolist: {manager}"]
    if manager.search_term:
        parts.append(f"/{manager.search_term}")
    if not manager.persisting:
        parts.append("saving disabled")
    return "  ".join(parts)


def cell_width(ch: str) -> int:
    return 2 if unicodedata.east_asian_width(ch) in ("W", "F") else 1


def visible_tail(text: str, cells: int) -> str:
    """Longest suffix of `text` that fits in `cells` terminal columns."""
    used = 0
    start = len(text)
    while start > 0 and used + cell_width(text[start - 1]) <= cells:
        start -= 1
        used += cell_width(text[start])
    return text[start:]


def read_line(win, initial: str = "", width: int = 0) -> Optional[str]:
    """Read one line of text from a one-row window.

    Uses get_wch so multi-byte input arrives as whole characters. Only the
    tail of the buffer that fits in `width - 1` columns is drawn. Returns
    None on ESC.
    """
    buf = list(initial)
    while True:
        win.erase()
        win.addstr(0, 0, visible_tail("".join(buf), max(width - 1, 0)))
        win.refresh()
        ch = win.get_wch()
        if ch in ("\n", "\r", curses.KEY_ENTER):
            return "".join(buf)
        if ch == "\x1b":
            return None
        if ch in (curses.KEY_BACKSPACE, "\x7f", "\b"):
            if buf:
                buf.pop()
        elif isinstance(ch, str) and ch.isprintable():
            buf.append(ch)


class TUI:
    """Curses front end; every keypress maps to one manager operation."""

    def __init__(self, stdscr, manager: TaskListManager):
        self.stdscr = stdscr
        self.manager = manager
        self.cursor = 0
        self.scroll = 0
        self.view: List[Task] = manager.derived_view()
        self.status = "Press ? for help. a to add; space to toggle; e to edit."
        self._unsubscribe = manager.subscribe(self.refresh_view)
        curses.curs_set(0)
        self.stdscr.keypad(True)
        self.height, self.width = self.stdscr.getmaxyx()

    def refresh_view(self) -> None:
        self.view = self.manager.derived_view()
        if self.view:
            self.cursor = max(0, min(self.cursor, len(self.view) - 1))
        else:
            self.cursor = 0

    def selected(self) -> Optional[Task]:
        if not self.view:
            return None
        return self.view[self.cursor]

    def draw(self):
        """Render header, task list, and status line."""
        self.stdscr.erase()
        self.height, self.width = self.stdscr.getmaxyx()

        self.stdscr.addnstr(0, 0, header_line(self.manager), self.width - 1, curses.A_BOLD)
        if not self.manager.tasks:
            sub = "No tasks yet - press 'a' to add."
        elif not self.view:
            sub = "Nothing matches the search - press '/' to change it."
        else:
            sub = ""
        self.stdscr.addnstr(1, 0, sub, self.width - 1, curses.A_DIM)

        top = 2
        body_h = self.height - top - 2
        if body_h < 1:
            return

        if self.cursor < self.scroll:
            self.scroll = self.cursor
        elif self.cursor >= self.scroll + body_h:
            self.scroll = self.cursor - body_h + 1

        for i in range(self.scroll, min(self.scroll + body_h, len(self.view))):
            t = self.view[i]
            attrs = curses.A_DIM if t.completed else curses.A_NORMAL
            if i == self.cursor:
                attrs |= curses.A_REVERSE
            y = top + (i - self.scroll)
            self.stdscr.addnstr(y, 0, format_row(i + 1, t, self.width), self.width - 1, attrs)

        self.stdscr.hline(self.height - 2, 0, curses.ACS_HLINE, self.width)
        self.stdscr.addnstr(self.height - 1, 0, self.status[: self.width - 1], self.width - 1)

        self.stdscr.refresh()

    def prompt(self, prompt: str, initial: str = "") -> Optional[str]:
        """Inline text input. Returns None on ESC, otherwise the raw text."""
        curses.curs_set(1)
        win = curses.newwin(3, self.width, self.height - 4, 0)
        win.erase()
        win.border()
        win.addnstr(0, 2, " Input (Enter submits, ESC cancels) ", self.width - 4, curses.A_DIM)
        win.addnstr(1, 2, (prompt + " ").ljust(self.width - 4), self.width - 4)
        win.refresh()
        edit_w = max(2, self.width - 4 - len(prompt) - 1)
        edit = curses.newwin(1, edit_w, self.height - 3, len(prompt) + 3)
        edit.keypad(True)
        try:
            return read_line(edit, initial, edit_w)
        finally:
            curses.curs_set(0)

    def confirm(self, prompt: str) -> bool:
        """One-line y/N prompt on the status bar."""
        msg = f"{prompt} [y/N]: "
        curses.curs_set(1)
        self.stdscr.addnstr(self.height - 1, 0, msg.ljust(self.width - 1), self.width - 1)
        self.stdscr.refresh()
        ch = self.stdscr.getch()
        curses.curs_set(0)
        return ch in (ord("y"), ord("Y"))

    def message(self, text: str):
        self.status = text

    def move_cursor(self, delta: int):
        if not self.view:
            return
        self.cursor = max(0, min(len(self.view) - 1, self.cursor + delta))

    def add_task(self):
        s = self.prompt("Add task:")
        if s is None:
            self.message("Add cancelled.")
            return
        if self.manager.add(s) is Outcome.APPLIED:
            self.cursor = 0
            self.message(f"Added: {s.strip()}")
        else:
            self.message("Nothing to add.")

    def edit_task(self):
        t = self.selected()
        if t is None:
            return
        self.manager.start_edit(t.id)
        while isinstance(self.manager.edit_state, Editing):
            s = self.prompt("Edit task:", self.manager.edit_state.text)
            if s is None:
                self.manager.cancel_edit()
                self.message("Edit cancelled.")
                return
            outcome = self.manager.commit_edit(s)
            if outcome is Outcome.VALIDATION_FAILED:
                self.message("Text cannot be empty (ESC cancels).")
                self.draw()
                continue
            self.message("Edited." if outcome is Outcome.APPLIED else "Task is gone.")

    def toggle_task(self):
        t = self.selected()
        if t is None:
            return
        self.manager.toggle_complete(t.id)
        self.message(f"{'Reopened' if t.completed else 'Completed'}: {t.text}")

    def delete_task(self):
        t = self.selected()
        if t is None:
            return
        self.manager.delete(t.id)
        self.message(f"Deleted: {t.text}")

    def clear_all(self):
        if not self.manager.tasks:
            return
        if not self.confirm("Delete every task?"):
            self.message("Clear cancelled.")
            return
        self.manager.clear_all()
        self.message("All tasks removed.")

    def search(self):
        s = self.prompt("Search (/...):", self.manager.search_term)
        if s is None:
            self.message("Search unchanged.")
            return
        self.manager.set_search_term(s)
        self.cursor = 0
        self.message(f"Search: /{s}" if s else "Search cleared.")

    def help_popup(self):
        h, w = self.height, self.width
        win_h = min(len(HELP_TEXT) + 2, h - 2)
        win_w = min(max(len(line) for line in HELP_TEXT) + 4, w - 2)
        win = curses.newwin(win_h, win_w, (h - win_h) // 2, (w - win_w) // 2)
        win.border()
        for i, line in enumerate(HELP_TEXT[: win_h - 2], start=1):
            win.addnstr(i, 2, line, win_w - 4)
        win.addnstr(win_h - 1, 2, "Press any key...", win_w - 4, curses.A_DIM)
        win.refresh()
        win.getch()

    def run(self):
        """Main event loop."""
        try:
            while True:
                self.draw()
                ch = self.stdscr.getch()

                if ch in (ord("q"), 27):
                    break
                elif ch in (curses.KEY_UP, ord("k")):
                    self.move_cursor(-1)
                elif ch in (curses.KEY_DOWN, ord("j")):
                    self.move_cursor(+1)
                elif ch == curses.KEY_PPAGE:
                    self.move_cursor(-(self.height - 5))
                elif ch == curses.KEY_NPAGE:
                    self.move_cursor(+(self.height - 5))
                elif ch == ord("g"):
                    self.cursor = 0
                elif ch == ord("G"):
                    self.cursor = max(0, len(self.view) - 1)
                elif ch == ord("a"):
                    self.add_task()
                elif ch == ord("e"):
                    self.edit_task()
                elif ch in (ord(" "), ord("x")):
                    self.toggle_task()
                elif ch == ord("d"):
                    self.delete_task()
                elif ch == ord("C"):
                    self.clear_all()
                elif ch == ord("/"):
                    self.search()
                elif ch == ord("?"):
                    self.help_popup()
        finally:
            self._unsubscribe()


def main(manager: TaskListManager) -> None:
    """Initialize curses and run the TUI."""

    def _main(stdscr):
        TUI(stdscr, manager).run()

    # get_wch decodes input with the user's locale encoding
    locale.setlocale(locale.LC_ALL, "")
    logger.info("Starting TUI")
    curses.wrapper(_main)
