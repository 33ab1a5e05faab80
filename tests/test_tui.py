import curses
import unittest

from todolist.manager import TaskListManager
from todolist.models import Task
from todolist.storage import MemoryStore
from todolist.tui import format_row, header_line, read_line, visible_tail


class TestFormatRow(unittest.TestCase):
    def test_open_and_completed_markers(self) -> None:
        self.assertEqual(format_row(1, Task(id=1, text="buy milk"), 80), "   1. [ ] buy milk")
        self.assertEqual(
            format_row(12, Task(id=1, text="done", completed=True), 80), "  12. [x] done"
        )

    def test_long_text_is_elided_to_width(self) -> None:
        row = format_row(1, Task(id=1, text="x" * 100), 30)
        self.assertLessEqual(len(row), 29)
        self.assertTrue(row.endswith("..."))


class TestHeaderLine(unittest.TestCase):
    def test_counts_and_search_term(self) -> None:
        manager = TaskListManager(MemoryStore())
        manager.add("a")
        manager.add("b")
        manager.toggle_complete(manager.tasks[0].id)
        self.assertEqual(header_line(manager), "todolist: 2 tasks, 1 completed")
        manager.set_search_term("b")
        self.assertEqual(header_line(manager), "todolist: 2 tasks, 1 completed  /b")

    def test_reports_disabled_saving(self) -> None:
        manager = TaskListManager(MemoryStore(fail_saves=True))
        with self.assertLogs("todolist.manager", level="ERROR"):
            manager.add("a")
        self.assertIn("saving disabled", header_line(manager))


class FakeLineWindow:
    """One-row window stand-in that replays keys and records what was drawn."""

    def __init__(self, keys):
        self.keys = list(keys)
        self.drawn = []

    def erase(self) -> None:
        pass

    def addstr(self, y: int, x: int, text: str) -> None:
        self.drawn.append(text)

    def refresh(self) -> None:
        pass

    def get_wch(self):
        return self.keys.pop(0)


class TestReadLine(unittest.TestCase):
    def test_multibyte_input_is_kept_whole(self) -> None:
        win = FakeLineWindow(["우", "유", " ", "사", "기", "\n"])
        self.assertEqual(read_line(win, "", 40), "우유 사기")

    def test_initial_text_backspace_and_enter_key(self) -> None:
        win = FakeLineWindow(["\x7f", curses.KEY_BACKSPACE, "X", curses.KEY_ENTER])
        self.assertEqual(read_line(win, "milk", 40), "miX")

    def test_escape_cancels(self) -> None:
        self.assertIsNone(read_line(FakeLineWindow(["a", "\x1b"]), "text", 40))

    def test_special_keys_are_ignored(self) -> None:
        win = FakeLineWindow([curses.KEY_LEFT, "\t", "a", "\r"])
        self.assertEqual(read_line(win, "", 40), "a")

    def test_long_initial_text_is_clipped_to_window(self) -> None:
        text = "x" * 200
        win = FakeLineWindow(["\n"])
        self.assertEqual(read_line(win, text, 20), text)
        self.assertEqual(win.drawn, ["x" * 19])

    def test_wide_characters_count_two_columns(self) -> None:
        self.assertEqual(visible_tail("ab우유", 4), "우유")
        self.assertEqual(visible_tail("ab우유", 5), "b우유")
        self.assertEqual(visible_tail("우유", 0), "")


if __name__ == "__main__":
    unittest.main(verbosity=2)
