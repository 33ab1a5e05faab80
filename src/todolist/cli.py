"""todolist command-line entry point."""

import argparse
import logging
import os
from typing import List, Optional

from .manager import TaskListManager
from .models import DEFAULT_DIR, DEFAULT_KEY, LOG_FILENAME
from .storage import FileStore

logger = logging.getLogger(__name__)


def print_view(manager: TaskListManager) -> None:
    """Print the derived view with 1-based positions."""
    view = manager.derived_view()
    if not view:
        print("(no tasks)" if not manager.tasks else "(no matches)")
        return
    for i, t in enumerate(view, start=1):
        marker = "[x]" if t.completed else "[ ]"
        print(f"{i:>3}. {marker} {t.text}")


def setup_logging(log_file: str, verbose: bool) -> None:
    """Log to a file; the terminal belongs to curses."""
    os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
    logging.basicConfig(
        filename=log_file,
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    p = argparse.ArgumentParser(prog="todolist", description="Terminal to-do list.")
    p.add_argument(
        "-l",
        "--list",
        default=DEFAULT_KEY,
        help=f"Storage key, one file per key (default: {DEFAULT_KEY})",
    )
    p.add_argument(
        "-d",
        "--dir",
        default=DEFAULT_DIR,
        help=f"Data directory (default: {DEFAULT_DIR})",
    )
    p.add_argument("--print", action="store_true", help="Print tasks and exit")
    p.add_argument("--search", default="", help="Search term used with --print")
    p.add_argument("--path", action="store_true", help="Show the storage file path and exit")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    p.add_argument("--log-file", help=f"Log file (default: <dir>/{LOG_FILENAME})")
    return p


def main(argv: Optional[List[str]] = None) -> None:
    """CLI entry point. Launches the TUI unless --print or --path is given."""
    args = build_parser().parse_args(argv)
    store = FileStore(args.dir, args.list)

    if args.path:
        print(os.path.abspath(store.path))
        return

    setup_logging(args.log_file or os.path.join(args.dir, LOG_FILENAME), args.verbose)
    manager = TaskListManager(store)

    if args.print:
        manager.set_search_term(args.search)
        print_view(manager)
        return

    from .tui import main as tui_main

    tui_main(manager)


if __name__ == "__main__":
    main()
