"""Monitor process: runs hunt queries written to a command file on request.

The hub writes a command line to ``.monitor_cmd`` and sends SIGUSR1; the
monitor executes it and prints the result. SIGTERM stops the monitor after a
short delay.
"""

from __future__ import annotations

import contextlib
import errno as _errno
import io
import os
import signal
import sys
import time
from typing import Optional, Sequence

from . import manager
from .records import RECORD_SIZE

CMD_FILE = ".monitor_cmd"
_BUFFER_SIZE = 1023
_COMMAND_SIZE = 255
_SKIPPED = {".", "..", ".git"}
_TERM_DELAY = 5
_WHITESPACE = " \t\n\v\f\r"
_VIEW_USAGE = "Invalid view_treasure usage. Format: view_treasure <hunt_id> <treasure_id>\n"


def _count_records(path: str) -> int:
    count = 0
    with open(path, "rb") as handle:
        while len(handle.read(RECORD_SIZE)) == RECORD_SIZE:
            count += 1
    return count


def list_hunts(root: str = ".") -> str:
    """Report every hunt under root with the number of treasures it holds."""
    parts = []
    with os.scandir(root) as entries:
        dirs = [e.name for e in entries if e.is_dir(follow_symlinks=False)]
    for name in dirs:
        if name in _SKIPPED:
            continue
        data_file = os.path.join(root, name, f"{name}.dat")
        try:
            count = _count_records(data_file)
        except OSError as exc:
            parts.append(os.strerror(exc.errno or _errno.EIO))
            continue
        parts.append(f"Hunt: {name} | Treasures: {count}\n")
    return "".join(parts)


def _run_manager(args: list[str]) -> str:
    buffer = io.StringIO()
    with contextlib.redirect_stdout(buffer), contextlib.redirect_stderr(buffer):
        manager.main(args)
    return buffer.getvalue()


def list_treasures(hunt_id: str) -> str:
    """Return the treasure manager's listing of a hunt."""
    path = os.path.join(hunt_id, f"{hunt_id}.dat")
    if not os.access(path, os.R_OK):
        return f"Could not open file: {path}\n"
    return _run_manager(["--list", hunt_id])


def view_treasure(hunt_id: str, treasure_id: str) -> str:
    """Return the treasure manager's details of one treasure."""
    return _run_manager(["--view", hunt_id, treasure_id])


def handle_command(line: str) -> str:
    """Execute one command line and return what it prints."""
    buffer = line.split("\n", 1)[0].strip(_WHITESPACE)
    head = buffer[:_COMMAND_SIZE]
    command = head.split(maxsplit=1)[0] if head.split() else ""

    if command == "list_hunts":
        return list_hunts(".")
    if command.startswith("list_treasures"):
        return list_treasures(buffer[15:].strip(_WHITESPACE))
    if buffer.startswith("view_treasure"):
        tokens = [token for token in buffer[14:].split(" ") if token]
        if len(tokens) >= 2:
            return view_treasure(tokens[0], tokens[1])
        return _VIEW_USAGE
    return ""


def _serve_command(signum, frame) -> None:
    try:
        with open(CMD_FILE, encoding="utf-8", errors="replace") as handle:
            line = handle.read(_BUFFER_SIZE)
    except OSError as exc:
        sys.stderr.write(exc.strerror or str(exc))
        sys.stderr.flush()
        sys.exit(1)
    sys.stdout.write(handle_command(line))
    sys.stdout.flush()


def _terminate(signum, frame) -> None:
    time.sleep(_TERM_DELAY)
    sys.exit(0)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Wait for signals and serve commands until told to stop."""
    signal.signal(signal.SIGTERM, _terminate)
    signal.signal(signal.SIGUSR1, _serve_command)
    while True:
        signal.pause()


if __name__ == "__main__":
    sys.exit(main())