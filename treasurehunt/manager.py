"""Command-line entry point for managing treasure hunts."""

from __future__ import annotations

import sys
from typing import Optional, Sequence, TextIO

from .operations import (
    HuntError,
    add,
    help_text,
    list_hunt,
    remove_hunt,
    remove_treasure,
    view,
)
from .records import MAX_INPUT, Treasure, TreasureError, parse_treasure, prompt_treasure


def _invalid_arguments() -> int:
    sys.stderr.write("Invalid arguments\n")
    sys.stdout.write("Type './treasure_manager --help' for more information\n")
    return 1


def _read_treasure(stdin: TextIO, stdout: TextIO) -> Treasure:
    """Parse piped input in one go, or ask for each field interactively."""
    if not stdin.isatty():
        data = stdin.read(MAX_INPUT)
        if data:
            return parse_treasure(data)
    return prompt_treasure(stdin, stdout)


def _run(args: list[str]) -> int:
    if len(args) == 1:
        if args[0] == "--help":
            sys.stdout.write(help_text())
            return 0
        return _invalid_arguments()

    if len(args) == 2:
        command, hunt_id = args
        if command == "--add":
            add(hunt_id, _read_treasure(sys.stdin, sys.stdout))
        elif command == "--list":
            sys.stdout.write(list_hunt(hunt_id))
        elif command == "--remove_hunt":
            remove_hunt(hunt_id)
        else:
            return _invalid_arguments()
        return 0

    if len(args) == 3:
        command, hunt_id, treasure_id = args
        if command == "--view":
            details = view(hunt_id, treasure_id)
            if details is not None:
                sys.stdout.write(details)
        elif command == "--remove_treasure":
            remove_treasure(hunt_id, treasure_id)
        else:
            return _invalid_arguments()
        return 0

    return _invalid_arguments()


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the treasure manager and return its exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        return _run(args)
    except (HuntError, TreasureError) as exc:
        sys.stderr.write(f"{exc}\n")
        return 1
    except OSError as exc:
        sys.stderr.write(f"{exc.strerror or exc}\n")
        return 1


if __name__ == "__main__":
    sys.exit(main())