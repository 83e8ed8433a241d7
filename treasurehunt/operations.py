"""Hunt operations: adding, listing, viewing and removing treasures.

A hunt is a directory in the working directory holding ``<hunt>.dat`` with
fixed-size treasure records and ``logged_hunt.txt`` with an operation log.
A symbolic link ``logged_hunt--<hunt>`` next to the hunt points at the log.
"""

from __future__ import annotations

import os
import time
from pathlib import Path
from typing import Optional

from .records import Treasure, read_treasures, treasure_id_available

LOG_NAME = "logged_hunt.txt"
LINK_PREFIX = "logged_hunt--"
TEMP_NAME = "temp.data"
_TEXT_LIMIT = 59
_TIMESTAMP_FORMAT = "%d-%m-%Y %H:%M:%S"

_HELP = (
    "Usage: treasure_manager <command> [arguments]\n\n"
    "Commands:\n"
    "  --add <hunt_id>                  Add a new treasure to the specified hunt\n"
    "  --list <hunt_id>                 List all treasures in the specified hunt\n"
    "  --view <hunt_id> <treasure_id>   View details of a specific treasure\n"
    "  --remove_treasure <hunt_id> <treasure_id>\n"
    "                                 Remove a specific treasure from a hunt\n"
    "  --remove_hunt <hunt_id>          Remove an entire hunt and all its treasures\n"
    "  --help                           Display this help message\n\n"
    "Examples:\n"
    "  treasure_manager --add hunt001\n"
    "  treasure_manager --list hunt001\n"
    "  treasure_manager --view hunt001 treasure42\n"
)


class HuntError(Exception):
    """Raised when a hunt operation cannot be carried out."""


def help_text() -> str:
    """Return the usage text of the treasure manager."""
    return _HELP


def _normalise(hunt_id: str) -> str:
    return hunt_id[:-1] if hunt_id.endswith("/") else hunt_id


def _clip(text: str) -> str:
    return text[:_TEXT_LIMIT]


def _data_path(hunt_id: str) -> str:
    return os.path.join(hunt_id, f"{hunt_id}.dat")


def _require_hunt(hunt_id: str, message: str) -> None:
    if not os.path.exists(hunt_id):
        raise HuntError(message)


def log_operation(hunt_id: str, operation: str, details: str) -> None:
    """Append a timestamped entry to the hunt's log file."""
    timestamp = time.strftime(_TIMESTAMP_FORMAT, time.localtime())
    entry = f"[{timestamp}] {operation}: {details}\n"
    with open(os.path.join(hunt_id, LOG_NAME), "a", encoding="utf-8") as log:
        log.write(entry)


def create_log_symlink(hunt_id: str) -> None:
    """Point ``logged_hunt--<hunt>`` at the hunt's log, replacing any old link."""
    target = os.path.join(hunt_id, LOG_NAME)
    link = f"{LINK_PREFIX}{hunt_id}"
    try:
        os.unlink(link)
    except FileNotFoundError:
        pass
    os.symlink(target, link)


def add(hunt_id: str, treasure: Treasure) -> None:
    """Store a new treasure in the hunt, creating the hunt if needed."""
    hunt_id = _normalise(hunt_id)
    if not os.path.exists(hunt_id):
        os.mkdir(hunt_id, 0o775)

    data = _data_path(hunt_id)
    Path(data).touch(exist_ok=True)

    if not treasure_id_available(data, treasure.treasure_id):
        raise HuntError("Treasure ID already taken")

    with open(data, "ab") as handle:
        handle.write(treasure.to_bytes())

    log_operation(hunt_id, "Add hunt", _clip(f"Added treasure with ID - {treasure.treasure_id}"))
    create_log_symlink(hunt_id)


def list_hunt(hunt_id: str) -> str:
    """Describe the hunt's data file and return it with the ids of its treasures."""
    hunt_id = _normalise(hunt_id)
    _require_hunt(hunt_id, "No such directory")

    data = _data_path(hunt_id)
    info = os.stat(data)
    parts = [
        f"\nNume: {hunt_id}\n",
        f"Size: {info.st_size}\n",
        f"Last modified - {time.ctime(info.st_mtime)}\n\n",
    ]
    parts.extend(f"ID: {treasure.treasure_id}\n" for treasure in read_treasures(data))

    log_operation(hunt_id, "List hunt", _clip(f"Listed hunt with ID - {hunt_id}"))
    create_log_symlink(hunt_id)
    return "".join(parts)


def _describe(treasure: Treasure) -> str:
    return (
        f"\nTreasure ID: {treasure.treasure_id}\n"
        f"User Name: {treasure.user_name}\n"
        f"Coordinate X: {treasure.x:.6f}\n"
        f"Coordinate Y: {treasure.y:.6f}\n"
        f"Clue: {treasure.clue}\n"
        f"Value: {treasure.value}\n"
    )


def view(hunt_id: str, treasure_id: str) -> Optional[str]:
    """Return the details of one treasure, or None if the hunt has no such id."""
    hunt_id = _normalise(hunt_id)
    _require_hunt(hunt_id, f"No such directory ({hunt_id})")

    found = None
    for treasure in read_treasures(_data_path(hunt_id)):
        if treasure.treasure_id == treasure_id:
            found = treasure
            break

    if found is None:
        log_operation(hunt_id, "View treasure", "No matching treasure ID was found")
        return None

    log_operation(hunt_id, "View treasure", _clip(f"Showed details on treasure - {treasure_id}"))
    return _describe(found)


def remove_treasure(hunt_id: str, treasure_id: str) -> bool:
    """Remove every treasure with this id; return True if any was removed."""
    hunt_id = _normalise(hunt_id)
    _require_hunt(hunt_id, f"No such directory ({hunt_id})")

    data = _data_path(hunt_id)
    treasures = list(read_treasures(data))
    kept = [treasure for treasure in treasures if treasure.treasure_id != treasure_id]

    temp = os.path.join(hunt_id, TEMP_NAME)
    with open(temp, "wb") as handle:
        handle.write(b"".join(treasure.to_bytes() for treasure in kept))
    os.replace(temp, data)

    removed = len(kept) != len(treasures)
    if removed:
        details = _clip(f"Removed treasure with id - {treasure_id}")
    else:
        details = "No matching treasure ID was found"
    log_operation(hunt_id, "Remove treasure", details)
    create_log_symlink(hunt_id)
    return removed


def remove_hunt(hunt_id: str) -> None:
    """Delete the hunt directory with its contents and its log link."""
    hunt_id = _normalise(hunt_id)
    _require_hunt(hunt_id, f"No such directory ({hunt_id})")

    with os.scandir(hunt_id) as entries:
        contents = list(entries)
    for entry in contents:
        if entry.is_dir(follow_symlinks=False):
            os.rmdir(entry.path)
        else:
            os.remove(entry.path)

    os.rmdir(hunt_id)
    os.unlink(f"{LINK_PREFIX}{hunt_id}")