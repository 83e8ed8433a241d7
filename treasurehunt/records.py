"""Treasure records: validation, parsing and the fixed-size binary layout."""

from __future__ import annotations

import struct
import sys
from collections.abc import Iterator
from dataclasses import dataclass
from os import PathLike
from typing import TextIO, Union

ID_SIZE = 20
USER_SIZE = 20
CLUE_SIZE = 128
MAX_INPUT = 1023

_LAYOUT = struct.Struct(f"={ID_SIZE}s{USER_SIZE}sdd{CLUE_SIZE}si4x")
RECORD_SIZE = _LAYOUT.size

_WHITESPACE = " \t\n\v\f\r"
_DIGITS = frozenset("0123456789")

PathType = Union[str, "PathLike[str]"]


class TreasureError(ValueError):
    """Raised for invalid treasure data or damaged treasure files."""


def _trim(text: str) -> str:
    return text.strip(_WHITESPACE)


def _fit(text: str, size: int) -> str:
    """Cut text so that its UTF-8 form fits a field of size bytes with a terminator."""
    raw = text.encode("utf-8")[: size - 1]
    return raw.decode("utf-8", "ignore")


def _field(raw: bytes) -> str:
    return raw.split(b"\0", 1)[0].decode("utf-8", "replace")


def _to_float(text: str) -> float:
    try:
        return float(text)
    except ValueError:
        return 0.0


def _to_int(text: str) -> int:
    try:
        return int(text)
    except ValueError:
        return 0


@dataclass
class Treasure:
    """One treasure as stored in a hunt's data file."""

    treasure_id: str
    user_name: str
    x: float
    y: float
    clue: str
    value: int

    def __post_init__(self) -> None:
        self.treasure_id = _fit(self.treasure_id, ID_SIZE)
        self.user_name = _fit(self.user_name, USER_SIZE)
        self.clue = _fit(self.clue, CLUE_SIZE)

    def to_bytes(self) -> bytes:
        """Pack the treasure into its fixed-size record."""
        try:
            return _LAYOUT.pack(
                self.treasure_id.encode("utf-8"),
                self.user_name.encode("utf-8"),
                float(self.x),
                float(self.y),
                self.clue.encode("utf-8"),
                int(self.value),
            )
        except struct.error as exc:
            raise TreasureError(f"Cannot store treasure: {exc}") from exc

    @classmethod
    def from_bytes(cls, data: bytes) -> "Treasure":
        """Unpack a treasure from one fixed-size record."""
        if len(data) != RECORD_SIZE:
            raise TreasureError("Incomplete treasure record.")
        tid, user, x, y, clue, value = _LAYOUT.unpack(data)
        return cls(_field(tid), _field(user), x, y, _field(clue), value)


def is_valid_number(text: str | None) -> bool:
    """Accept an optional minus sign, digits and at most one decimal point."""
    if not text:
        return False
    body = text[1:] if text.startswith("-") else text
    seen_point = False
    for char in body:
        if char == ".":
            if seen_point:
                return False
            seen_point = True
        elif char not in _DIGITS:
            return False
    return True


def is_valid_integer(text: str | None) -> bool:
    """Accept an optional minus sign followed by digits."""
    if not text:
        return False
    body = text[1:] if text.startswith("-") else text
    return all(char in _DIGITS for char in body)


def parse_treasure(text: str) -> Treasure:
    """Build a treasure from six lines: id, user, x, y, clue, value."""
    lines = [line for line in text[:MAX_INPUT].split("\n") if line][:6]
    if len(lines) < 6:
        raise TreasureError("Error: Not enough data provided")

    treasure_id = _trim(lines[0])
    if not treasure_id:
        raise TreasureError("Error: Treasure ID cannot be empty")
    user_name = _trim(lines[1])
    if not user_name:
        raise TreasureError("Error: Username cannot be empty")
    x_text = _trim(lines[2])
    if not is_valid_number(x_text):
        raise TreasureError("Error: Invalid value for coordinate X")
    y_text = _trim(lines[3])
    if not is_valid_number(y_text):
        raise TreasureError("Error: Invalid value for coordinate Y")
    value_text = _trim(lines[5])
    if not is_valid_integer(value_text):
        raise TreasureError("Error: Invalid value for treasure value")

    return Treasure(
        treasure_id=treasure_id,
        user_name=user_name,
        x=_to_float(x_text),
        y=_to_float(y_text),
        clue=lines[4],
        value=_to_int(value_text),
    )


def _ask(stdin: TextIO, stdout: TextIO, prompt: str) -> str:
    stdout.write(prompt)
    stdout.flush()
    line = stdin.readline()
    if not line:
        raise TreasureError("Error: Unexpected end of input")
    return line.split("\n", 1)[0]


def _ask_until_valid(stdin: TextIO, stdout: TextIO, prompt: str, check, message: str) -> str:
    while True:
        answer = _trim(_ask(stdin, stdout, prompt))
        if check(answer):
            return answer
        sys.stderr.write(message + "\n")


def prompt_treasure(stdin: TextIO, stdout: TextIO) -> Treasure:
    """Ask for each field of a treasure, re-asking for invalid numbers."""
    treasure_id = _trim(_ask(stdin, stdout, "Give treasure id: "))
    if not treasure_id:
        raise TreasureError("Error: Treasure ID cannot be empty")
    user_name = _trim(_ask(stdin, stdout, "Give treasure username: "))
    if not user_name:
        raise TreasureError("Error: Username cannot be empty")
    x_text = _ask_until_valid(
        stdin, stdout, "Give treasure coordX: ", is_valid_number,
        "Error: Please enter a valid number for coordinate X",
    )
    y_text = _ask_until_valid(
        stdin, stdout, "Give treasure coordY: ", is_valid_number,
        "Error: Please enter a valid number for coordinate Y",
    )
    clue = _ask(stdin, stdout, "Give treasure clue: ")
    value_text = _ask_until_valid(
        stdin, stdout, "Give treasure value: ", is_valid_integer,
        "Error: Please enter a valid integer for treasure value",
    )
    return Treasure(
        treasure_id=treasure_id,
        user_name=user_name,
        x=_to_float(x_text),
        y=_to_float(y_text),
        clue=clue,
        value=_to_int(value_text),
    )


def read_treasures(path: PathType) -> Iterator[Treasure]:
    """Yield the treasures stored in a data file, in file order."""
    with open(path, "rb") as handle:
        while chunk := handle.read(RECORD_SIZE):
            yield Treasure.from_bytes(chunk)


def treasure_id_available(path: PathType, treasure_id: str) -> bool:
    """Return True if no treasure in the file has this id."""
    return all(t.treasure_id != treasure_id for t in read_treasures(path))