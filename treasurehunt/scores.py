"""Per-user score totals for a hunt."""

from __future__ import annotations

import os
import sys
from typing import Optional, Sequence

from .records import TreasureError, read_treasures

_USAGE = "Usage: score_calculator <hunt_id>\n"


def _data_path(hunt_id: str) -> str:
    return os.path.join(hunt_id, f"{hunt_id}.dat")


def calculate_scores(hunt_id: str) -> dict[str, int]:
    """Sum treasure values per user, in order of each user's first treasure."""
    scores: dict[str, int] = {}
    for treasure in read_treasures(_data_path(hunt_id)):
        scores[treasure.user_name] = scores.get(treasure.user_name, 0) + treasure.value
    return scores


def format_scores(hunt_id: str, scores: dict[str, int]) -> str:
    """Render the score report for a hunt."""
    lines = [f"\nHunt: {hunt_id}\n"]
    lines.extend(f"{user}: {score}\n" for user, score in scores.items())
    return "".join(lines)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Print the scores of the hunt named on the command line."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 1:
        sys.stderr.write(_USAGE)
        return 1
    hunt_id = args[0]
    try:
        scores = calculate_scores(hunt_id)
    except TreasureError:
        sys.stderr.write("Incomplete treasure record.\n")
        return 1
    except OSError:
        sys.stderr.write("Failed to open .dat file\n")
        return 1
    sys.stdout.write(format_scores(hunt_id, scores))
    sys.stdout.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())