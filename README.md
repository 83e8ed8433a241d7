# treasurehunt

A small toolkit for running treasure hunts. Each hunt lives in its own
directory under the current working directory and holds a binary record
file of treasures (`<hunt>/<hunt>.dat`) together with an operation log
(`<hunt>/logged_hunt.txt`). A symbolic link `logged_hunt--<hunt>` in the
working directory points at the log and is refreshed by the operations
that write to it.

The monitor and the hub rely on POSIX signals (`SIGUSR1`, `SIGTERM`), so
they run on POSIX systems only.

## Installation

```
pip install .
```

## Managing treasures

```
treasure-manager --help
treasure-manager --add hunt001
treasure-manager --list hunt001
treasure-manager --view hunt001 t1
treasure-manager --remove_treasure hunt001 t1
treasure-manager --remove_hunt hunt001
```

`--add` creates the hunt if it does not exist yet and reads the treasure's
six fields — ID, user name, X coordinate, Y coordinate, clue and value —
either from piped standard input, one field per line, or interactively
with prompts (invalid numbers are asked for again):

```
printf 't1\nalice\n5.0\n5.0\nUnder the bridge\n50\n' | treasure-manager --add hunt001
```

Treasure IDs must be unique within a hunt; coordinates accept an optional
minus sign, digits and at most one decimal point, and the value must be an
integer. IDs and user names are kept to 19 bytes, clues to 127.

`--list` prints the hunt's name, the size and last modification time of its
data file, and the ID of every treasure. `--view` prints all fields of one
treasure. `--remove_hunt` deletes the hunt directory and its log link.
On an error the command prints a message to standard error and exits with
status 1.

## Scores

```
score-calculator hunt001
```

prints every user of the hunt with the sum of the values of their treasures,
in the order the users first appear.

## The hub

```
treasure-hub
```

starts an interactive shell. Its commands:

- `help` — list the commands
- `start_monitor` — start a background monitor process
- `list_hunts` — every hunt with its number of treasures
- `list_treasures <hunt_id>` — the treasures of one hunt
- `view_treasure <hunt_id> <treasure_id>` — the details of one treasure
- `calculate_score` — scores for every hunt, one score calculator per hunt
- `stop_monitor` — stop the monitor
- `exit` — leave the hub (only once the monitor is stopped)

`list_hunts`, `list_treasures`, `view_treasure` and `stop_monitor` need a
running monitor. After `stop_monitor` the monitor waits five seconds before
exiting; until then the hub answers every command with a request to wait.

The monitor (`treasure-monitor`) is normally started by the hub, which writes
each command to the `.monitor_cmd` file in the working directory and signals
the monitor with `SIGUSR1` to run it.

## Library use

```python
from treasurehunt.records import parse_treasure, read_treasures
from treasurehunt.operations import add, view
from treasurehunt.scores import calculate_scores, format_scores

treasure = parse_treasure("t1\nalice\n5.0\n5.0\nUnder the bridge\n50\n")
add("hunt001", treasure)
print(view("hunt001", "t1"))
print(format_scores("hunt001", calculate_scores("hunt001")))
```

`Treasure.to_bytes()` and `Treasure.from_bytes()` convert between a
treasure and its fixed-size record; `read_treasures(path)` yields the
treasures of a data file in order.