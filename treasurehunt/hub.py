"""Interactive hub that drives the monitor process and score calculators."""

from __future__ import annotations

import enum
import os
import signal
import subprocess
import sys
import threading
from pathlib import Path
from typing import Callable, Optional, Sequence, TextIO

CMD_FILE = ".monitor_cmd"
PROMPT = "> "
_COMMAND_SIZE = 255
_SKIPPED = {".", "..", ".git"}
_WHITESPACE = " \t\n\v\f\r"
_READ_CHUNK = 1024

_HELP = (
    "Available commands:\n"
    "  start_monitor: Start the monitor process\n"
    "  list_hunts: List all hunts and their treasures\n"
    "  list_treasures <hunt_id>: List all treasures in a specific hunt\n"
    "  view_treasure <hunt_id> <treasure_id>: View details of a specific treasure\n"
    "  calculate_score: Calculate scores for all hunts\n"
    "  stop_monitor: Stop the monitor process\n"
    "  exit: Exit the program\n"
)


class MonitorState(enum.Enum):
    """Lifecycle of the monitor process as seen by the hub."""

    OFFLINE = "offline"
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"


def _child_env() -> dict[str, str]:
    """Environment for child processes, able to import this package."""
    env = dict(os.environ)
    root = str(Path(__file__).resolve().parent.parent)
    existing = env.get("PYTHONPATH")
    env["PYTHONPATH"] = f"{root}{os.pathsep}{existing}" if existing else root
    return env


class Hub:
    """Command dispatcher holding the state of the monitor process."""

    def __init__(self, stdout: TextIO) -> None:
        self.stdout = stdout
        self.state = MonitorState.OFFLINE
        self.pid = 0
        self._process: Optional[subprocess.Popen] = None
        self._reader: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self._commands: dict[str, tuple[Callable[[str], bool | None], bool]] = {
            "help": (self.help, False),
            "start_monitor": (self.start_monitor, False),
            "list_hunts": (self.send_monitor_command, True),
            "list_treasures": (self.send_monitor_command, True),
            "view_treasure": (self.send_monitor_command, True),
            "calculate_score": (self.calculate_score, False),
            "stop_monitor": (self.stop_monitor, True),
            "exit": (self._exit, False),
        }

    def _print(self, text: str) -> None:
        with self._lock:
            self.stdout.write(text)
            self.stdout.flush()

    def help(self, line: str) -> None:
        """Print the list of available commands."""
        self._print(_HELP)

    def start_monitor(self, line: str) -> None:
        """Launch the monitor process and relay its output."""
        if self.state is MonitorState.RUNNING:
            self._print("Monitor is already running.\n")
            return
        process = subprocess.Popen(
            [sys.executable, "-m", "treasurehunt.monitor"],
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            env=_child_env(),
        )
        self._process = process
        self.pid = process.pid
        self._reader = threading.Thread(target=self._relay, args=(process,), daemon=True)
        self._reader.start()
        self.state = MonitorState.RUNNING
        self._print("Monitor started successfully.\n")

    def _relay(self, process: subprocess.Popen) -> None:
        """Copy the monitor's output until it exits, then mark it offline."""
        stream = process.stdout
        if stream is not None:
            fd = stream.fileno()
            while chunk := os.read(fd, _READ_CHUNK):
                self._print(chunk.decode("utf-8", "replace"))
            stream.close()
        process.wait()
        self._print("Monitor process has exited.\n")
        if self.pid == process.pid:
            self.state = MonitorState.OFFLINE
            self.pid = 0
            self._process = None
        self._print(PROMPT)

    def send_monitor_command(self, line: str) -> None:
        """Write the command line for the monitor and signal it to run it."""
        with open(CMD_FILE, "w", encoding="utf-8") as handle:
            handle.write(f"{line}\n")
        os.chmod(CMD_FILE, 0o666)
        os.kill(self.pid, signal.SIGUSR1)

    def stop_monitor(self, line: str) -> None:
        """Ask the monitor to terminate, killing it if that fails."""
        self.state = MonitorState.SHUTTING_DOWN
        try:
            os.kill(self.pid, signal.SIGTERM)
        except OSError:
            self._print("Failed to send SIGTERM to monitor.\n")
            os.kill(self.pid, signal.SIGKILL)

    def calculate_score(self, line: str) -> None:
        """Run a score calculator for every hunt and print the reports in order."""
        try:
            with os.scandir(".") as entries:
                names = [e.name for e in entries if e.is_dir(follow_symlinks=False)]
        except OSError:
            self._print("Failed to open current directory.\n")
            return

        children: list[subprocess.Popen] = []
        env = _child_env()
        for name in names:
            if name in _SKIPPED:
                continue
            if not os.path.exists(os.path.join(name, f"{name}.dat")):
                continue
            try:
                child = subprocess.Popen(
                    [sys.executable, "-m", "treasurehunt.scores", name],
                    stdout=subprocess.PIPE,
                    env=env,
                )
            except OSError:
                self._print("Fork failed.\n")
                continue
            children.append(child)

        for child in children:
            output, _ = child.communicate()
            self._print(output.decode("utf-8", "replace"))

    def _exit(self, line: str) -> bool:
        return False

    def dispatch(self, line: str) -> bool:
        """Run one input line; return False when the hub should stop."""
        if self.state is MonitorState.SHUTTING_DOWN:
            self._print("Monitor is shutting down. Please wait...\n")
            return True

        text = line.split("\n", 1)[0].strip(_WHITESPACE)
        if not text:
            return True
        head = text[:_COMMAND_SIZE].split(maxsplit=1)
        command = head[0] if head else ""

        entry = self._commands.get(command)
        if entry is None:
            self._print("Unknown command. Type 'help' for more information\n")
            return True

        handler, requires_monitor = entry
        if requires_monitor and self.state is MonitorState.OFFLINE:
            self._print("Monitor is not running.\n")
            return True
        if command == "exit" and self.state is MonitorState.RUNNING:
            self._print("Monitor still running. Stop it before exiting.\n")
            return True
        return handler(text) is not False


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Read commands from standard input until exit or end of input."""
    signal.signal(signal.SIGUSR1, signal.SIG_IGN)
    hub = Hub(sys.stdout)
    try:
        while True:
            hub._print(PROMPT)
            line = sys.stdin.readline()
            if not line:
                break
            if not hub.dispatch(line):
                break
    except OSError as exc:
        sys.stderr.write(f"{exc.strerror or exc}\n")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())