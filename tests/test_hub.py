import io
import os
import signal
import sys
import time

import pytest

from treasurehunt import hub as hub_module
from treasurehunt.hub import CMD_FILE, Hub, MonitorState, main
from treasurehunt.operations import add
from treasurehunt.records import Treasure
from treasurehunt.scores import calculate_scores, format_scores


@pytest.fixture
def hunt_dir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _hub():
    out = io.StringIO()
    return Hub(out), out


def test_initial_state_is_offline():
    hub, _ = _hub()
    assert hub.state is MonitorState.OFFLINE
    assert hub.pid == 0


def test_help_lists_commands():
    hub, out = _hub()
    hub.help("help")
    text = out.getvalue()
    assert text.startswith("Available commands:\n")
    assert "  start_monitor: Start the monitor process\n" in text
    assert "  exit: Exit the program\n" in text


def test_dispatch_help_prints_help_once():
    hub, out = _hub()
    assert hub.dispatch("help\n") is True
    assert out.getvalue().count("Available commands:") == 1


def test_unknown_command():
    hub, out = _hub()
    assert hub.dispatch("dance") is True
    assert out.getvalue() == "Unknown command. Type 'help' for more information\n"


def test_command_must_match_whole_word():
    hub, out = _hub()
    hub.dispatch("list_huntsx")
    assert out.getvalue() == "Unknown command. Type 'help' for more information\n"


def test_blank_line_does_nothing():
    hub, out = _hub()
    assert hub.dispatch("   \n") is True
    assert out.getvalue() == ""


@pytest.mark.parametrize(
    "line",
    ["list_hunts", "list_treasures h1", "view_treasure h1 t1", "stop_monitor"],
)
def test_monitor_commands_need_running_monitor(line):
    hub, out = _hub()
    assert hub.dispatch(line) is True
    assert out.getvalue() == "Monitor is not running.\n"
    assert hub.state is MonitorState.OFFLINE


def test_exit_stops_hub_when_offline():
    hub, out = _hub()
    assert hub.dispatch("exit") is False
    assert out.getvalue() == ""


def test_calculate_score_reports_each_hunt(hunt_dir):
    add("h1", Treasure("t1", "alice", 1.0, 1.0, "clue", 50))
    add("h1", Treasure("t2", "bob", 2.0, 2.0, "clue", 100))
    hub, out = _hub()
    hub.calculate_score("calculate_score")
    expected = format_scores("h1", calculate_scores("h1"))
    assert out.getvalue() == expected
    assert "alice: 50\n" in out.getvalue()


def test_calculate_score_skips_dirs_without_data(hunt_dir):
    add("h1", Treasure("t1", "carol", 1.0, 1.0, "clue", 200))
    (hunt_dir / "empty").mkdir()
    (hunt_dir / ".git").mkdir()
    hub, out = _hub()
    assert hub.dispatch("calculate_score") is True
    assert out.getvalue() == "\nHunt: h1\ncarol: 200\n"


def test_calculate_score_without_hunts(hunt_dir):
    hub, out = _hub()
    hub.calculate_score("calculate_score")
    assert out.getvalue() == ""


def test_send_monitor_command_writes_file_and_signals(hunt_dir):
    received = []
    previous = signal.signal(signal.SIGUSR1, lambda signum, frame: received.append(signum))
    try:
        hub, out = _hub()
        hub.pid = os.getpid()
        hub.send_monitor_command("list_treasures h1")
        deadline = time.monotonic() + 2
        while not received and time.monotonic() < deadline:
            time.sleep(0.01)
    finally:
        signal.signal(signal.SIGUSR1, previous)
    assert (hunt_dir / CMD_FILE).read_text() == "list_treasures h1\n"
    assert received == [signal.SIGUSR1]
    assert hub.state is MonitorState.OFFLINE
    assert hub.dispatch("list_hunts") is True
    assert out.getvalue() == "Monitor is not running.\n"


def test_monitor_lifecycle(hunt_dir):
    hub, out = _hub()
    hub.start_monitor("start_monitor")
    pid = hub.pid
    try:
        assert hub.state is MonitorState.RUNNING
        assert pid > 0
        assert "Monitor started successfully.\n" in out.getvalue()

        hub.dispatch("start_monitor")
        assert "Monitor is already running.\n" in out.getvalue()

        assert hub.dispatch("exit") is True
        assert "Monitor still running. Stop it before exiting.\n" in out.getvalue()

        hub.dispatch("stop_monitor")
        assert hub.state is MonitorState.SHUTTING_DOWN
        assert hub.dispatch("help") is True
        assert out.getvalue().endswith("Monitor is shutting down. Please wait...\n") or (
            "Monitor is shutting down. Please wait...\n" in out.getvalue()
        )
    finally:
        try:
            os.kill(pid, signal.SIGKILL)
        except ProcessLookupError:
            pass
        deadline = time.monotonic() + 15
        while hub.state is not MonitorState.OFFLINE and time.monotonic() < deadline:
            time.sleep(0.05)
    assert hub.state is MonitorState.OFFLINE
    assert hub.pid == 0
    assert "Monitor process has exited.\n" in out.getvalue()


def test_main_runs_until_exit(monkeypatch, capsys):
    previous = signal.getsignal(signal.SIGUSR1)
    monkeypatch.setattr(sys, "stdin", io.StringIO("help\nexit\nhelp\n"))
    try:
        status = main([])
    finally:
        signal.signal(signal.SIGUSR1, previous)
    out = capsys.readouterr().out
    assert status == 0
    assert out.startswith(hub_module.PROMPT)
    assert out.count("Available commands:") == 1


def test_main_stops_at_end_of_input(monkeypatch, capsys):
    previous = signal.getsignal(signal.SIGUSR1)
    monkeypatch.setattr(sys, "stdin", io.StringIO("bogus\n"))
    try:
        status = main([])
    finally:
        signal.signal(signal.SIGUSR1, previous)
    out = capsys.readouterr().out
    assert status == 0
    assert "Unknown command. Type 'help' for more information\n" in out
    assert out.count(hub_module.PROMPT) == 2