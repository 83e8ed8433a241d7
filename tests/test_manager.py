import io
import sys

import pytest

from treasurehunt.manager import main
from treasurehunt.records import read_treasures


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


def feed(monkeypatch, text):
    monkeypatch.setattr(sys, "stdin", io.StringIO(text))


def add(monkeypatch, hunt, text):
    feed(monkeypatch, text)
    return main(["--add", hunt])


def test_help(capsys):
    assert main(["--help"]) == 0
    assert "Usage: treasure_manager <command> [arguments]" in capsys.readouterr().out


def test_no_arguments(capsys):
    assert main([]) == 1
    captured = capsys.readouterr()
    assert "Invalid arguments" in captured.err
    assert "Type './treasure_manager --help' for more information" in captured.out


def test_unknown_option(capsys, workdir):
    assert main(["--frobnicate", "hunt1"]) == 1
    assert "Invalid arguments" in capsys.readouterr().err


def test_scenario_add_and_list(monkeypatch, capsys, workdir):
    assert add(monkeypatch, "test_hunt1", "t1\nalice\n5.0\n5.0\nUnder the bridge\n50\n") == 0
    assert add(monkeypatch, "test_hunt1", "t2\nbob\n6.0\n6.0\nBehind the statue\n100\n") == 0
    assert add(monkeypatch, "test_hunt1", "t3\nalice\n7.0\n7.0\nNear the tree\n150\n") == 0
    capsys.readouterr()
    assert main(["--list", "test_hunt1"]) == 0
    out = capsys.readouterr().out
    assert "Nume: test_hunt1" in out
    assert out.endswith("ID: t1\nID: t2\nID: t3\n")


def test_view(monkeypatch, capsys, workdir):
    add(monkeypatch, "test_hunt2", "x1\ncarol\n1.0\n1.0\nIn the cave\n200\n")
    capsys.readouterr()
    assert main(["--view", "test_hunt2", "x1"]) == 0
    out = capsys.readouterr().out
    assert "User Name: carol\n" in out
    assert "Clue: In the cave\n" in out
    assert "Value: 200\n" in out


def test_duplicate_add(monkeypatch, capsys, workdir):
    add(monkeypatch, "hunt", "y1\nalice\n3.0\n3.0\nNear the old gate\n300\n")
    assert add(monkeypatch, "hunt", "y1\ncarol\n4.0\n4.0\nBy the river\n50\n") == 1
    assert "Treasure ID already taken" in capsys.readouterr().err


def test_bad_coordinate(monkeypatch, capsys, workdir):
    assert add(monkeypatch, "hunt", "y1\nalice\nabc\n3.0\nclue\n300\n") == 1
    assert "Error: Invalid value for coordinate X" in capsys.readouterr().err


def test_remove_treasure(monkeypatch, workdir):
    add(monkeypatch, "hunt", "x1\ncarol\n1.0\n1.0\nIn the cave\n200\n")
    add(monkeypatch, "hunt", "x2\ndave\n2.0\n2.0\nUnder the leaves\n120\n")
    assert main(["--remove_treasure", "hunt", "x1"]) == 0
    stored = [t.treasure_id for t in read_treasures(workdir / "hunt" / "hunt.dat")]
    assert stored == ["x2"]


def test_remove_hunt(monkeypatch, workdir):
    add(monkeypatch, "hunt", "x1\ncarol\n1.0\n1.0\nIn the cave\n200\n")
    assert main(["--remove_hunt", "hunt"]) == 0
    assert not (workdir / "hunt").exists()


def test_list_missing_hunt(capsys, workdir):
    assert main(["--list", "ghost"]) == 1
    assert "No such directory" in capsys.readouterr().err


def test_view_without_data_file(capsys, workdir):
    (workdir / "empty").mkdir()
    assert main(["--view", "empty", "t1"]) == 1
    assert capsys.readouterr().err.strip() != ""