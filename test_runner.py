"""
Tests for the shifty_runner CLI subcommands.
"""

import json

from shifty_runner import main


def test_status_without_rotation(tmp_path, capsys):
    assert main(["--storage-dir", str(tmp_path), "status"]) == 0
    out = capsys.readouterr().out
    assert "No saved rotation yet" in out
    assert "🧍 STAND" in out


def test_add_then_status(tmp_path, capsys):
    assert main(["--storage-dir", str(tmp_path), "add", " walk ", "🚶"]) == 0
    assert "Added WALK" in capsys.readouterr().out

    config = json.loads((tmp_path / "config.json").read_text(encoding="utf-8"))
    assert {"label": "WALK", "icon": "🚶"} in config["options"]
    # Adding an option never starts a rotation
    assert not (tmp_path / "state.json").exists()

    assert main(["--storage-dir", str(tmp_path), "status"]) == 0
    out = capsys.readouterr().out
    assert "🚶 WALK" in out
    assert "No saved rotation yet" in out


def test_add_leaves_overdue_state_untouched(tmp_path, capsys):
    state_file = tmp_path / "state.json"
    state_file.write_text(json.dumps({
        "currentLabel": "SIT",
        "queueLabels": ["STAND"],
        "nextChange": "2000-01-01T00:00:00Z"
    }), encoding="utf-8")
    before = state_file.read_bytes()

    assert main(["--storage-dir", str(tmp_path), "add", "walk"]) == 0
    assert "Added WALK" in capsys.readouterr().out

    # The overdue switch is left for the running instance to catch up on
    assert state_file.read_bytes() == before
    assert not (tmp_path / "events.jsonl").exists()


def test_add_duplicate_is_rejected(tmp_path, capsys):
    main(["--storage-dir", str(tmp_path), "add", "walk"])
    capsys.readouterr()
    config_file = tmp_path / "config.json"
    before = config_file.read_bytes()

    assert main(["--storage-dir", str(tmp_path), "add", "WALK"]) == 1
    assert "already exists" in capsys.readouterr().out
    assert config_file.read_bytes() == before


def test_add_empty_label_is_rejected(tmp_path, capsys):
    assert main(["--storage-dir", str(tmp_path), "add", "   "]) == 1
    assert "label is empty" in capsys.readouterr().out
