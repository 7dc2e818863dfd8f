import json
import subprocess
import sys
from pathlib import Path

from doorknocking_tracker.__main__ import main

REPO_ROOT = Path(__file__).resolve().parents[1]


def _run(capsys, *argv):
    code = main(list(argv))
    out = capsys.readouterr().out
    return code, out


def test_lookup_found_and_missing(capsys):
    code, out = _run(capsys, "lookup", "--address", "123 Main Street Anytown")
    payload = json.loads(out)
    assert code == 0
    assert payload["found"] is True
    assert payload["property"]["owner_name"] == "John Smith"
    assert payload["properties_loaded"] == 8

    code, out = _run(capsys, "lookup", "--address", "999 Nowhere Ave")
    assert code == 1
    assert json.loads(out)["found"] is False


def test_log_stats_list_clear(capsys, tmp_path):
    db = str(tmp_path / "cli.sqlite")
    code, out = _run(capsys, "--db", db, "log", "--action", "flyer", "--location", "1 A St")
    assert code == 0
    assert json.loads(out)["flyers"] == 1

    _run(capsys, "--db", db, "log", "--action", "dnc", "--location", "2 B St")
    code, out = _run(capsys, "--db", db, "stats")
    assert json.loads(out) == {"total": 2, "flyers": 1, "conversations": 0, "do_not_contact": 1}

    code, out = _run(capsys, "--db", db, "list")
    assert [a["location"] for a in json.loads(out)["activities"]] == ["2 B St", "1 A St"]

    code, out = _run(capsys, "--db", db, "clear", "--yes")
    assert json.loads(out) == {"cleared": 2}


def test_export_writes_file(capsys, tmp_path):
    db = str(tmp_path / "cli.sqlite")
    _run(capsys, "--db", db, "log", "--action", "conversation", "--location", "3 C St, Unit 1")
    code, out = _run(capsys, "--db", db, "export", "--output-dir", str(tmp_path / "out"))
    payload = json.loads(out)
    assert code == 0
    path = Path(payload["path"])
    assert path.exists()
    assert '"3 C St, Unit 1"' in path.read_text(encoding="utf-8")


def test_export_to_stdout(capsys, tmp_path):
    db = str(tmp_path / "cli.sqlite")
    code, out = _run(capsys, "--db", db, "export", "--stdout")
    assert code == 0
    assert out == "Record ID,Timestamp,Current Location,Activity Button Pressed\n"


def test_module_entrypoint_runs_from_repo_root(tmp_path):
    cmd = [
        sys.executable,
        "-m",
        "doorknocking_tracker",
        "--db",
        str(tmp_path / "sub.sqlite"),
        "stats",
    ]
    proc = subprocess.run(cmd, cwd=REPO_ROOT, capture_output=True, text=True, check=False)
    assert proc.returncode == 0, proc.stderr
    assert json.loads(proc.stdout)["total"] == 0


def test_missing_command_exits_with_usage_error(capsys):
    import pytest

    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 2
    assert "usage:" in capsys.readouterr().err
