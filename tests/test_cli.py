import json
import threading
from pathlib import Path

from layercfg.cli import main


def _w(p: Path, txt: str) -> None:
    p.write_text(txt, encoding="utf-8")


def test_cli_prints_merged_json(tmp_path: Path, capsys):
    a = tmp_path / "a.yaml"
    b = tmp_path / "b.yaml"
    _w(a, "yaml:\n  key: value\n  bool: true\n")
    _w(b, "yaml:\n  key: value2\n")

    # two files arm a watcher; a long poll keeps it idle for the test
    rc = main([str(a), str(b), "--poll", "3600"])

    assert rc == 0
    out = json.loads(capsys.readouterr().out)
    assert out == {"yaml": {"bool": True, "key": "value2"}}


def test_cli_missing_sources_fails(tmp_path: Path, capsys):
    rc = main([str(tmp_path / "missing.yaml")])

    assert rc == 1
    assert "no configuration files found" in capsys.readouterr().err


def test_cli_allow_empty(tmp_path: Path, capsys):
    rc = main(["--allow-empty", str(tmp_path / "missing.yaml")])

    assert rc == 0
    assert capsys.readouterr().out.strip() == "{}"


def test_cli_watch_without_files_fails(capsys):
    rc = main(["--allow-empty", "--watch"])

    assert rc == 1
    assert "nothing to watch" in capsys.readouterr().err


def test_cli_one_shot_leaves_no_watcher_running(tmp_path: Path, capsys):
    a = tmp_path / "a.yaml"
    b = tmp_path / "b.yaml"
    _w(a, "a: 1\n")
    _w(b, "b: 2\n")

    assert main([str(a), str(b), "--poll", "3600"]) == 0
    capsys.readouterr()

    watchers = [t for t in threading.enumerate() if t.name.startswith("FileWatcher[")]
    assert watchers == []
