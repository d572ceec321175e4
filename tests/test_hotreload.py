import os
import threading
import time
from pathlib import Path

from layercfg.filesystem import OsFileSystem
from layercfg.hotreload import FileWatcher


def test_poll_fires_once_per_change(mem_fs):
    mem_fs.write_file("conf.yaml", "a: 1\n")
    seen = []
    w = FileWatcher("conf.yaml", lambda p, m: seen.append((p, m)), fs=mem_fs, poll_interval_sec=3600)
    w.start()
    try:
        assert w.poll() is False

        mem_fs.write_file("conf.yaml", "a: 2\n")
        assert w.poll() is True
        assert w.poll() is False

        assert len(seen) == 1
        assert seen[0][0] == Path("conf.yaml")
        assert seen[0][1] == mem_fs.mtime("conf.yaml")
    finally:
        w.stop()
    assert not w.running


def test_missing_file_is_not_a_change(mem_fs):
    seen = []
    w = FileWatcher("later.yaml", lambda p, m: seen.append(p), fs=mem_fs)
    assert w.poll() is False

    # first sighting only sets the baseline
    mem_fs.write_file("later.yaml", "a: 1\n")
    assert w.poll() is False
    mem_fs.write_file("later.yaml", "a: 2\n")
    assert w.poll() is True

    mem_fs.remove("later.yaml")
    assert w.poll() is False
    assert len(seen) == 1


def test_background_thread_detects_real_file_change(tmp_path: Path):
    cfg = tmp_path / "conf.yaml"
    cfg.write_text("a: 1\n", encoding="utf-8")
    fired = threading.Event()

    w = FileWatcher(cfg, lambda p, m: fired.set(), fs=OsFileSystem(), poll_interval_sec=0.02)
    w.start()
    try:
        cfg.write_text("a: 2\n", encoding="utf-8")
        bumped = time.time() + 5
        os.utime(cfg, (bumped, bumped))
        assert fired.wait(timeout=5.0)
    finally:
        w.stop()


def test_callback_failure_keeps_loop_alive(mem_fs, caplog):
    mem_fs.write_file("conf.yaml", "a: 1\n")
    calls = []
    second = threading.Event()

    def cb(path, mtime):
        calls.append(mtime)
        if len(calls) == 1:
            raise RuntimeError("boom")
        second.set()

    w = FileWatcher("conf.yaml", cb, fs=mem_fs, poll_interval_sec=0.02)
    w.start()
    try:
        mem_fs.write_file("conf.yaml", "a: 2\n")
        deadline = time.time() + 5
        while not calls and time.time() < deadline:
            time.sleep(0.01)
        mem_fs.write_file("conf.yaml", "a: 3\n")
        assert second.wait(timeout=5.0)
    finally:
        w.stop()
    assert "FileWatcher callback failed" in caplog.text
