import queue
import threading
import time

from layercfg.container import Container
from layercfg.notify import run_round
from layercfg.observer import FuncObserver


class _Recorder:
    def __init__(self, delay=0.0):
        self.delay = delay
        self.calls = []

    def run(self, container, errors):
        time.sleep(self.delay)
        self.calls.append(container)


def test_round_invokes_every_observer_and_waits():
    c = Container(id="t")
    obs = [_Recorder(delay=0.05) for _ in range(5)]

    run_round(c, obs)

    # the round only returns after the slowest observer finished
    assert all(o.calls == [c] for o in obs)


def test_observers_run_concurrently():
    c = Container(id="t")
    barrier = threading.Barrier(3, timeout=5.0)
    passed = []

    def fn(container, errors):
        barrier.wait()
        passed.append(True)

    run_round(c, [FuncObserver(fn) for _ in range(3)])
    assert len(passed) == 3


def test_error_channel_is_shared_and_not_drained():
    c = Container(id="t")

    def reporter(container, errors):
        errors.put(ValueError("bad value"))

    errs = run_round(c, [FuncObserver(reporter), FuncObserver(reporter), _Recorder()])

    assert isinstance(errs, queue.Queue)
    assert errs.qsize() == 2
    assert isinstance(errs.get_nowait(), ValueError)


def test_failing_observer_does_not_stop_others(caplog):
    c = Container(id="t")
    ok = _Recorder()

    def explode(container, errors):
        raise RuntimeError("observer blew up")

    run_round(c, [FuncObserver(explode), ok])

    assert ok.calls == [c]
    assert "Observer failed" in caplog.text


def test_empty_round_returns_immediately():
    errs = run_round(Container(id="t"), [])
    assert errs.empty()
