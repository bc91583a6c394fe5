import threading

import pytest

from tidewebserver.event_loop_thread import EventLoopThread, EventLoopThreadPool
from tidewebserver.threads import thread_name


def _run_on(loop):
    seen = []
    done = threading.Event()

    def record():
        seen.append(threading.get_ident())
        done.set()

    loop.queue_in_loop(record)
    assert done.wait(5)
    return seen[0]


def test_start_returns_loop_on_another_thread():
    worker = EventLoopThread("io-test")
    loop = worker.start()
    try:
        assert _run_on(loop) != threading.get_ident()
    finally:
        worker.stop()
    assert not loop.running


def test_init_callback_sees_loop_and_thread_name():
    seen = []
    worker = EventLoopThread("io-worker", lambda loop: seen.append((loop, thread_name())))
    loop = worker.start()
    try:
        assert seen == [(loop, "io-worker")]
    finally:
        worker.stop()


def test_failing_init_callback_is_raised_from_start():
    def fail(loop):
        raise ValueError("bad init")

    worker = EventLoopThread("io-fail", fail)
    with pytest.raises(ValueError, match="bad init"):
        worker.start()


def test_context_manager_stops_loop():
    with EventLoopThread("io-ctx") as loop:
        ident = _run_on(loop)
    assert ident != threading.get_ident()
    assert not loop.running


def test_pool_hands_out_loops_in_turn():
    with EventLoopThreadPool(3, "pool") as pool:
        loops = pool.loops
        assert len(set(map(id, loops))) == 3
        picked = [pool.get_loop() for _ in range(4)]
        assert picked == [loops[1], loops[2], loops[0], loops[1]]


def test_pool_of_one_always_returns_same_loop():
    with EventLoopThreadPool(1) as pool:
        only = pool.loops[0]
        assert [pool.get_loop() for _ in range(3)] == [only, only, only]


def test_pool_threads_are_named_with_index():
    names = []
    lock = threading.Lock()

    def init(loop):
        with lock:
            names.append(thread_name())

    with EventLoopThreadPool(2, "pool", init) as pool:
        assert len(pool.loops) == 2
    assert sorted(names) == ["pool0", "pool1"]


def test_pool_loops_run_on_distinct_threads():
    with EventLoopThreadPool(2, "distinct") as pool:
        idents = {_run_on(loop) for loop in pool.loops}
    assert len(idents) == 2
    assert threading.get_ident() not in idents


def test_get_loop_before_start_raises():
    pool = EventLoopThreadPool(2)
    with pytest.raises(RuntimeError):
        pool.get_loop()


def test_start_twice_raises():
    with EventLoopThreadPool(1) as pool:
        with pytest.raises(RuntimeError):
            pool.start()


def test_negative_pool_size_raises():
    with pytest.raises(ValueError):
        EventLoopThreadPool(-1)