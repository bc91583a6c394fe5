import re

import pytest

from tidewebserver.threads import Thread, is_main_thread, thread_name, tid


def test_main_thread_information():
    assert is_main_thread() is True
    assert thread_name() == "main"
    assert tid() > 0


def test_thread_runs_function_with_its_own_identity():
    seen = {}

    def work():
        seen["name"] = thread_name()
        seen["tid"] = tid()
        seen["main"] = is_main_thread()

    thread = Thread(work, "worker")
    assert not thread.started
    thread.start()
    assert thread.started
    assert thread.join(5) is True
    assert seen["name"] == "worker"
    assert seen["main"] is False
    assert seen["tid"] == thread.tid
    assert thread.tid != tid()
    assert thread.name == "worker"


def test_default_name_uses_creation_count():
    before = Thread.num_created()
    thread = Thread(lambda: None)
    assert Thread.num_created() == before + 1
    assert re.fullmatch(r"Thread \d+", thread.name)
    assert thread.name == f"Thread {before + 1}"


def test_join_before_start_raises():
    thread = Thread(lambda: None, "idle")
    with pytest.raises(RuntimeError):
        thread.join()


def test_double_start_and_double_join_raise():
    thread = Thread(lambda: None, "once")
    thread.start()
    with pytest.raises(RuntimeError):
        thread.start()
    assert thread.join(5) is True
    with pytest.raises(RuntimeError):
        thread.join()


def test_exception_is_reraised_on_join():
    def boom():
        raise ValueError("bad")

    thread = Thread(boom, "failing")
    thread.start()
    with pytest.raises(ValueError, match="bad"):
        thread.join(5)