import pytest

from tidewebserver import logger
from tidewebserver.async_logging import AsyncLogging
from tidewebserver.logger import LogLevel


def _all_contents(directory):
    return b"".join(p.read_bytes() for p in sorted(directory.iterdir()))


def test_small_appends_written_on_stop(tmp_path):
    async_log = AsyncLogging(str(tmp_path / "srv"), 1 << 30)
    async_log.start()
    async_log.append(b"one\n")
    async_log.append("two\n")
    async_log.stop()
    assert _all_contents(tmp_path) == b"one\ntwo\n"


def test_order_preserved(tmp_path):
    lines = [f"line {i}\n".encode() for i in range(500)]
    with AsyncLogging(str(tmp_path / "srv"), 1 << 30) as async_log:
        for line in lines:
            async_log.append(line)
    assert _all_contents(tmp_path) == b"".join(lines)


def test_large_appends_switch_buffers(tmp_path):
    first = b"a" * 3_000_000
    second = b"b" * 3_000_000
    third = b"c" * 3_000_000
    with AsyncLogging(str(tmp_path / "srv"), 1 << 30) as async_log:
        async_log.append(first)
        async_log.append(second)
        async_log.append(third)
    assert _all_contents(tmp_path) == first + second + third


def test_stop_without_start_fails(tmp_path):
    async_log = AsyncLogging(str(tmp_path / "srv"), 1 << 20)
    with pytest.raises(RuntimeError):
        async_log.stop()


def test_logger_output_into_async_log(tmp_path):
    previous = logger.log_level()
    async_log = AsyncLogging(str(tmp_path / "srv"), 1 << 30)
    async_log.start()
    logger.set_output(async_log.append)
    try:
        logger.log(LogLevel.WARN, "routed", file="/x/net.cpp", line=7)
    finally:
        logger.set_output(None)
        logger.set_log_level(previous)
        async_log.stop()
    contents = _all_contents(tmp_path)
    assert contents.endswith(b"routed - net.cpp:7\n")
    assert contents.count(b"\n") == 1