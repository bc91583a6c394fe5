# tidewebserver

A compact toolkit for building TCP and HTTP servers on the reactor pattern.
It provides one event loop per thread, channel-based event dispatch over the
standard `selectors` module, growable byte buffers, an incremental HTTP/1.x
request parser, response serialisation, and a buffered logging system with
rolling log files.

The package has no dependencies outside the standard library.

## Installation

```
pip install tidewebserver
```

For running the test suite:

```
pip install "tidewebserver[test]"
pytest
```

## Building blocks

| Module | What it provides |
| --- | --- |
| `tidewebserver.timestamp` | `Timestamp`, `time_difference`, `add_time` |
| `tidewebserver.sync` | `CountDownLatch`, `BlockingQueue` |
| `tidewebserver.threads` | `Thread`, `tid`, `thread_name`, `is_main_thread` |
| `tidewebserver.buffer` | `Buffer`, a growable read/write byte buffer |
| `tidewebserver.inet_address` | `InetAddress` for IPv4 endpoints |
| `tidewebserver.logstream` | `LogBuffer`, `LogStream` |
| `tidewebserver.logger` | `Logger`, `LogLevel`, `FatalError`, `log`, `set_log_level`, `set_output`, `set_flush` |
| `tidewebserver.logfile` | `LogFile`, `log_file_name` |
| `tidewebserver.async_logging` | `AsyncLogging`, a background log writer |
| `tidewebserver.request` | `Request`, `RequestMethod`, `HttpVersion` |
| `tidewebserver.parser` | `Parser`, `ParseError`, `ParseState`, `parse_method`, `parse_version` |
| `tidewebserver.response` | `Response`, `status_text` |
| `tidewebserver.sockets` | non-blocking socket helpers and `SocketError` |
| `tidewebserver.channel` | `Channel`, `Event`, `event_to_string` |
| `tidewebserver.poller` | `Poller`, built on `selectors.DefaultSelector` |
| `tidewebserver.event_loop` | `EventLoop` |
| `tidewebserver.event_loop_thread` | `EventLoopThread`, `EventLoopThreadPool` |
| `tidewebserver.acceptor` | `Acceptor`, the listening socket |
| `tidewebserver.connection` | `Connection`, `ConnectionState` |

## Buffers

```python
from tidewebserver.buffer import Buffer

buf = Buffer()
buf.write(b"Hello World")
buf.read(5)        # b"Hello"
len(buf)           # 6
buf.read_all()     # b" World"
```

`write` accepts bytes or text (encoded as UTF-8). Reading or consuming
everything resets the buffer's positions.

## Parsing a request

```python
from tidewebserver.buffer import Buffer
from tidewebserver.parser import Parser

buf = Buffer()
buf.write(b"GET /index.html HTTP/1.1\r\nHost: localhost\r\n\r\n")

parser = Parser()
if parser.parse_request(buf):
    request = parser.request
    print(request.method, request.url, request.get_header("Host"))
```

`parse_request` consumes what it understood from the buffer and returns
whether a whole request has been read. A request can arrive in pieces: call
it again as more bytes land in the buffer. `POST` and `PUT` requests need a
`Content-Length` header; the body is collected into `request.body`. A
malformed request raises `ParseError`. Call `reset()` before parsing the
next request on the same connection.

## Building a response

```python
from tidewebserver.response import Response

response = Response(status=200, body="<h1>Hello World</h1>", close_connection=False)
response.add_header("Content-Type", "text/html")
payload = response.to_string()
```

The status line uses `HTTP/1.1` and a reason phrase from `status_text`
(unknown codes give `Unknown`). A `Connection` header is always written, and
`Content-Length` whenever the body is not empty.

## Logging

```python
from tidewebserver.logger import LogLevel, log, set_log_level

set_log_level(LogLevel.TRACE)
log(LogLevel.INFO, "server running")
```

The starting level comes from the environment: `LOG_TRACE` selects TRACE,
`LOG_DEBUG` selects DEBUG, and INFO is used otherwise. TRACE, DEBUG and INFO
records are filtered by the current level; WARN, ERROR and FATAL are always
written. A FATAL record is flushed and then raises `FatalError`. Records go
to standard output unless `set_output` installs another sink.

Timestamps in log lines and log file names are formatted by
`Timestamp.to_formatted_string`, which shows the time in UTC+8.

`LogFile` appends to a file named after a base name and the current time,
starting a new file when the current one passes its roll size or a new day
begins. `AsyncLogging` lets any thread `append` log data while a background
thread writes it to a `LogFile`; use it as a context manager or call
`start()` and `stop()`.

## Event loops

```python
from tidewebserver.event_loop_thread import EventLoopThreadPool

pool = EventLoopThreadPool(size=4, name="io")
pool.start()
loop = pool.get_loop()
loop.run_in_loop(lambda: print("running inside the io thread"))
pool.stop()
```

An `EventLoop` belongs to the thread that created it. `run_in_loop` runs a
function at once on that thread and queues it from any other;
`queue_in_loop` always queues. `stop()` wakes the loop and ends it after the
current iteration.

## Putting a server together

An `Acceptor` attached to a loop hands each accepted socket to a callback.
Wrap the socket in a `Connection` on one of the pool's loops and call
`establish()` to begin reading:

```python
from tidewebserver.acceptor import Acceptor
from tidewebserver.connection import Connection
from tidewebserver.event_loop import EventLoop
from tidewebserver.event_loop_thread import EventLoopThreadPool

pool = EventLoopThreadPool(size=2, name="io")
pool.start()
main_loop = EventLoop()


def on_message(conn, buffer):
    conn.send(buffer.read_all())


def on_accept(sock, peer):
    io_loop = pool.get_loop()

    def setup():
        conn = Connection(io_loop, sock, acceptor.host_address, peer)
        conn.message_callback = on_message
        conn.establish()

    io_loop.run_in_loop(setup)


acceptor = Acceptor(main_loop, 8080, on_accept)
acceptor.listen()
main_loop.loop()
```

A `Connection` reports through `message_callback`, `connection_callback`,
`write_finish_callback` and `close_callback`, and keeps per-connection state
in `context`, for example a `Parser`.

## What the package does not do

- There is no ready-made server class that wires the acceptor, the loop
  pool and connections together, and no HTTP server that routes requests to
  handlers; the pieces above have to be assembled as shown.
- There is no command-line program.
- There are no timers in the event loop.
- Only IPv4 addresses are supported.