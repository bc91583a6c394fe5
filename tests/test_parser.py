import pytest

from tidewebserver.buffer import Buffer
from tidewebserver.parser import ParseError, Parser, parse_method, parse_version
from tidewebserver.request import HttpVersion, Request, RequestMethod

GET_REQUEST = b"GET /index.html HTTP/1.1\r\nHost: localhost\r\n\r\n"


def test_complete_get_request():
    parser = Parser()
    consumed = parser.parse(GET_REQUEST)
    assert consumed == len(GET_REQUEST)
    assert parser.got_all() is True
    request = parser.request
    assert request.method is RequestMethod.GET
    assert request.url == "/index.html"
    assert request.version is HttpVersion.HTTP11
    assert request.get_header("Host") == "localhost"


def test_incomplete_request_line_consumes_nothing():
    parser = Parser()
    assert parser.parse(b"GET /index.html HT") == 0
    assert parser.got_all() is False


def test_request_split_over_calls():
    parser = Parser()
    first = GET_REQUEST[:30]
    used = parser.parse(first)
    assert parser.got_all() is False
    rest = first[used:] + GET_REQUEST[30:]
    assert used + parser.parse(rest) == len(GET_REQUEST)
    assert parser.got_all() is True
    assert parser.request.get_header("Host") == "localhost"


def test_head_leaves_following_bytes():
    data = b"HEAD / HTTP/1.0\r\n\r\n"
    parser = Parser()
    assert parser.parse(data + b"extra") == len(data)
    assert parser.got_all() is True
    assert parser.request.method is RequestMethod.HEAD
    assert parser.request.version is HttpVersion.HTTP10


def test_post_with_body():
    data = b"POST /form HTTP/1.1\r\nContent-Length: 5\r\n\r\nhello"
    parser = Parser()
    assert parser.parse(data) == len(data)
    assert parser.got_all() is True
    assert parser.request.method is RequestMethod.POST
    assert parser.request.body == b"hello"


def test_body_in_pieces():
    head = b"PUT /item HTTP/1.1\r\nContent-Length: 10\r\n\r\n"
    parser = Parser()
    assert parser.parse(head + b"abcd") == len(head) + 4
    assert parser.got_all() is False
    assert parser.parse(b"efghijKLM") == 6
    assert parser.got_all() is True
    assert parser.request.body == b"abcdefghij"


def test_zero_content_length():
    data = b"POST / HTTP/1.1\r\nContent-Length: 0\r\n\r\n"
    parser = Parser()
    assert parser.parse(data) == len(data)
    assert parser.got_all() is True
    assert parser.request.body == b""


def test_content_length_with_trailing_text():
    data = b"POST / HTTP/1.1\r\nContent-Length: 3abc\r\n\r\nxyz"
    parser = Parser()
    assert parser.parse(data) == len(data)
    assert parser.request.body == b"xyz"


def test_post_without_content_length_fails():
    with pytest.raises(ParseError):
        Parser().parse(b"POST / HTTP/1.1\r\nHost: localhost\r\n\r\nbody")


@pytest.mark.parametrize("length", [b"abc", b"-4"])
def test_bad_content_length_fails(length):
    data = b"POST / HTTP/1.1\r\nContent-Length: " + length + b"\r\n\r\n"
    with pytest.raises(ParseError):
        Parser().parse(data)


@pytest.mark.parametrize("line", [b"GET\r\n\r\n", b"GET /\r\n\r\n"])
def test_malformed_request_line_fails(line):
    with pytest.raises(ParseError):
        Parser().parse(line)


def test_header_without_colon_fails():
    with pytest.raises(ParseError):
        Parser().parse(b"GET / HTTP/1.1\r\nBroken header\r\n\r\n")


def test_header_spaces_are_trimmed_around_colon():
    parser = Parser()
    parser.parse(b"GET / HTTP/1.1\r\nAccept  :   text/html \r\n\r\n")
    assert parser.request.headers == {"Accept": "text/html "}


def test_unknown_method_waits_in_body():
    data = b"DELETE /x HTTP/1.1\r\nHost: localhost\r\n\r\n"
    parser = Parser()
    assert parser.parse(data) == len(data)
    assert parser.request.method is RequestMethod.OTHER
    assert parser.got_all() is False


def test_parse_request_consumes_buffer():
    buffer = Buffer()
    buffer.write(GET_REQUEST + b"GET /next")
    parser = Parser()
    assert parser.parse_request(buffer) is True
    assert buffer.peek() == b"GET /next"


def test_parse_request_raises_on_bad_data():
    buffer = Buffer()
    buffer.write(b"nonsense\r\n\r\n")
    with pytest.raises(ParseError):
        Parser().parse_request(buffer)


def test_reset_allows_next_request():
    parser = Parser()
    parser.parse(GET_REQUEST)
    parser.reset()
    assert parser.got_all() is False
    assert parser.request == Request()
    data = b"HEAD /other HTTP/1.0\r\n\r\n"
    assert parser.parse(data) == len(data)
    assert parser.request.url == "/other"


@pytest.mark.parametrize(
    "token, method",
    [
        (b"GET", RequestMethod.GET),
        (b"POST", RequestMethod.POST),
        (b"PUT", RequestMethod.PUT),
        (b"HEAD", RequestMethod.HEAD),
        (b"PATCH", RequestMethod.OTHER),
        (b"GETS", RequestMethod.OTHER),
        (b"", RequestMethod.OTHER),
        ("GET", RequestMethod.GET),
    ],
)
def test_parse_method(token, method):
    assert parse_method(token) is method


@pytest.mark.parametrize(
    "token, version",
    [
        (b"HTTP/1.0", HttpVersion.HTTP10),
        (b"HTTP/1.1", HttpVersion.HTTP11),
        (b"HTTP/1.2", HttpVersion.OTHER),
        (b"HTTP/1.10", HttpVersion.OTHER),
        (b"HTTP/2.0", HttpVersion.OTHER),
        (b"", HttpVersion.OTHER),
    ],
)
def test_parse_version(token, version):
    assert parse_version(token) is version