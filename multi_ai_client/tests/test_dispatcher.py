import json
import threading
import time

import httpx
import pytest

from multi_ai_client.domain.chat import Chat
from multi_ai_client.domain.exceptions import InvalidEndpointError, NoDefinitionsError, UnsupportedAPITypeError
from multi_ai_client.domain.models import APIType
from multi_ai_client.engine.dispatcher import Dispatcher
from multi_ai_client.providers import ModelDefinition


class SettingsStub:
    http_timeout = 1.0
    max_concurrent_streams = 4
    feed_buffer_size = 8
    report_stream_errors = False


def openai_line(text):
    return "data: " + json.dumps({"choices": [{"index": 0, "delta": {"content": text}}]})


def anthropic_line(text):
    return "data: " + json.dumps({"type": "content_block_delta", "delta": {"type": "text_delta", "text": text}})


def definition(name, url, api_type=APIType.OPENAI):
    d = ModelDefinition.create(name, api_type, "key", "model")
    d.api_settings.api_endpoint = url
    return d


def _chat():
    chat = Chat()
    chat.add_user_message("hi")
    return chat


class FakeResponse:
    def __init__(self, status_code, lines):
        self.status_code = status_code
        self._lines = lines

    def iter_lines(self):
        for line in self._lines:
            if isinstance(line, Exception):
                raise line
            yield line

    def read(self):
        return b'{"error": "bad request"}'


def install_transport(monkeypatch, routes):
    """routes: url -> (status, lines) | Exception | callable returning an iterable of lines."""

    calls = []
    released = []
    lock = threading.Lock()

    class StreamContext:
        def __init__(self, url, response):
            self._url = url
            self._response = response

        def __enter__(self):
            return self._response

        def __exit__(self, *args):
            with lock:
                released.append(self._url)
            return False

    class Client:
        def __init__(self, *a, **kw):
            pass

        def __enter__(self):
            return self

        def __exit__(self, *a):
            return False

        def stream(self, method, url, content=None, headers=None):
            with lock:
                calls.append({"method": method, "url": url, "body": content, "headers": headers})
            route = routes[url]
            if isinstance(route, Exception):
                raise route
            if callable(route):
                return StreamContext(url, FakeResponse(200, route()))
            status, lines = route
            return StreamContext(url, FakeResponse(status, lines))

    monkeypatch.setattr("httpx.Client", Client)
    return calls, released


def test_two_streams_merge(monkeypatch):
    calls, released = install_transport(
        monkeypatch,
        {
            "http://a": (200, [openai_line("Hel"), openai_line("lo"), "data: [DONE]", openai_line("late")]),
            "http://b": (200, [anthropic_line("Bon"), anthropic_line("jour"), anthropic_line("!")]),
        },
    )
    defs = [definition("A", "http://a"), definition("B", "http://b", APIType.ANTHROPIC)]
    count, feed = Dispatcher(SettingsStub()).dispatch(defs, _chat())
    chunks = list(feed)

    assert count == 2
    assert len([c for c in chunks if c.index == 0]) == 2
    assert len([c for c in chunks if c.index == 1]) == 3
    assert "".join(c.delta for c in chunks if c.index == 0) == "Hello"
    assert "".join(c.delta for c in chunks if c.index == 1) == "Bonjour!"
    assert feed.closed
    assert sorted(released) == ["http://a", "http://b"]
    assert all(c["method"] == "POST" for c in calls)
    anthropic_call = next(c for c in calls if c["url"] == "http://b")
    assert anthropic_call["headers"]["x-api-key"] == "key"
    assert json.loads(anthropic_call["body"])["messages"] == [{"role": "user", "content": "hi"}]


def test_no_definitions():
    with pytest.raises(NoDefinitionsError) as exc:
        Dispatcher(SettingsStub()).dispatch([], _chat())
    assert exc.value.code == "NO_DEFINITIONS"


def test_construction_error_sends_nothing(monkeypatch):
    calls, _ = install_transport(monkeypatch, {"http://a": (200, [])})
    good = definition("A", "http://a")
    bad = definition("B", "http://b")
    bad.api_settings.api_type = "gemini"
    with pytest.raises(UnsupportedAPITypeError):
        Dispatcher(SettingsStub()).dispatch([good, bad], _chat())
    time.sleep(0.1)
    assert calls == []


def test_malformed_endpoint_sends_nothing(monkeypatch):
    calls, _ = install_transport(monkeypatch, {"http://a": (200, [openai_line("x")])})
    good = definition("A", "http://a")
    bad = definition("B", "http://[::1/v1")
    with pytest.raises(InvalidEndpointError):
        Dispatcher(SettingsStub()).dispatch([good, bad], _chat(), report_errors=True)
    time.sleep(0.1)
    assert calls == []


def test_transport_error_is_local(monkeypatch):
    _, released = install_transport(
        monkeypatch,
        {
            "http://down": httpx.ConnectError("connection refused"),
            "http://midway": (200, [openai_line("par"), httpx.ReadError("reset"), openai_line("never")]),
            "http://ok": (200, [openai_line("fine"), "data: [DONE]"]),
        },
    )
    defs = [definition("down", "http://down"), definition("midway", "http://midway"), definition("ok", "http://ok")]
    count, feed = Dispatcher(SettingsStub()).dispatch(defs, _chat())
    chunks = list(feed)

    assert count == 3
    assert [c.delta for c in chunks if c.index == 0] == []
    assert [c.delta for c in chunks if c.index == 1] == ["par"]
    assert [c.delta for c in chunks if c.index == 2] == ["fine"]
    assert all(c.error is None for c in chunks)
    assert sorted(released) == ["http://midway", "http://ok"]


def test_http_error_status_is_silent(monkeypatch):
    install_transport(
        monkeypatch,
        {
            "http://bad": (401, ['data: {"choices": [{"delta": {"content": "x"}}]}']),
            "http://ok": (200, [openai_line("ok")]),
        },
    )
    defs = [definition("bad", "http://bad"), definition("ok", "http://ok")]
    _, feed = Dispatcher(SettingsStub()).dispatch(defs, _chat())
    chunks = list(feed)
    assert [(c.index, c.delta) for c in chunks] == [(1, "ok")]


def test_report_errors_adds_terminal_chunk(monkeypatch):
    install_transport(
        monkeypatch,
        {
            "http://down": httpx.ConnectError("connection refused"),
            "http://bad": (500, []),
            "http://ok": (200, [openai_line("ok")]),
        },
    )
    defs = [definition("down", "http://down"), definition("bad", "http://bad"), definition("ok", "http://ok")]
    _, feed = Dispatcher(SettingsStub()).dispatch(defs, _chat(), report_errors=True)
    chunks = list(feed)

    errors = {c.index: c.error for c in chunks if c.is_error}
    assert set(errors) == {0, 1}
    assert errors[0].startswith("NETWORK_ERROR")
    assert errors[1].startswith("API_ERROR")
    assert [c.delta for c in chunks if c.index == 2] == ["ok"]


def test_report_errors_default_from_settings(monkeypatch):
    install_transport(monkeypatch, {"http://down": httpx.ConnectError("refused")})

    class ReportingSettings(SettingsStub):
        report_stream_errors = True

    _, feed = Dispatcher(ReportingSettings()).dispatch([definition("down", "http://down")], _chat())
    chunks = list(feed)
    assert len(chunks) == 1
    assert chunks[0].index == 0
    assert chunks[0].delta == ""
    assert chunks[0].is_error


def test_order_preserved_with_small_buffer(monkeypatch):
    words = [f"w{i} " for i in range(50)]
    install_transport(
        monkeypatch,
        {
            "http://a": (200, [openai_line(w) for w in words]),
            "http://b": (200, [anthropic_line(w) for w in reversed(words)]),
        },
    )

    class TinyBuffer(SettingsStub):
        feed_buffer_size = 1
        max_concurrent_streams = 1

    defs = [definition("A", "http://a"), definition("B", "http://b", APIType.ANTHROPIC)]
    _, feed = Dispatcher(TinyBuffer()).dispatch(defs, _chat())
    chunks = list(feed)
    assert [c.delta for c in chunks if c.index == 0] == words
    assert [c.delta for c in chunks if c.index == 1] == list(reversed(words))


def test_cancel_stops_all_streams(monkeypatch):
    def endless():
        i = 0
        while True:
            yield openai_line(f"t{i}")
            i += 1
            time.sleep(0.001)

    _, released = install_transport(monkeypatch, {"http://a": endless, "http://b": endless})
    defs = [definition("A", "http://a"), definition("B", "http://b")]
    _, feed = Dispatcher(SettingsStub()).dispatch(defs, _chat())

    it = iter(feed)
    first = next(it)
    assert first.delta.startswith("t")
    feed.cancel()
    assert feed.wait_closed(timeout=5)
    assert feed.cancelled
    assert sorted(released) == ["http://a", "http://b"]
    # remaining buffered chunks can still be drained, then iteration ends
    rest = list(it)
    assert len(rest) <= SettingsStub.feed_buffer_size


def test_feed_context_manager_cancels(monkeypatch):
    def endless():
        while True:
            yield anthropic_line("x")
            time.sleep(0.001)

    install_transport(monkeypatch, {"http://a": endless})
    _, feed = Dispatcher(SettingsStub()).dispatch([definition("A", "http://a")], _chat())
    with feed:
        next(iter(feed))
    assert feed.wait_closed(timeout=5)
