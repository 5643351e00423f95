import json

import pytest

from multi_ai_client import APIType, DeltaChunk, ModelDefinition, MultiAIClient
from multi_ai_client.api.service import ask_all, collect_responses, pick_response
from multi_ai_client.domain.exceptions import NoDefinitionsError
from multi_ai_client.domain.models import MessageType


class SettingsStub:
    http_timeout = 1.0
    max_concurrent_streams = 4
    feed_buffer_size = 8
    report_stream_errors = False


def install_transport(monkeypatch, routes):
    sent = []

    class FakeResponse:
        status_code = 200

        def __init__(self, lines):
            self._lines = list(lines)

        def iter_lines(self):
            for line in self._lines:
                yield line

    class StreamContext:
        def __init__(self, response):
            self._response = response

        def __enter__(self):
            return self._response

        def __exit__(self, *args):
            return False

    class Client:
        def __init__(self, *a, **kw):
            pass

        def __enter__(self):
            return self

        def __exit__(self, *a):
            return False

        def stream(self, method, url, content=None, headers=None):
            sent.append(json.loads(content))
            return StreamContext(FakeResponse(routes[url]))

    monkeypatch.setattr("httpx.Client", Client)
    return sent


def make_client(*urls):
    client = MultiAIClient(cfg=SettingsStub())
    for i, url in enumerate(urls):
        d = ModelDefinition.create(f"m{i}", APIType.OPENAI, "k", f"model-{i}")
        d.api_settings.api_endpoint = url
        client.add_model_definition(d)
    return client


def test_create_response_without_definitions():
    client = MultiAIClient(cfg=SettingsStub())
    with pytest.raises(NoDefinitionsError):
        client.create_response()


def test_create_response_with_prompt_appends_messages(monkeypatch):
    sent = install_transport(monkeypatch, {"http://a": ['data: {"choices": [{"delta": {"content": "Paris"}}]}']})
    client = make_client("http://a")
    client.chat.set_system_message("sys")
    count, feed = client.create_response_with_prompt("Capital of France?", "The capital is")
    assert count == 1
    assert collect_responses(count, feed) == ["Paris"]

    types = [m.type for m in client.chat.get_all_messages()]
    assert types == [MessageType.SYSTEM, MessageType.USER, MessageType.ASSISTANT]
    assert sent[0]["messages"][-1] == {"role": "assistant", "content": "The capital is"}


def test_empty_prompt_is_not_appended(monkeypatch):
    install_transport(monkeypatch, {"http://a": []})
    client = make_client("http://a")
    client.chat.add_user_message("already here")
    _, feed = client.create_response_with_prompt("")
    list(feed)
    assert len(client.chat) == 1


def test_reset_chat_and_str():
    client = make_client("http://a")
    client.chat.add_user_message("hi")
    assert str(client) == "# Message: 1\n# Type: User\nhi"
    client.reset_chat()
    assert str(client) == ""
    assert len(client.model_definitions) == 1


def test_model_definitions_is_copy():
    client = make_client("http://a")
    client.model_definitions.clear()
    assert len(client.model_definitions) == 1


def test_collect_responses_skips_error_chunks():
    chunks = [
        DeltaChunk(1, "wor"),
        DeltaChunk(0, "hel"),
        DeltaChunk(1, "ld"),
        DeltaChunk(0, "lo"),
        DeltaChunk(2, "", error="NETWORK_ERROR: refused"),
    ]
    assert collect_responses(3, chunks) == ["hello", "world", ""]


def test_ask_all_two_models(monkeypatch):
    install_transport(
        monkeypatch,
        {
            "http://a": [
                'data: {"choices": [{"delta": {"content": "one "}}]}',
                'data: {"choices": [{"delta": {"content": "two"}}]}',
                "data: [DONE]",
            ],
            "http://b": ['data: {"delta": {"text": "three"}}'],
        },
    )
    client = make_client("http://a", "http://b")
    responses = ask_all(client, "count")
    assert responses == ["one two", "three"]
    client.chat.add_assistant_message(pick_response(responses))
    assert client.chat.get_all_messages()[-1].text == "one two"


def test_pick_response():
    assert pick_response(["", "b", "c"]) == "b"
    assert pick_response(["a", "b"], index=1) == "b"
    assert pick_response(["", ""]) == ""
