from multi_ai_client.engine.stream_decoder import decode_line, extract_delta, is_done, iter_deltas


def test_openai_shape():
    line = 'data: {"choices": [{"index": 0, "delta": {"content": "hel"}}]}'
    assert decode_line(line) == "hel"


def test_anthropic_shape():
    line = 'data: {"type": "content_block_delta", "index": 0, "delta": {"type": "text_delta", "text": "lo"}}'
    assert decode_line(line) == "lo"


def test_openai_probe_wins():
    assert extract_delta({"choices": [{"delta": {"content": "a"}}], "delta": {"text": "b"}}) == "a"


def test_foreign_and_malformed_lines_skipped():
    assert decode_line("event: content_block_delta") is None
    assert decode_line("") is None
    assert decode_line("data: {not json") is None
    assert decode_line('data: {"type": "message_start", "message": {}}') is None
    assert decode_line('data: {"choices": []}') is None
    assert decode_line('data: {"choices": [{"delta": {"content": null}}]}') is None
    assert decode_line('data: {"choices": [{"delta": {"content": 3}}]}') is None
    assert decode_line('data: ["list"]') is None


def test_done_sentinel():
    assert is_done("data: [DONE]")
    assert is_done("  data: [DONE]\r")
    assert not is_done('data: {"delta": {"text": "[DONE]"}}')


def test_iter_deltas_stops_at_done():
    lines = [
        ": keep-alive",
        'data: {"choices": [{"delta": {"content": "a"}}]}',
        "data: garbage",
        'data: {"choices": [{"delta": {"content": "b"}}]}',
        "data: [DONE]",
        'data: {"choices": [{"delta": {"content": "after"}}]}',
    ]
    assert list(iter_deltas(lines)) == ["a", "b"]


def test_iter_deltas_until_stream_end():
    lines = [
        "event: content_block_delta",
        'data: {"delta": {"text": "x"}}',
        "",
        'data: {"delta": {"text": "y"}}',
    ]
    assert list(iter_deltas(lines)) == ["x", "y"]
