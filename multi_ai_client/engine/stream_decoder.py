"""SSE 流解析。

各后端的流式响应都是 "data: <json>" 形式的行，差异只在 JSON 结构：

- OpenAI / Mistral: choices[0].delta.content
- Anthropic: delta.text（content_block_delta 事件）

"data: [DONE]" 表示流结束。无法解析或不含文本增量的行直接跳过。
"""

import json
from typing import Any, Iterable, Iterator, Optional

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"


def _lookup(data: Any, *path) -> Any:
    """按 key/下标路径取值，路径不存在时返回 None。"""

    current = data
    for step in path:
        if isinstance(step, int):
            if not isinstance(current, list) or len(current) <= step:
                return None
        elif not isinstance(current, dict) or step not in current:
            return None
        current = current[step]
    return current


def extract_delta(payload: Any) -> Optional[str]:
    """从一条事件 JSON 中取出文本增量，依次尝试 OpenAI 与 Anthropic 两种结构。"""

    for path in (("choices", 0, "delta", "content"), ("delta", "text")):
        value = _lookup(payload, *path)
        if isinstance(value, str):
            return value
    return None


def decode_line(line: str) -> Optional[str]:
    """解析单行数据。

    返回文本增量；非 data 行、无法解析的 JSON 以及不含增量的事件返回 None。
    调用前需要先用 is_done() 判断结束标记。
    """

    text = line.strip()
    if not text.startswith(DATA_PREFIX):
        return None
    try:
        payload = json.loads(text[len(DATA_PREFIX):])
    except json.JSONDecodeError:
        return None
    return extract_delta(payload)


def is_done(line: str) -> bool:
    return line.strip() == DATA_PREFIX + DONE_SENTINEL


def iter_deltas(lines: Iterable[str]) -> Iterator[str]:
    """把响应行序列转换为文本增量序列，遇到结束标记时停止。"""

    for line in lines:
        if is_done(line):
            return
        delta = decode_line(line)
        if delta is not None:
            yield delta
