"""对外 API 服务模块。

提供简化的函数接口：把 DeltaFeed 汇总为每个模型的完整回复。
"""

from typing import Iterable, List, Optional

from multi_ai_client.client import MultiAIClient
from multi_ai_client.domain.models import DeltaChunk
from multi_ai_client.infrastructure.logging.logger import logger


def collect_responses(count: int, feed: Iterable[DeltaChunk]) -> List[str]:
    """按 index 拼接增量，返回长度为 count 的回复列表。

    带 error 标记的增量不拼接到文本中，只记录日志。
    """

    responses = [""] * count
    for chunk in feed:
        if chunk.is_error:
            logger.warning("collect.stream_error", extra={"extra": {"index": chunk.index, "error": chunk.error}})
            continue
        responses[chunk.index] += chunk.delta
    return responses


def ask_all(client: MultiAIClient, prompt: str, assistant_response: str = "") -> List[str]:
    """向客户端中的所有模型发送 prompt，等待全部完成后返回各自的完整回复。

    Args:
        client: 已添加模型定义的客户端
        prompt: 用户输入
        assistant_response: 可选的助手前缀

    Returns:
        与模型定义顺序一致的回复列表

    Raises:
        NoDefinitionsError / UnsupportedAPITypeError 等构造期错误
    """
    count, feed = client.create_response_with_prompt(prompt, assistant_response)
    with feed:
        return collect_responses(count, feed)


def pick_response(responses: List[str], index: Optional[int] = None) -> str:
    """选出一条回复：指定 index 时直接返回，否则返回第一条非空回复。"""

    if index is not None:
        return responses[index]
    return next((r for r in responses if r), "")
