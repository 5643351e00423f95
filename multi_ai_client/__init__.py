"""Multi AI Client 顶层包。

把同一段对话并发发送给多个聊天补全服务（OpenAI 兼容、Mistral、Anthropic），
并把各自的流式输出合并为一个带来源序号的增量序列。
"""

from multi_ai_client.client import MultiAIClient
from multi_ai_client.domain.chat import Chat
from multi_ai_client.domain.models import APISettings, APIType, DeltaChunk, Message, MessageType
from multi_ai_client.providers.definition import ModelDefinition

__all__ = [
    "APISettings",
    "APIType",
    "Chat",
    "DeltaChunk",
    "Message",
    "MessageType",
    "ModelDefinition",
    "MultiAIClient",
]
