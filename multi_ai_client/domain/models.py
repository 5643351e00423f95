"""统一的对话与分发数据模型。

本模块定义了在各个 Provider 之间共享的标准数据结构：

- MessageType / Message: 一条对话消息（system/user/assistant）。
- APIType: 支持的后端类型，决定默认端点与请求体格式。
- APISettings: 单个后端的密钥、端点与类型。
- DeltaChunk: 流式返回中的一个增量片段，带有来源模型的序号。

Provider 层（providers/）只依赖这些模型，
并负责把它们转换成各家 API 的 JSON 请求体。
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class MessageType(str, Enum):
    """消息类型，值与各厂商 JSON 中的 role 字段一致。"""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"

    @property
    def role(self) -> str:
        return self.value

    @property
    def label(self) -> str:
        """用于文本展示的类型名，如 "System"。"""

        return self.value.capitalize()


class APIType(str, Enum):
    """后端类型（封闭集合）。新增后端需要同时新增对应的 ModelSettings 实现。"""

    OPENAI = "openai"
    MISTRAL = "mistral"
    ANTHROPIC = "anthropic"


@dataclass(frozen=True)
class Message:
    """一条对话消息，创建后不可修改。

    - type: 消息类型。
    - text: 纯文本内容。
    """

    type: MessageType
    text: str

    @classmethod
    def system(cls, text: str) -> "Message":
        return cls(MessageType.SYSTEM, text)

    @classmethod
    def user(cls, text: str) -> "Message":
        return cls(MessageType.USER, text)

    @classmethod
    def assistant(cls, text: str) -> "Message":
        return cls(MessageType.ASSISTANT, text)

    def to_payload(self) -> dict:
        """转换为 {"role": ..., "content": ...} 形式。"""

        return {"role": self.type.role, "content": self.text}


@dataclass
class APISettings:
    """与某个后端交互所需的连接配置。

    - api_key: 密钥，为空时不发送认证头。
    - api_endpoint: 完整的请求 URL，为空时使用该类型的默认端点。
    - api_type: 后端类型。
    """

    api_key: str
    api_endpoint: str = ""
    api_type: APIType = APIType.OPENAI


@dataclass(frozen=True)
class DeltaChunk:
    """流式输出中的单个增量。

    - index: 来源模型定义在分发列表中的位置。
    - delta: 本次新增的文本片段。
    - error: 仅在开启错误上报时出现，表示该 index 的流以错误结束。
    """

    index: int
    delta: str
    error: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.error is not None
