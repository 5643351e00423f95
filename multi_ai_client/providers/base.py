"""ModelSettings 抽象。

每个后端对应一个 ModelSettings 实现（OpenAI / Mistral / Anthropic），
只提供两个能力：

- set(key, value): 校验并保存一个配置项。
- make_body(chat): 把对话与已保存的配置项序列化为该后端的请求体。

未设置的可选项不会出现在请求体中（不会输出 null）。
"""

import json
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping

from multi_ai_client.domain.chat import Chat
from multi_ai_client.domain.exceptions import RequiredFieldNilError, UnknownOptionError
from multi_ai_client.domain.models import Message
from multi_ai_client.providers.options import OptionSpec


class BaseModelSettings(ABC):
    """所有 ModelSettings 的公共实现。

    子类需要声明：
    - provider: Provider 名称，用于错误信息。
    - OPTIONS: 支持的配置项（按 JSON 字段顺序）。
    - ALIASES: 可选的别名映射，如 Anthropic 的 user_id -> metadata。
    并实现 build_payload()。
    """

    provider: str = ""
    OPTIONS: Mapping[str, OptionSpec] = {}
    ALIASES: Mapping[str, str] = {}

    def __init__(self, model: str):
        self._values: Dict[str, Any] = {}
        self.set("model", model)

    def set(self, key: str, value: Any) -> None:
        """校验并保存配置项；失败时抛出 ValidationError 子类，已有配置保持不变。"""

        name = self.ALIASES.get(key, key)
        spec = self.OPTIONS.get(name)
        if spec is None:
            raise UnknownOptionError(key, self.provider)
        if value is None:
            if spec.required:
                raise RequiredFieldNilError(key)
            self._values.pop(name, None)
            return
        self._values[name] = spec.convert(value)

    def get(self, key: str) -> Any:
        name = self.ALIASES.get(key, key)
        if name not in self.OPTIONS:
            raise UnknownOptionError(key, self.provider)
        return self._values.get(name)

    @property
    def model(self) -> str:
        return self._values["model"]

    def make_body(self, chat: Chat) -> bytes:
        """序列化为紧凑的 UTF-8 JSON 请求体。"""

        payload = self.build_payload(chat)
        return json.dumps(payload, ensure_ascii=False, separators=(",", ":")).encode("utf-8")

    @abstractmethod
    def build_payload(self, chat: Chat) -> Dict[str, Any]:
        """构造请求体字典，不得修改 chat 或自身状态。"""

    def _option_fields(self, *, skip: tuple = ("model",)) -> Dict[str, Any]:
        """按声明顺序输出已设置的配置项。"""

        fields: Dict[str, Any] = {}
        for name, spec in self.OPTIONS.items():
            if name in skip or name not in self._values:
                continue
            fields[name] = spec.to_wire(self._values[name])
        return fields

    @staticmethod
    def _messages_payload(messages: List[Message]) -> List[Dict[str, str]]:
        return [m.to_payload() for m in messages]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._values!r})"
