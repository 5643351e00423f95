"""Anthropic Messages API 请求体配置。

与 OpenAI 格式的差异：
- system 消息不放在 messages 中，而是作为顶层 system 字段；没有时不输出该字段。
- max_tokens 必填，未设置时序列化为 DEFAULT_MAX_TOKENS。
- metadata 以 {"user_id": ...} 形式发送，也可以用 user_id 作为配置项名称。
"""

from typing import Any, Dict

from multi_ai_client.domain.chat import Chat
from multi_ai_client.providers.base import BaseModelSettings
from multi_ai_client.providers.options import OptionKind, OptionSpec, option_table

DEFAULT_MAX_TOKENS = 4096


class AnthropicModelSettings(BaseModelSettings):
    provider = "anthropic"
    OPTIONS = option_table(
        OptionSpec("model", OptionKind.STRING, required=True),
        OptionSpec("max_tokens", OptionKind.INT, minimum=1, required=True),
        OptionSpec("metadata", OptionKind.STRING, wrap_key="user_id"),
        OptionSpec("stop_sequences", OptionKind.STRING_LIST),
        OptionSpec("temperature", OptionKind.FLOAT, minimum=0.0, maximum=1.0),
        OptionSpec("top_k", OptionKind.INT, minimum=0),
        OptionSpec("top_p", OptionKind.FLOAT, minimum=0.0, maximum=1.0),
    )
    ALIASES = {"user_id": "metadata"}

    def build_payload(self, chat: Chat) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": self.model,
            "max_tokens": self._values.get("max_tokens", DEFAULT_MAX_TOKENS),
        }
        payload.update(self._option_fields(skip=("model", "max_tokens")))
        payload["stream"] = True
        system = chat.get_system_message()
        if system:
            payload["system"] = system
        payload["messages"] = self._messages_payload(chat.get_non_system_messages())
        return payload
