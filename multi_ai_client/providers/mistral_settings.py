"""Mistral 请求体配置。

消息格式与 OpenAI 相同，但支持的参数更少，
temperature 的范围为 [0, 1]，并额外支持 safe_prompt / random_seed。
"""

from typing import Any, Dict

from multi_ai_client.domain.chat import Chat
from multi_ai_client.providers.base import BaseModelSettings
from multi_ai_client.providers.options import RESPONSE_FORMATS, OptionKind, OptionSpec, option_table


class MistralModelSettings(BaseModelSettings):
    provider = "mistral"
    OPTIONS = option_table(
        OptionSpec("model", OptionKind.STRING, required=True),
        OptionSpec("response_format", OptionKind.STRING, choices=RESPONSE_FORMATS, wrap_key="type"),
        OptionSpec("temperature", OptionKind.FLOAT, minimum=0.0, maximum=1.0),
        OptionSpec("top_p", OptionKind.FLOAT, minimum=0.0, maximum=1.0),
        OptionSpec("max_tokens", OptionKind.INT, minimum=1),
        OptionSpec("safe_prompt", OptionKind.BOOL),
        OptionSpec("random_seed", OptionKind.INT),
    )

    def build_payload(self, chat: Chat) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"model": self.model}
        payload.update(self._option_fields())
        payload["stream"] = True
        payload["messages"] = self._messages_payload(chat.get_all_messages())
        return payload
