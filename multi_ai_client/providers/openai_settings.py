"""OpenAI 兼容接口的请求体配置。

适用于 OpenAI 以及其他兼容 /v1/chat/completions 的服务：
- 全部消息（包括 system）放在 messages 中。
- 始终开启 stream。
"""

from typing import Any, Dict

from multi_ai_client.domain.chat import Chat
from multi_ai_client.providers.base import BaseModelSettings
from multi_ai_client.providers.options import RESPONSE_FORMATS, OptionKind, OptionSpec, option_table


class OpenAIModelSettings(BaseModelSettings):
    provider = "openai"
    OPTIONS = option_table(
        OptionSpec("model", OptionKind.STRING, required=True),
        OptionSpec("frequency_penalty", OptionKind.FLOAT, minimum=-2.0, maximum=2.0),
        OptionSpec("logit_bias", OptionKind.INT_MAP, minimum=-100, maximum=100),
        OptionSpec("logprobs", OptionKind.BOOL),
        OptionSpec("top_logprobs", OptionKind.INT, minimum=0, maximum=20),
        OptionSpec("max_tokens", OptionKind.INT, minimum=1),
        OptionSpec("presence_penalty", OptionKind.FLOAT, minimum=-2.0, maximum=2.0),
        OptionSpec("response_format", OptionKind.STRING, choices=RESPONSE_FORMATS, wrap_key="type"),
        OptionSpec("seed", OptionKind.INT),
        OptionSpec("stop", OptionKind.STRING_LIST),
        OptionSpec("temperature", OptionKind.FLOAT, minimum=0.0, maximum=2.0),
        OptionSpec("top_p", OptionKind.FLOAT, minimum=0.0, maximum=1.0),
        OptionSpec("user", OptionKind.STRING),
    )

    def build_payload(self, chat: Chat) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"model": self.model}
        payload.update(self._option_fields())
        payload["stream"] = True
        payload["messages"] = self._messages_payload(chat.get_all_messages())
        return payload
