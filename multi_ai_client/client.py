"""对外客户端。

MultiAIClient 持有一段共享对话和一组模型定义：

    client = MultiAIClient()
    client.add_model_definition(ModelDefinition.create("GPT", APIType.OPENAI, key, "gpt-4o"))
    count, feed = client.create_response_with_prompt("What is the capital of France?")
    responses = [""] * count
    for chunk in feed:
        responses[chunk.index] += chunk.delta
    client.chat.add_assistant_message(responses[0])
"""

from typing import List, Optional, Tuple

from multi_ai_client.config.settings import settings
from multi_ai_client.domain.chat import Chat
from multi_ai_client.engine.dispatcher import DeltaFeed, Dispatcher
from multi_ai_client.providers.definition import ModelDefinition


class MultiAIClient:
    def __init__(self, chat: Optional[Chat] = None, cfg=settings):
        self.chat = chat if chat is not None else Chat()
        self._definitions: List[ModelDefinition] = []
        self._dispatcher = Dispatcher(cfg)

    def add_model_definition(self, definition: ModelDefinition) -> None:
        self._definitions.append(definition)

    @property
    def model_definitions(self) -> List[ModelDefinition]:
        return list(self._definitions)

    def reset_chat(self) -> None:
        """清空对话（包括 system 消息），模型定义保持不变。"""

        self.chat = Chat()

    def create_response(self, *, report_errors: Optional[bool] = None) -> Tuple[int, DeltaFeed]:
        """用当前对话向所有模型发起请求，返回 (请求数, DeltaFeed)。"""

        return self._dispatcher.dispatch(self._definitions, self.chat, report_errors=report_errors)

    def create_response_with_prompt(
        self,
        user_prompt: str,
        assistant_response: str = "",
        *,
        report_errors: Optional[bool] = None,
    ) -> Tuple[int, DeltaFeed]:
        """先追加用户输入（以及可选的助手前缀，让模型接着写），再发起请求。

        空字符串参数不会被追加。
        """

        if user_prompt:
            self.chat.add_user_message(user_prompt)
        if assistant_response:
            self.chat.add_assistant_message(assistant_response)
        return self.create_response(report_errors=report_errors)

    def __str__(self) -> str:
        return str(self.chat)
