"""对话历史模型。

Chat 保存一条可选的 system 消息以及按顺序排列的 user/assistant 消息：

- system 消息最多一条，单独存放，读取全部消息时始终排在第一位。
- 普通消息不强制 user/assistant 交替。
- 修改操作只会追加到末尾，或替换最后一条 assistant 消息。
"""

from typing import Iterable, List, Optional

from multi_ai_client.domain.exceptions import MalformedHistoryError
from multi_ai_client.domain.models import Message, MessageType


class Chat:
    """一段用户与助手之间的对话。"""

    def __init__(self) -> None:
        self._system_message: Optional[Message] = None
        self._messages: List[Message] = []

    @classmethod
    def from_messages(cls, messages: Iterable[Message]) -> "Chat":
        """按顺序从消息列表构造 Chat。

        列表中最多只能有一条 system 消息，并且必须位于第一位，
        否则抛出 MalformedHistoryError。
        """

        chat = cls()
        for i, message in enumerate(messages):
            if message.type == MessageType.SYSTEM:
                if i != 0:
                    raise MalformedHistoryError(
                        "system messages must be the first message in the list of messages",
                        position=i,
                    )
                chat.set_system_message(message.text)
            elif message.type == MessageType.USER:
                chat.add_user_message(message.text)
            else:
                chat.add_assistant_message(message.text)
        return chat

    # ---- system 消息 ----

    def set_system_message(self, text: str) -> None:
        """设置 system 消息，传入空字符串等同于清除。"""

        if not text:
            self._system_message = None
            return
        self._system_message = Message.system(text)

    def clear_system_message(self) -> None:
        self._system_message = None

    def get_system_message(self) -> str:
        """返回 system 消息文本，未设置时返回空字符串。"""

        if self._system_message is None:
            return ""
        return self._system_message.text

    # ---- 普通消息 ----

    def add_user_message(self, text: str) -> None:
        self._messages.append(Message.user(text))

    def add_assistant_message(self, text: str) -> None:
        self._messages.append(Message.assistant(text))

    def replace_last_assistant_message(self, text: str) -> None:
        """替换最后一条 assistant 消息。

        历史为空或最后一条不是 assistant 消息时什么也不做。
        """

        if not self._messages:
            return
        if self._messages[-1].type == MessageType.ASSISTANT:
            self._messages[-1] = Message.assistant(text)

    def clear_messages(self) -> None:
        """清除所有非 system 消息。"""

        self._messages = []

    def get_all_messages(self) -> List[Message]:
        messages: List[Message] = []
        if self._system_message is not None:
            messages.append(self._system_message)
        messages.extend(self._messages)
        return messages

    def get_non_system_messages(self) -> List[Message]:
        return list(self._messages)

    def __len__(self) -> int:
        return len(self._messages) + (1 if self._system_message is not None else 0)

    def __str__(self) -> str:
        parts: List[str] = []
        for i, message in enumerate(self.get_all_messages(), start=1):
            parts.append(f"# Message: {i}\n# Type: {message.type.label}\n{message.text}\n\n")
        return "".join(parts).strip()

    def __repr__(self) -> str:
        return f"Chat(system={self.get_system_message()!r}, messages={len(self._messages)})"
