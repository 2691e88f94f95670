"""Chat assistant session.

保存会话历史并整体发送给 /chat；按消息数与估算 token 数限制单次会话用量。
"""

from dataclasses import dataclass
from typing import Literal

import httpx
from loguru import logger

from pulseboard.core.domain.exceptions import ChatLimitReached, InvalidParameter

FALLBACK_REPLY = "Sorry, I did not understand that."
TRANSPORT_ERROR_REPLY = "Error: Unable to get response."


def estimate_tokens(text: str) -> int:
    """Simple estimation: 1 token per word."""
    return len(text.split(" "))


@dataclass(frozen=True)
class ChatMessage:
    role: Literal["user", "assistant"]
    text: str


class ChatSession:
    """One conversation with the chat assistant."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        *,
        max_messages: int = 10,
        max_tokens: int = 999,
        path: str = "/chat",
    ):
        self.http = http
        self.max_messages = max_messages
        self.max_tokens = max_tokens
        self.path = path
        self.history: list[str] = []
        self.transcript: list[ChatMessage] = []
        self.tokens_used = 0

    @property
    def messages_sent(self) -> int:
        return len(self.history)

    async def send(self, message: str) -> str:
        """Send ``message`` with the whole history and return the reply.

        Raises:
            InvalidParameter: 消息为空
            ChatLimitReached: 超出消息数或 token 上限
        """
        text = message.strip()
        if not text:
            raise InvalidParameter("message", message, "non-empty text")
        if self.messages_sent >= self.max_messages:
            raise ChatLimitReached(
                "You have reached the maximum number of messages allowed for this session."
            )
        user_tokens = estimate_tokens(text)
        if self.tokens_used + user_tokens > self.max_tokens:
            raise ChatLimitReached(
                "You have reached the maximum number of tokens allowed for this session."
            )

        self.history.append(text)
        self.transcript.append(ChatMessage(role="user", text=text))
        self.tokens_used += user_tokens

        reply = await self._fetch_reply()
        self.transcript.append(ChatMessage(role="assistant", text=reply))
        self.tokens_used += estimate_tokens(reply)
        return reply

    async def _fetch_reply(self) -> str:
        try:
            response = await self.http.post(self.path, json={"messages": self.history})
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(f"Error fetching chat reply: {exc}")
            return TRANSPORT_ERROR_REPLY
        reply = data.get("reply") if isinstance(data, dict) else None
        if not isinstance(reply, str) or not reply.strip():
            return FALLBACK_REPLY
        return reply
