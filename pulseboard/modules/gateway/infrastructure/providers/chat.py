"""Chat-completion provider.

把对话历史中的每条消息映射为 user 消息，调用 OpenAI 兼容接口并返回回复文本。
"""

from collections.abc import Sequence
from typing import cast

import openai
from loguru import logger
from openai import AsyncOpenAI
from openai.types.chat import ChatCompletion, ChatCompletionMessageParam
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from pulseboard.core.config import settings
from pulseboard.core.domain.exceptions import (
    ConfigurationError,
    InvalidParameter,
    NetworkError,
    RateLimited,
    UpstreamShapeError,
)
from pulseboard.core.infrastructure.logging import BusinessEvents


class ChatProvider:
    """Chat assistant backed by the chat-completion API."""

    def __init__(
        self,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
        openai_client: AsyncOpenAI | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.OPENAI_API_KEY
        self.base_url = base_url or settings.OPENAI_API_BASE
        self.model = model or settings.OPENAI_CHAT_MODEL
        self.max_tokens = max_tokens or settings.CHAT_MAX_TOKENS
        self._client = openai_client

    @property
    def client(self) -> AsyncOpenAI:
        """获取 OpenAI 客户端（延迟初始化）。"""
        if self._client is None:
            if not self.api_key:
                raise ConfigurationError("OPENAI_API_KEY")
            self._client = AsyncOpenAI(api_key=self.api_key, base_url=self.base_url)
        return self._client

    async def reply(self, messages: Sequence[str]) -> str:
        """Send the whole conversation and return the assistant reply."""
        if not messages:
            raise InvalidParameter("messages", messages, "a non-empty list")

        prompt = cast(
            list[ChatCompletionMessageParam],
            [{"role": "user", "content": message} for message in messages],
        )
        client = self.client
        try:
            completion = await self._complete(client, prompt)
        except openai.RateLimitError as exc:
            logger.warning(f"Chat provider rate limit: {exc}")
            raise RateLimited("Chat provider rate limit reached") from exc
        except openai.APIError as exc:
            logger.exception(f"Error communicating with chat provider: {exc}")
            raise NetworkError("Error communicating with chat provider") from exc

        content = completion.choices[0].message.content if completion.choices else None
        if not content:
            raise UpstreamShapeError("Chat provider returned an empty reply")

        tokens_used = completion.usage.total_tokens if completion.usage else 0
        BusinessEvents.chat_replied(
            messages=len(messages), tokens_used=tokens_used, model=self.model
        )
        return content

    @retry(
        retry=retry_if_exception_type((openai.APIConnectionError,)),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=5),
        reraise=True,
    )
    async def _complete(
        self, client: AsyncOpenAI, messages: list[ChatCompletionMessageParam]
    ) -> ChatCompletion:
        return await client.chat.completions.create(
            model=self.model,
            messages=messages,
            max_tokens=self.max_tokens,
        )
