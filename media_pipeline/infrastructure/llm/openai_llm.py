"""OpenAI implementation of LLM service."""

from typing import Any

from openai import AsyncOpenAI
from openai.types.chat import ChatCompletionMessageParam

from media_pipeline.commons.errors import ValidationError
from media_pipeline.commons.retry import retry_async
from media_pipeline.commons.settings.models import RetrySettings
from media_pipeline.commons.telemetry import get_logger
from media_pipeline.infrastructure.llm.base import (
    LLMResponse,
    LLMServiceBase,
    LLMUsage,
    Message,
)
from media_pipeline.infrastructure.openai_errors import PROVIDER, openai_errors


class OpenAILLMService(LLMServiceBase):
    """OpenAI chat completions implementation of LLM service."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        base_url: str | None = None,
        timeout_seconds: float = 120,
        retry_policy: RetrySettings | None = None,
    ) -> None:
        """Initialize OpenAI LLM client.

        Args:
            api_key: OpenAI API key.
            model: Default model to use.
            base_url: Optional custom API endpoint.
            timeout_seconds: Per-request timeout.
            retry_policy: Backoff policy for retryable failures.
        """
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_seconds,
            max_retries=0,
        )
        self._model = model
        self._retry_policy = retry_policy
        self._logger = get_logger(__name__)

    async def generate(
        self,
        messages: list[Message],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ) -> LLMResponse:
        """Generate a completion."""
        use_model = model or self._model
        openai_messages: list[ChatCompletionMessageParam] = [
            {"role": m.role.value, "content": m.content}  # type: ignore[misc]
            for m in messages
        ]
        kwargs: dict[str, Any] = {
            "model": use_model,
            "messages": openai_messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

        async def _call() -> Any:
            with openai_errors("chat completion"):
                return await self._client.chat.completions.create(**kwargs)

        response = await retry_async(
            _call,
            policy=self._retry_policy,
            description=f"{use_model} completion",
        )

        if not response.choices:
            raise ValidationError("Completion returned no choices", provider=PROVIDER)
        choice = response.choices[0]
        content = (choice.message.content or "").strip()
        if not content:
            raise ValidationError("Completion returned empty content", provider=PROVIDER)

        usage = response.usage
        result = LLMResponse(
            content=content,
            finish_reason=choice.finish_reason or "stop",
            usage=LLMUsage(
                prompt_tokens=usage.prompt_tokens if usage else 0,
                completion_tokens=usage.completion_tokens if usage else 0,
                total_tokens=usage.total_tokens if usage else 0,
            ),
            model=response.model,
        )
        self._logger.debug(
            "LLM completion finished",
            extra={
                "model": result.model,
                "finish_reason": result.finish_reason,
                "total_tokens": result.usage.total_tokens,
            },
        )
        return result
