"""Abstract base class for transcript formatting and summary generation."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class MessageRole(str, Enum):
    """Chat role of a prompt message."""

    SYSTEM = "system"
    USER = "user"


@dataclass
class Message:
    """One prompt message; transcripts travel in the user message."""

    role: MessageRole
    content: str


@dataclass
class LLMUsage:
    """Token counts reported for one completion."""

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


@dataclass
class LLMResponse:
    """A finished completion."""

    content: str
    finish_reason: str
    usage: LLMUsage
    model: str


class LLMServiceBase(ABC):
    """Single-shot chat completion.

    Prompts are a system message plus one user message; no streaming and no
    tool calls.
    """

    @abstractmethod
    async def generate(
        self,
        messages: list[Message],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ) -> LLMResponse:
        """Generate a completion.

        Args:
            messages: List of conversation messages.
            model: Optional model override.
            temperature: Sampling temperature (0.0-2.0).
            max_tokens: Maximum tokens to generate.

        Returns:
            LLM response with content and usage.

        Raises:
            RetryableError: On rate limiting or provider outages.
            FatalError: On rejected requests.
            ValidationError: If the completion is empty.
        """
