"""Translation of OpenAI SDK exceptions into tagged provider errors."""

from collections.abc import Iterator
from contextlib import contextmanager

import openai

from media_pipeline.commons.errors import (
    FatalError,
    ProviderError,
    RetryableError,
    is_retryable_status,
)

PROVIDER = "openai"


def translate_openai_error(error: openai.OpenAIError, operation: str) -> ProviderError:
    """Map an SDK exception to ``RetryableError`` or ``FatalError``."""
    if isinstance(error, openai.APIStatusError):
        kind = RetryableError if is_retryable_status(error.status_code) else FatalError
        return kind(
            f"{operation} failed with HTTP {error.status_code}: {error.message}",
            provider=PROVIDER,
            status_code=error.status_code,
        )
    if isinstance(error, openai.APIConnectionError):
        # Also covers APITimeoutError.
        return RetryableError(f"{operation} failed: {error}", provider=PROVIDER)
    return FatalError(f"{operation} failed: {error}", provider=PROVIDER)


@contextmanager
def openai_errors(operation: str) -> Iterator[None]:
    """Re-raise SDK exceptions raised inside the block as tagged errors."""
    try:
        yield
    except openai.OpenAIError as e:
        raise translate_openai_error(e, operation) from e
