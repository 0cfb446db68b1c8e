"""Tagged error kinds raised at external-provider boundaries.

Adapters for external APIs and processes translate native failures into
exactly one of these kinds.
"""

from collections.abc import Sequence

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})

_STDERR_EXCERPT_CHARS = 2000


class ProviderError(Exception):
    """Base class for failures reported by an external provider."""

    def __init__(
        self,
        message: str,
        *,
        provider: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self.provider = provider
        self.status_code = status_code
        super().__init__(message)


class RetryableError(ProviderError):
    """Transient failure (rate limit, 5xx, connection drop); safe to retry."""


class FatalError(ProviderError):
    """Permanent failure (bad request, auth); retrying cannot help."""


class ValidationError(ProviderError):
    """The provider answered, but the answer is unusable."""


class CommandFailedError(ProviderError):
    """An external command exited with a non-zero status."""

    def __init__(self, args: Sequence[str], returncode: int, stderr: str = "") -> None:
        self.args_list = list(args)
        self.returncode = returncode
        self.stderr_excerpt = stderr[-_STDERR_EXCERPT_CHARS:].strip()
        program = self.args_list[0] if self.args_list else "<command>"
        message = f"{program} exited with status {returncode}"
        if self.stderr_excerpt:
            message += f": {self.stderr_excerpt}"
        super().__init__(message, provider=program)


def is_retryable_status(status_code: int | None) -> bool:
    """Whether an HTTP status code belongs to the retryable class."""
    return status_code is not None and (
        status_code in RETRYABLE_STATUS_CODES or status_code >= 500
    )
