"""Unit tests for OpenAI error translation."""

import httpx
import openai
import pytest

from media_pipeline.commons.errors import FatalError, RetryableError
from media_pipeline.infrastructure.openai_errors import (
    openai_errors,
    translate_openai_error,
)

_REQUEST = httpx.Request("POST", "https://api.openai.com/v1/embeddings")


def _status_error(status: int) -> openai.APIStatusError:
    response = httpx.Response(status, request=_REQUEST)
    return openai.APIStatusError("upstream said no", response=response, body=None)


class TestTranslateOpenAIError:
    """Tests for mapping SDK exceptions to tagged errors."""

    @pytest.mark.parametrize("status", [429, 500, 502, 503, 504, 520])
    def test_retryable_statuses(self, status):
        error = translate_openai_error(_status_error(status), "embedding request")

        assert isinstance(error, RetryableError)
        assert error.status_code == status
        assert error.provider == "openai"

    @pytest.mark.parametrize("status", [400, 401, 403, 404, 422])
    def test_fatal_statuses(self, status):
        error = translate_openai_error(_status_error(status), "summary request")

        assert isinstance(error, FatalError)
        assert f"HTTP {status}" in str(error)

    def test_connection_error_is_retryable(self):
        error = translate_openai_error(
            openai.APIConnectionError(request=_REQUEST), "transcription request"
        )
        assert isinstance(error, RetryableError)

    def test_timeout_is_retryable(self):
        error = translate_openai_error(
            openai.APITimeoutError(request=_REQUEST), "transcription request"
        )
        assert isinstance(error, RetryableError)

    def test_other_errors_are_fatal(self):
        error = translate_openai_error(openai.OpenAIError("bad"), "request")
        assert isinstance(error, FatalError)


class TestOpenAIErrorsContext:
    """Tests for the openai_errors context manager."""

    def test_reraises_translated(self):
        with pytest.raises(RetryableError) as exc_info, openai_errors("request"):
            raise _status_error(429)
        assert isinstance(exc_info.value.__cause__, openai.APIStatusError)

    def test_other_exceptions_pass_through(self):
        with pytest.raises(KeyError), openai_errors("request"):
            raise KeyError("x")
