import asyncio
from unittest import mock

import httpx
import openai
import pytest

from assessor import llm
from assessor.config import AnalysisConfig
from assessor.errors import (
    InvalidCredential,
    MalformedRemoteResponse,
    ModelAccessDenied,
    QuotaExceeded,
    RateLimited,
    RemoteServiceError,
)
from assessor.llm import ErrorKind, classify_error

URL = "https://api.openai.com/v1/chat/completions"


def status_error(cls, status, message, code=None):
    response = httpx.Response(status, request=httpx.Request("POST", URL))
    body = {"message": message, "type": "error", "code": code}
    return cls(f"Error code: {status} - {body}", response=response, body=body)


class MockMessage:
    def __init__(self, content):
        self.content = content


class MockChoice:
    def __init__(self, content):
        self.message = MockMessage(content)


class MockCompletion:
    def __init__(self, *contents):
        self.choices = [MockChoice(c) for c in contents]


def mock_client(**create_kwargs):
    client = mock.Mock()
    client.chat.completions.create = mock.AsyncMock(**create_kwargs)
    return client


# --- classify_error ---

def test_classify_quota_by_code():
    exc = status_error(openai.RateLimitError, 429, "You exceeded your current quota", code="insufficient_quota")
    assert classify_error(exc) == ErrorKind.QUOTA_EXCEEDED


def test_classify_rate_limit_by_status():
    exc = status_error(openai.RateLimitError, 429, "Slow down")
    assert classify_error(exc) == ErrorKind.RATE_LIMITED


def test_classify_model_access_by_code():
    exc = status_error(openai.NotFoundError, 404, "The model `gpt-4o` does not exist", code="model_not_found")
    assert classify_error(exc) == ErrorKind.MODEL_ACCESS_DENIED


def test_classify_invalid_key_by_status():
    exc = status_error(openai.AuthenticationError, 401, "Incorrect API key provided")
    assert classify_error(exc) == ErrorKind.INVALID_CREDENTIAL


def test_classify_falls_back_to_message_text():
    exc = status_error(openai.BadRequestError, 400, "You exceeded your current quota, please check your plan")
    assert classify_error(exc) == ErrorKind.QUOTA_EXCEEDED

    exc = status_error(openai.BadRequestError, 400, "Rate limit reached for requests")
    assert classify_error(exc) == ErrorKind.RATE_LIMITED


def test_classify_message_match_is_case_sensitive():
    exc = status_error(openai.BadRequestError, 400, "rate limit reached")
    assert classify_error(exc) == ErrorKind.OTHER


def test_classify_plain_exception():
    assert classify_error(Exception("The model does not exist")) == ErrorKind.MODEL_ACCESS_DENIED
    assert classify_error(Exception("boom")) == ErrorKind.OTHER


@pytest.mark.parametrize("kind_error, expected", [
    (status_error(openai.RateLimitError, 429, "quota", code="insufficient_quota"), QuotaExceeded),
    (status_error(openai.RateLimitError, 429, "too many"), RateLimited),
    (status_error(openai.PermissionDeniedError, 403, "no access"), ModelAccessDenied),
    (status_error(openai.AuthenticationError, 401, "bad key"), InvalidCredential),
    (status_error(openai.InternalServerError, 500, "server exploded"), RemoteServiceError),
])
def test_raise_for_error(kind_error, expected):
    with pytest.raises(expected) as exc_info:
        llm.raise_for_error(kind_error)
    assert exc_info.value.detail == llm.remote_message(kind_error)


# --- request_completion ---

def test_request_completion_success():
    client = mock_client(return_value=MockCompletion('{"scores": {}}'))

    text = asyncio.run(llm.request_completion(client, "prompt", "gpt-4o"))

    assert text == '{"scores": {}}'
    client.chat.completions.create.assert_awaited_once_with(
        model="gpt-4o",
        messages=[{"role": "user", "content": "prompt"}],
        temperature=0.2,
        max_tokens=2000,
    )


def test_request_completion_quota_error():
    exc = status_error(openai.RateLimitError, 429, "You exceeded your current quota", code="insufficient_quota")
    client = mock_client(side_effect=exc)

    with pytest.raises(QuotaExceeded) as exc_info:
        asyncio.run(llm.request_completion(client, "prompt", "gpt-4o"))
    assert "quota" in exc_info.value.user_message


def test_request_completion_connection_error():
    exc = openai.APIConnectionError(request=httpx.Request("POST", URL))
    client = mock_client(side_effect=exc)

    with pytest.raises(RemoteServiceError):
        asyncio.run(llm.request_completion(client, "prompt", "gpt-4o"))


def test_request_completion_no_choices():
    client = mock_client(return_value=MockCompletion())

    with pytest.raises(MalformedRemoteResponse):
        asyncio.run(llm.request_completion(client, "prompt", "gpt-4o"))


def test_request_completion_empty_content():
    client = mock_client(return_value=MockCompletion(None))

    with pytest.raises(MalformedRemoteResponse):
        asyncio.run(llm.request_completion(client, "prompt", "gpt-4o"))


# --- create_client ---

def test_create_client_uses_config():
    config = AnalysisConfig(api_key="sk-test-key-1234567890", base_url="https://llm.example/v1")
    with mock.patch("assessor.llm.AsyncOpenAI") as mock_openai:
        llm.create_client(config)
    mock_openai.assert_called_once_with(
        api_key="sk-test-key-1234567890",
        base_url="https://llm.example/v1",
        max_retries=0,
    )


def test_create_client_init_failure():
    config = AnalysisConfig(api_key="sk-test-key-1234567890")
    with mock.patch("assessor.llm.AsyncOpenAI", side_effect=Exception("boom")):
        with pytest.raises(RemoteServiceError) as exc_info:
            llm.create_client(config)
    assert "OpenAI client is not initialized" in exc_info.value.user_message
