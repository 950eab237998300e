"""
Chat-completion client for the remote scoring model.

All knowledge of how the remote service reports failures lives in
``classify_error``; callers only ever see the typed errors from
``assessor.errors``.
"""

import logging
from enum import Enum
from typing import Optional

from openai import APIStatusError, AsyncOpenAI, OpenAIError

from assessor.config import AnalysisConfig
from assessor.constants import MAX_TOKENS, TEMPERATURE
from assessor.errors import (
    InvalidCredential,
    MalformedRemoteResponse,
    ModelAccessDenied,
    QuotaExceeded,
    RateLimited,
    RemoteServiceError,
)


class ErrorKind(str, Enum):
    QUOTA_EXCEEDED = "quota_exceeded"
    RATE_LIMITED = "rate_limited"
    MODEL_ACCESS_DENIED = "model_access_denied"
    INVALID_CREDENTIAL = "invalid_credential"
    OTHER = "other"


ERROR_CODES = {
    "insufficient_quota": ErrorKind.QUOTA_EXCEEDED,
    "rate_limit_exceeded": ErrorKind.RATE_LIMITED,
    "model_not_found": ErrorKind.MODEL_ACCESS_DENIED,
    "invalid_api_key": ErrorKind.INVALID_CREDENTIAL,
}

STATUS_CODES = {
    401: ErrorKind.INVALID_CREDENTIAL,
    403: ErrorKind.MODEL_ACCESS_DENIED,
    404: ErrorKind.MODEL_ACCESS_DENIED,
    429: ErrorKind.RATE_LIMITED,
}

# Checked in order, case-sensitive, against the remote error message.
MESSAGE_PATTERNS = (
    ("Incorrect API key", ErrorKind.INVALID_CREDENTIAL),
    ("You exceeded your current quota", ErrorKind.QUOTA_EXCEEDED),
    ("model_not_found", ErrorKind.MODEL_ACCESS_DENIED),
    ("does not exist", ErrorKind.MODEL_ACCESS_DENIED),
    ("Rate limit", ErrorKind.RATE_LIMITED),
)

ERROR_TYPES = {
    ErrorKind.QUOTA_EXCEEDED: QuotaExceeded,
    ErrorKind.RATE_LIMITED: RateLimited,
    ErrorKind.MODEL_ACCESS_DENIED: ModelAccessDenied,
    ErrorKind.INVALID_CREDENTIAL: InvalidCredential,
}


def remote_message(exc: Exception) -> str:
    """The ``error.message`` the service sent, or the exception text."""
    body = getattr(exc, "body", None)
    if isinstance(body, dict) and isinstance(body.get("message"), str):
        return body["message"]
    return str(getattr(exc, "message", None) or exc)


def classify_error(exc: Exception) -> ErrorKind:
    """
    Decide what kind of failure a remote error is.

    The machine-readable error code wins, then the HTTP status. Matching on
    the message text is the last resort.
    """
    code = getattr(exc, "code", None)
    if code in ERROR_CODES:
        return ERROR_CODES[code]

    status: Optional[int] = getattr(exc, "status_code", None)
    if status in STATUS_CODES:
        return STATUS_CODES[status]

    message = remote_message(exc)
    for pattern, kind in MESSAGE_PATTERNS:
        if pattern in message:
            return kind
    return ErrorKind.OTHER


def raise_for_error(exc: Exception):
    kind = classify_error(exc)
    message = remote_message(exc)
    error_type = ERROR_TYPES.get(kind)
    if error_type is not None:
        raise error_type(detail=message) from exc
    raise RemoteServiceError(f"The analysis service returned an error: {message}", detail=message) from exc


def create_client(config: AnalysisConfig) -> AsyncOpenAI:
    try:
        return AsyncOpenAI(api_key=config.api_key, base_url=config.base_url, max_retries=0)
    except Exception as e:
        logging.error(f"Failed to initialize OpenAI client: {e}")
        raise RemoteServiceError("OpenAI client is not initialized. Ensure API key is valid.", detail=str(e)) from e


async def request_completion(client: AsyncOpenAI, prompt: str, model: str) -> str:
    """Send one prompt and return the text of the first choice."""
    logging.info(f"Making OpenAI API request (model: {model}, temperature: {TEMPERATURE}, max_tokens: {MAX_TOKENS})")
    try:
        response = await client.chat.completions.create(
            model=model,
            messages=[{"role": "user", "content": prompt}],
            temperature=TEMPERATURE,
            max_tokens=MAX_TOKENS,
        )
    except APIStatusError as e:
        logging.error(f"OpenAI API Error ({e.status_code}): {remote_message(e)}")
        raise_for_error(e)
    except OpenAIError as e:
        logging.error(f"OpenAI request failed: {e}")
        raise RemoteServiceError("Could not reach the analysis service.", detail=str(e)) from e

    if not response.choices:
        logging.error(f"Invalid API response format: {response}")
        raise MalformedRemoteResponse()

    content = response.choices[0].message.content
    if not content:
        raise MalformedRemoteResponse()
    return content
