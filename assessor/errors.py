"""
Error types for scanning and analysis.

Every error carries a short ``user_message`` that is safe to show to the end
user. Remote payloads and other diagnostics go in ``detail`` and are only
ever logged.
"""

from typing import Optional


class AssessorError(Exception):
    """Base class for all errors raised by the assessor."""

    user_message = "Something went wrong. Please try again."

    def __init__(self, user_message: Optional[str] = None, detail: Optional[str] = None):
        if user_message:
            self.user_message = user_message
        self.detail = detail
        super().__init__(self.user_message)


class UnsupportedPlatform(AssessorError):
    user_message = "Directory access is not available on this host. Upload the files instead."


class DirectoryAccessError(AssessorError):
    user_message = "Could not access the selected directory."


class FileReadError(AssessorError):
    user_message = "Could not read file."


class NoCredential(AssessorError):
    user_message = "API key not set. Please provide an API key or enable demo mode."


class InvalidCredential(AssessorError):
    user_message = "Invalid API key. Please check your OpenAI API key and try again."


class QuotaExceeded(AssessorError):
    user_message = "OpenAI API quota exceeded. Please check your billing information."


class RateLimited(AssessorError):
    user_message = "Rate limit exceeded. Please try again in a few moments."


class ModelAccessDenied(AssessorError):
    user_message = (
        "Your OpenAI account doesn't have access to the selected model. "
        "Please use a different model or request access."
    )


class RemoteServiceError(AssessorError):
    user_message = "The analysis service returned an error."


class MalformedRemoteResponse(AssessorError):
    user_message = "No response content received from the analysis service."


class NoValidCodeSource(AssessorError):
    user_message = "No valid code source provided for the candidate."


class NoResults(AssessorError):
    user_message = "No valid analysis results were obtained. Please check your inputs and API key."
