"""Exception types shared by the agreement PDF pipeline.

Errors that can never succeed on redelivery derive from PermanentMessageError
so the Lambda entry point can dead-letter them instead of retrying.
"""

from __future__ import annotations

from typing import Any, Optional


class AgreementPdfError(Exception):
    """Base class for all pipeline errors."""


class ConfigurationError(AgreementPdfError, ValueError):
    """Raised when environment configuration is missing or invalid."""


class PermanentMessageError(AgreementPdfError):
    """A message that will fail identically on every delivery."""

    retryable = False


class MalformedMessageError(PermanentMessageError):
    """Queue message body is not valid JSON."""

    def __init__(self, message: Any, cause: Optional[BaseException] = None) -> None:
        super().__init__("Invalid message format")
        self.queue_message = message
        self.cause = cause


class UnrecognizedEventTypeError(PermanentMessageError):
    """Event type does not carry the accepted agreement marker."""

    def __init__(self, event_type: Optional[str]) -> None:
        super().__init__("Unrecognized event type")
        self.event_type = event_type


class InvalidEventError(PermanentMessageError):
    """Event decoded as JSON but its fields have unusable types."""


class MessageProcessingError(AgreementPdfError):
    """Wraps any failure raised while handling a decoded message."""

    def __init__(self, message: Any, cause: BaseException) -> None:
        super().__init__("Error processing SQS message")
        self.queue_message = message
        self.cause = cause
        self.retryable = not isinstance(cause, PermanentMessageError)

    @property
    def original_error(self) -> str:
        return str(self.cause)


class RenderError(AgreementPdfError):
    """Headless render did not produce a PDF."""


class UploadError(AgreementPdfError):
    """PDF could not be stored in S3."""
