"""Queue message adapter: decode, dispatch, classify failures.

Holds no business rules. A body that is not UTF-8 JSON raises
MalformedMessageError; anything the event handler raises is wrapped in
MessageProcessingError whose ``retryable`` flag tells the caller whether a
redelivery could ever succeed.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional, Protocol, Union

from agreements_pdf.errors import MalformedMessageError, MessageProcessingError
from agreements_pdf.models.events import QueueMessage
from agreements_pdf.models.outcomes import HandleOutcome
from agreements_pdf.utils.logger import get_logger

Log = Union[logging.Logger, logging.LoggerAdapter]

logger = get_logger(__name__)


class EventHandler(Protocol):
    def handle(self, event: Any, message_id: Optional[str] = None) -> HandleOutcome: ...


def decode_body(message: QueueMessage) -> Any:
    body = message.body
    if isinstance(body, (bytes, bytearray)):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedMessageError(message, exc) from exc
    if not isinstance(body, str):
        raise MalformedMessageError(message, TypeError("message body must be a JSON string"))
    try:
        return json.loads(body)
    except json.JSONDecodeError as exc:
        raise MalformedMessageError(message, exc) from exc


def process_message(message: QueueMessage, handler: EventHandler, log: Optional[Log] = None) -> HandleOutcome:
    """Process one queue message; returning normally means it can be acked."""
    log = log or logger
    try:
        payload = decode_body(message)
    except MalformedMessageError as exc:
        log.error(
            "Error processing message: invalid message format",
            extra={"message_id": message.message_id, "error": str(exc.cause)},
        )
        raise

    try:
        return handler.handle(payload, message.message_id)
    except Exception as exc:
        wrapped = MessageProcessingError(message, exc)
        log.error(
            f"Error processing message: {exc}",
            exc_info=True,
            extra={"message_id": message.message_id, "error": str(exc)},
        )
        raise wrapped from exc
