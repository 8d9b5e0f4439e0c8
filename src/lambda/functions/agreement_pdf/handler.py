"""SQS Lambda: renders accepted agreements to PDF and stores them in S3.

Each record body is an agreement event published by the agreements service.
Implements partial batch failure semantics:

- processed (including deliberate skips and absorbed render/upload
  failures): acknowledged
- retryable processing error: reported in ``batchItemFailures``
- permanent error (malformed JSON, unrecognised event type): forwarded to
  the dead-letter queue and acknowledged; reported as a batch item failure
  when no DLQ is configured or forwarding fails, so the redrive policy
  still applies
"""

from __future__ import annotations

import json
from dataclasses import replace
from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from agreements_pdf.errors import AgreementPdfError, MessageProcessingError, PermanentMessageError
from agreements_pdf.models.events import QueueMessage
from agreements_pdf.models.settings import AgreementPdfSettings
from agreements_pdf.processing.event_handler import AgreementEventHandler
from agreements_pdf.processing.message_processor import process_message
from agreements_pdf.utils.logger import get_logger
from agreements_pdf.utils.secrets import fetch_secret_string


logger = get_logger(__name__)

_settings: Optional[AgreementPdfSettings] = None
_event_handler: Optional[AgreementEventHandler] = None
_sqs: Any = None


def _get_settings() -> AgreementPdfSettings:
    global _settings
    if _settings is None:
        settings = AgreementPdfSettings.load()
        # Signing secret is resolved once per container from Secrets Manager
        if not settings.jwt_secret and settings.jwt_secret_arn:
            secret = fetch_secret_string(settings.jwt_secret_arn, region=settings.region)
            settings = replace(settings, jwt_secret=secret)
        _settings = settings
    return _settings


def _get_event_handler() -> AgreementEventHandler:
    global _event_handler
    if _event_handler is None:
        _event_handler = AgreementEventHandler.from_settings(_get_settings())
    return _event_handler


def _sqs_client() -> Any:
    global _sqs
    if _sqs is None:
        _sqs = boto3.client("sqs")
    return _sqs


def _error_type(exc: BaseException) -> str:
    cause = getattr(exc, "cause", None)
    if isinstance(exc, MessageProcessingError) and cause is not None:
        return type(cause).__name__
    return type(exc).__name__


def _dead_letter(message: QueueMessage, exc: AgreementPdfError, log: Any) -> bool:
    """Forward a permanently failing message to the DLQ. Returns True on success."""
    queue_url = _get_settings().dead_letter_queue_url
    if not queue_url:
        return False

    body = message.body if isinstance(message.body, str) else json.dumps(message.body, default=str)
    attributes = {
        "ErrorType": {"DataType": "String", "StringValue": _error_type(exc)},
        "SourceMessageId": {"DataType": "String", "StringValue": message.message_id},
    }
    try:
        _sqs_client().send_message(
            QueueUrl=queue_url,
            MessageBody=body or "<empty>",
            MessageAttributes=attributes,
        )
    except (ClientError, BotoCoreError):
        log.exception(
            "Failed to forward message to dead-letter queue",
            extra={"message_id": message.message_id},
        )
        return False

    log.warning(
        f"Message {message.message_id} forwarded to dead-letter queue: {exc}",
        extra={"message_id": message.message_id, "error": str(exc)},
    )
    return True


def main(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Entry point for SQS batch processing with partial failure reporting.

    Returns a dict: {"batchItemFailures": [{"itemIdentifier": messageId}, ...]}
    """
    records: List[Dict[str, Any]] = list(event.get("Records", []))
    failures: List[Dict[str, str]] = []
    handler = _get_event_handler()

    for r in records:
        message = QueueMessage.from_record(r)
        try:
            outcome = process_message(message, handler, log=logger)
        except PermanentMessageError as exc:
            if not _dead_letter(message, exc, logger):
                failures.append({"itemIdentifier": message.message_id})
            continue
        except MessageProcessingError as exc:
            if not exc.retryable and _dead_letter(message, exc, logger):
                continue
            failures.append({"itemIdentifier": message.message_id})
            continue

        logger.info(
            f"Successfully processed message: {message.message_id}",
            extra={"message_id": message.message_id, "outcome": outcome.to_dict()},
        )

    return {"batchItemFailures": failures}
