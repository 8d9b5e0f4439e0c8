"""Models subpackage exposed via Common Layer."""

from .events import (
    ACCEPTED_EVENT_MARKER,
    ACCEPTED_STATUS,
    AgreementData,
    AgreementEvent,
    QueueMessage,
)
from .outcomes import EventOutcome, HandleOutcome, UploadResult
from .settings import AgreementPdfSettings, RetentionPolicy

__all__ = [
    "ACCEPTED_EVENT_MARKER",
    "ACCEPTED_STATUS",
    "AgreementData",
    "AgreementEvent",
    "QueueMessage",
    "EventOutcome",
    "HandleOutcome",
    "UploadResult",
    "AgreementPdfSettings",
    "RetentionPolicy",
]
