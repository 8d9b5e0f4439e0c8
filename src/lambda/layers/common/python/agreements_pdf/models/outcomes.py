"""Result types returned by the uploader and the event handler."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Optional


class EventOutcome(str, Enum):
    SKIPPED = "SKIPPED"
    RENDERED = "RENDERED"
    RENDERED_AND_UPLOADED = "RENDERED_AND_UPLOADED"
    RENDER_FAILED = "RENDER_FAILED"
    UPLOAD_FAILED = "UPLOAD_FAILED"


@dataclass(frozen=True)
class UploadResult:
    success: bool
    bucket: str
    key: str
    etag: Optional[str]
    location: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class HandleOutcome:
    """Tagged result of handling one agreement event.

    ``rendered_path`` is ``""`` unless a PDF was produced, even when the
    upload afterwards failed. For ``RENDERED`` (no uploader configured) the
    file is still on disk and belongs to the caller.
    """

    outcome: EventOutcome
    rendered_path: str = ""
    upload: Optional[UploadResult] = None
    reason: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def skipped(cls, reason: str) -> "HandleOutcome":
        return cls(outcome=EventOutcome.SKIPPED, reason=reason)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "outcome": self.outcome.value,
            "rendered_path": self.rendered_path,
        }
        if self.upload is not None:
            payload["upload"] = self.upload.to_dict()
        if self.reason:
            payload["reason"] = self.reason
        if self.error:
            payload["error"] = self.error
        return payload
