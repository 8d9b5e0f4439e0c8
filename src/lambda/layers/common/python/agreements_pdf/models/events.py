"""Typed event models for the agreement PDF Lambda using Pydantic v2.

The inbound agreement event is owned by the agreements service; only the
fields needed for gating, filenames and retention are typed here. Every
other key is kept as an extra so it reaches the renderer unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

ACCEPTED_EVENT_MARKER = "agreement.status.updated"
ACCEPTED_STATUS = "accepted"


class AgreementData(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True, frozen=True)

    agreement_number: Optional[str] = Field(default=None, alias="agreementNumber")
    version: Optional[Union[int, str]] = None
    status: Optional[str] = None
    agreement_url: Optional[str] = Field(default=None, alias="agreementUrl")
    end_date: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("agreementEndDate", "endDate", "end_date"),
        serialization_alias="agreementEndDate",
    )
    correlation_id: Optional[str] = Field(default=None, alias="correlationId")
    client_ref: Optional[Any] = Field(default=None, alias="clientRef")
    frn: Optional[Any] = None
    sbi: Optional[Any] = None

    @field_validator("agreement_number", "correlation_id", "end_date", mode="before")
    @classmethod
    def _coerce_str(cls, v: Any) -> Optional[str]:  # type: ignore[override]
        if v is None:
            return None
        text = str(v).strip()
        return text or None

    @field_validator("agreement_url", "status", mode="before")
    @classmethod
    def _blank_to_none(cls, v: Any) -> Optional[str]:  # type: ignore[override]
        if not isinstance(v, str):
            return None
        return v.strip() or None

    @property
    def filename(self) -> str:
        """Stable PDF filename used for the storage key: ``{number}-{version}.pdf``."""
        parts = [str(p) for p in (self.agreement_number, self.version) if p not in (None, "")]
        return f"{'-'.join(parts)}.pdf"


class AgreementEvent(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    type: str = ""
    data: AgreementData = Field(default_factory=AgreementData)

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, v: Any) -> str:  # type: ignore[override]
        return v if isinstance(v, str) else ""

    @field_validator("data", mode="before")
    @classmethod
    def _coerce_data(cls, v: Any) -> Any:  # type: ignore[override]
        return v if isinstance(v, (dict, AgreementData)) else {}

    @property
    def is_agreement_status_update(self) -> bool:
        return ACCEPTED_EVENT_MARKER in self.type


@dataclass(frozen=True)
class QueueMessage:
    """Raw SQS message as delivered to the Lambda (or a polling consumer)."""

    message_id: str
    body: Any

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "QueueMessage":
        """Build from a Lambda SQS record (``messageId``/``body``) or a
        ``receive_message`` entry (``MessageId``/``Body``)."""
        return cls(
            message_id=str(record.get("messageId") or record.get("MessageId") or "unknown"),
            body=record.get("body", record.get("Body")),
        )
