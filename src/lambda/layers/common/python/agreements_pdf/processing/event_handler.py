"""Agreement event handling: gate the event, render it, store the PDF.

Per event: received -> type-checked -> gated (url, status, host, number) ->
skip | rendering -> uploading -> done. Nothing is shared between events.
The number gate skips events without an agreementNumber, since no stable
filename or storage key can be built for them.

Without an uploader the handler only renders, and the caller owns the
returned PDF and must remove it.

Render failures are absorbed (the message is acknowledged so a broken render
target is not retried forever). Upload failures are absorbed too but the
outcome still carries the rendered path. Only an unrecognised or invalid
event raises.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional, Protocol, Union
from urllib.parse import urlparse

from pydantic import ValidationError

from agreements_pdf.errors import InvalidEventError, UnrecognizedEventTypeError
from agreements_pdf.models.events import ACCEPTED_EVENT_MARKER, ACCEPTED_STATUS, AgreementData, AgreementEvent
from agreements_pdf.models.outcomes import EventOutcome, HandleOutcome, UploadResult
from agreements_pdf.models.settings import AgreementPdfSettings
from agreements_pdf.utils.logger import extract_correlation_id, get_logger

Log = Union[logging.Logger, logging.LoggerAdapter]

logger = get_logger(__name__)


class Renderer(Protocol):
    def render(self, agreement: AgreementData, filename: str) -> str: ...


class Uploader(Protocol):
    def upload(
        self,
        local_path: str,
        filename: str,
        agreement_number: Any,
        version: Any,
        end_date: Any = None,
    ) -> UploadResult: ...


def host_of(url: str) -> Optional[str]:
    try:
        host = urlparse(url).hostname
    except ValueError:
        return None
    return host.lower() if host else None


class AgreementEventHandler:
    def __init__(
        self,
        renderer: Renderer,
        uploader: Optional[Uploader] = None,
        *,
        allowed_domains: Iterable[str] = (),
        log: Optional[Log] = None,
    ) -> None:
        self.renderer = renderer
        self.uploader = uploader
        self.allowed_domains = frozenset(d.strip().lower() for d in allowed_domains if d and d.strip())
        self.log = log or logger

    @classmethod
    def from_settings(cls, settings: AgreementPdfSettings, log: Optional[Log] = None) -> "AgreementEventHandler":
        from agreements_pdf.rendering.renderer import AgreementRenderer
        from agreements_pdf.storage.uploader import AgreementUploader

        return cls(
            AgreementRenderer.from_settings(settings, log=log),
            AgreementUploader.from_settings(settings, log=log),
            allowed_domains=settings.allowed_domains,
            log=log,
        )

    def is_allowed_url(self, url: str) -> bool:
        host = host_of(url)
        return bool(host) and host in self.allowed_domains

    def handle(
        self,
        event: Union[AgreementEvent, Mapping[str, Any]],
        message_id: Optional[str] = None,
    ) -> HandleOutcome:
        parsed = self._parse(event)
        if not parsed.is_agreement_status_update:
            raise UnrecognizedEventTypeError(parsed.type)

        data = parsed.data
        corr = data.correlation_id or extract_correlation_id(event if isinstance(event, Mapping) else None)
        base = {"correlation_id": corr} if corr else {}
        self.log.info(
            f"Processing agreement offer from event: {message_id}",
            extra={**base, "message_id": message_id, "agreement_number": data.agreement_number},
        )

        if not data.agreement_url:
            self.log.info(
                "Skipping PDF generation, event has no agreementUrl",
                extra={**base, "agreement_number": data.agreement_number},
            )
            return HandleOutcome.skipped("missing agreementUrl")

        if data.status != ACCEPTED_STATUS:
            self.log.info(f"Skipping PDF generation for status: {data.status}", extra={**base, "status": data.status})
            return HandleOutcome.skipped(f"status {data.status}")

        if not self.is_allowed_url(data.agreement_url):
            self.log.warning(
                f"Skipping PDF generation for URL: {data.agreement_url} domain is not on allow list",
                extra={**base, "agreement_url": data.agreement_url},
            )
            return HandleOutcome.skipped("domain not allowed")

        if not data.agreement_number:
            self.log.warning("Skipping PDF generation, event has no agreementNumber", extra=base)
            return HandleOutcome.skipped("missing agreementNumber")

        return self._render_and_upload(data, base)

    def _parse(self, event: Union[AgreementEvent, Mapping[str, Any]]) -> AgreementEvent:
        if isinstance(event, AgreementEvent):
            return event
        if not isinstance(event, Mapping):
            raise UnrecognizedEventTypeError(None)
        raw_type = event.get("type")
        if not isinstance(raw_type, str) or ACCEPTED_EVENT_MARKER not in raw_type:
            raise UnrecognizedEventTypeError(raw_type if isinstance(raw_type, str) else None)
        try:
            return AgreementEvent.model_validate(dict(event))
        except ValidationError as exc:
            raise InvalidEventError(f"Invalid agreement event: {exc}") from exc

    def _render_and_upload(self, data: AgreementData, base: Mapping[str, Any]) -> HandleOutcome:
        filename = data.filename
        label = filename[: -len(".pdf")]
        context = {
            **base,
            "agreement_number": data.agreement_number,
            "version": data.version,
            "pdf_filename": filename,
            "agreement_url": data.agreement_url,
        }

        self.log.info(f"Generating Agreement {label} PDF from agreement URL {data.agreement_url}", extra=context)
        try:
            pdf_path = self.renderer.render(data, filename)
        except Exception as exc:
            self.log.error(
                f"Failed to generate agreement {label} PDF from URL {data.agreement_url}",
                exc_info=True,
                extra={**context, "error": str(exc)},
            )
            return HandleOutcome(outcome=EventOutcome.RENDER_FAILED, reason="render failed", error=str(exc))

        self.log.info(
            f"PDF {filename} generated successfully and save to {pdf_path}",
            extra={**context, "output_path": pdf_path},
        )

        if self.uploader is None:
            return HandleOutcome(outcome=EventOutcome.RENDERED, rendered_path=pdf_path)

        try:
            result = self.uploader.upload(pdf_path, filename, data.agreement_number, data.version, data.end_date)
        except Exception as exc:
            self.log.error(
                f"Failed to upload agreement {label} PDF to S3",
                exc_info=True,
                extra={**context, "output_path": pdf_path, "error": str(exc)},
            )
            return HandleOutcome(
                outcome=EventOutcome.UPLOAD_FAILED,
                rendered_path=pdf_path,
                reason="upload failed",
                error=str(exc),
            )

        self.log.info(
            f"Agreement {data.agreement_number} PDF uploaded successfully ({result.success}) to S3",
            extra={**context, "bucket": result.bucket, "key": result.key},
        )
        return HandleOutcome(outcome=EventOutcome.RENDERED_AND_UPLOADED, rendered_path=pdf_path, upload=result)
