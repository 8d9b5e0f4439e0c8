"""Lightweight JSON logger utility for Lambdas.

Provides a consistent, minimal-alloc logger adapter that emits structured
logs with environment, correlation_id and agreement context fields when
available.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Mapping, Optional

# Per-call extras copied into the JSON payload when present on the record
CONTEXT_FIELDS = (
    "message_id",
    "agreement_number",
    "version",
    "pdf_filename",
    "output_path",
    "bucket",
    "key",
    "status",
    "agreement_url",
    "error",
    "outcome",
)


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: Dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        env = getattr(record, "environment", None) or os.environ.get("ENVIRONMENT")
        if env:
            payload["environment"] = env
        corr = getattr(record, "correlation_id", None)
        if corr:
            payload["correlation_id"] = corr
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                payload[field] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        if not hasattr(record, "asctime"):
            payload["timestamp"] = record.created
        return json.dumps(payload, ensure_ascii=False, default=str)


class _Adapter(logging.LoggerAdapter):
    def process(self, msg: Any, kwargs: Dict[str, Any]):  # type: ignore[override]
        extra = self.extra.copy() if isinstance(self.extra, dict) else {}
        if "extra" in kwargs and isinstance(kwargs["extra"], dict):
            extra.update(kwargs["extra"])  # merge per-call extras
        kwargs["extra"] = extra
        return msg, kwargs


def _resolve_level() -> int:
    name = (os.environ.get("LOG_LEVEL") or "INFO").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def get_logger(name: str, correlation_id: Optional[str] = None) -> logging.LoggerAdapter:
    """Return a JSON-formatted logger adapter with optional correlation_id."""
    base = logging.getLogger(name)
    if not base.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(_JsonFormatter())
        base.addHandler(handler)
    base.setLevel(_resolve_level())
    extras = {"environment": os.environ.get("ENVIRONMENT")}
    if correlation_id:
        extras["correlation_id"] = correlation_id
    return _Adapter(base, extras)


def extract_correlation_id(event: Optional[Mapping[str, Any]]) -> Optional[str]:
    """Try to extract a correlation id from common event shapes.

    Checks top-level keys, HTTP-style headers and the ``data`` block of an
    agreement event (``data.correlationId``).
    """
    if not isinstance(event, Mapping):
        return None
    for key in ("correlation_id", "CorrelationId", "correlationId", "request_id"):
        val = event.get(key)
        if isinstance(val, str) and val:
            return val
    hdr_obj = event.get("headers")
    headers: Mapping[str, Any] = hdr_obj if isinstance(hdr_obj, Mapping) else {}
    for h in ("x-correlation-id", "x-request-id", "x-amzn-trace-id"):
        hv = headers.get(h)
        if isinstance(hv, str) and hv:
            return hv
    data = event.get("data")
    if isinstance(data, Mapping):
        val = data.get("correlationId")
        if isinstance(val, str) and val:
            return val
    return None
