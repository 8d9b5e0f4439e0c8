"""Utility helpers for building agreement PDF S3 keys and local paths."""

from __future__ import annotations

import os
from typing import Any, Optional
from uuid import uuid4


def build_storage_key(
    *,
    prefix: Optional[str],
    agreement_number: Any,
    version: Any,
    filename: str,
) -> str:
    """Return ``{prefix}/{agreement_number}/{version}/{filename}``.

    Empty components are omitted rather than producing ``//`` segments.
    """
    parts = (prefix, agreement_number, version, filename)
    return "/".join(str(p) for p in parts if p not in (None, ""))


def build_location(bucket: str, key: str) -> str:
    return f"s3://{bucket}/{key}"


def build_local_pdf_path(tmp_folder: str, filename: str, token: Optional[str] = None) -> str:
    """Unique local path for one render of ``filename``.

    Concurrent renders of the same agreement version get distinct paths;
    the stable filename is only used for the storage key.
    """
    stem, ext = os.path.splitext(os.path.basename(filename))
    suffix = token or uuid4().hex[:12]
    return os.path.join(tmp_folder, f"{stem}-{suffix}{ext or '.pdf'}")
