"""Local filesystem helpers for temporary PDF artifacts."""

from __future__ import annotations

import logging
import os
from typing import Union

PathLike = Union[str, "os.PathLike[str]"]


def ensure_private_dir(path: PathLike) -> str:
    """Create ``path`` with owner-only permissions if it does not exist."""
    folder = os.fspath(path)
    if not os.path.isdir(folder):
        os.makedirs(folder, mode=0o700, exist_ok=True)
    return folder


def remove_temporary_file(path: PathLike, log: Union[logging.Logger, logging.LoggerAdapter]) -> bool:
    """Delete a temporary file, logging (never raising) on failure.

    Returns True when the file was removed.
    """
    try:
        os.unlink(path)
    except OSError as exc:
        log.warning(
            f"Failed to cleanup local PDF file {os.fspath(path)}: {exc}",
            extra={"output_path": os.fspath(path)},
        )
        return False
    return True
