"""Utility helpers exposed via Common Layer."""

from .files import ensure_private_dir, remove_temporary_file
from .logger import extract_correlation_id, get_logger

__all__ = [
    "ensure_private_dir",
    "remove_temporary_file",
    "extract_correlation_id",
    "get_logger",
]
