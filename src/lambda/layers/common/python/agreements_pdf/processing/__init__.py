"""Event handling and queue message processing."""

from .event_handler import AgreementEventHandler, host_of
from .message_processor import decode_body, process_message

__all__ = [
    "AgreementEventHandler",
    "decode_body",
    "host_of",
    "process_message",
]
