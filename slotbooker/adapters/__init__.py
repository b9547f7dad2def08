"""
Adapters layer - Document stores and email delivery.
"""

from .console_notifier import ConsoleNotifier, SentMessage
from .json_store import JsonFileBookingStore
from .memory_store import InMemoryBookingStore
from .plunk_client import PlunkEmailClient
from .templates import render_confirmation

__all__ = [
    "ConsoleNotifier",
    "InMemoryBookingStore",
    "JsonFileBookingStore",
    "PlunkEmailClient",
    "SentMessage",
    "render_confirmation",
]
