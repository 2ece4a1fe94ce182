"""Core domain layer."""

from menu_notifier.core.entities import (
    CurrentItem,
    DeliveryOutcome,
    DeliveryReceipt,
    DeliveryRecord,
    DeliveryStatus,
    Item,
    RefreshResult,
    SendResult,
)
from menu_notifier.core.errors import (
    DomainError,
    DuplicateError,
    FetchError,
    NotFoundError,
    RetryExhaustedError,
    SendError,
    ValidationError,
)
from menu_notifier.core.interfaces import ContentSource, DeliveryLedger, ItemStore, Notifier
from menu_notifier.core.result import Result

__all__ = [
    "Item",
    "DeliveryRecord",
    "DeliveryReceipt",
    "DeliveryStatus",
    "DeliveryOutcome",
    "CurrentItem",
    "SendResult",
    "RefreshResult",
    "DomainError",
    "FetchError",
    "ValidationError",
    "SendError",
    "DuplicateError",
    "NotFoundError",
    "RetryExhaustedError",
    "ContentSource",
    "ItemStore",
    "DeliveryLedger",
    "Notifier",
    "Result",
]
