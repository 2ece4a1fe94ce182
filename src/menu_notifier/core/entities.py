"""Core domain entities."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from urllib.parse import urlparse

from menu_notifier.core.errors import DomainError, ValidationError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _is_http_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


@dataclass(frozen=True)
class Item:
    """A single weekly publication fetched from the channel."""

    id: str
    title: str
    media_url: str
    published_at: datetime
    ingested_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        item_id = (self.id or "").strip()
        if not item_id:
            raise ValidationError("Item id cannot be empty")

        media_url = (self.media_url or "").strip()
        if not media_url:
            raise ValidationError("Media URL cannot be empty")
        if not _is_http_url(media_url):
            raise ValidationError(f"Invalid media URL: {self.media_url}")

        object.__setattr__(self, "id", item_id)
        object.__setattr__(self, "media_url", media_url)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "media_url": self.media_url,
            "published_at": self.published_at.isoformat(),
            "ingested_at": self.ingested_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Item":
        """Restore an item from its persisted form."""
        ingested_at = data.get("ingested_at")
        return cls(
            id=str(data["id"]),
            title=data.get("title") or "",
            media_url=data["media_url"],
            published_at=datetime.fromisoformat(data["published_at"]),
            ingested_at=datetime.fromisoformat(ingested_at) if ingested_at else _utcnow(),
        )


@dataclass(frozen=True)
class DeliveryRecord:
    """Proof that an item was delivered to a destination."""

    item_id: str
    destination: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    delivered_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        item_id = (self.item_id or "").strip()
        if not item_id:
            raise ValidationError("Item id cannot be empty")
        destination = (self.destination or "").strip()
        if not destination:
            raise ValidationError("Destination cannot be empty")

        object.__setattr__(self, "item_id", item_id)
        object.__setattr__(self, "destination", destination)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "item_id": self.item_id,
            "destination": self.destination,
            "delivered_at": self.delivered_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DeliveryRecord":
        return cls(
            id=str(data["id"]),
            item_id=str(data["item_id"]),
            destination=str(data["destination"]),
            delivered_at=datetime.fromisoformat(data["delivered_at"]),
        )


@dataclass(frozen=True)
class DeliveryReceipt:
    """Acknowledgement returned by a notifier."""

    destination: str
    message_ts: str = ""


class DeliveryStatus(str, Enum):
    """Terminal state of a scheduled check-and-send run."""

    DELIVERED = "delivered"
    SKIPPED_DUPLICATE = "skipped_duplicate"
    SKIPPED_NOT_FOUND = "skipped_not_found"
    EXHAUSTED = "exhausted"
    FAILED = "failed"


@dataclass(frozen=True)
class DeliveryOutcome:
    """Result of a check-and-send run."""

    status: DeliveryStatus
    attempt_count: int
    delivered_at: Optional[datetime] = None
    item: Optional[Item] = None
    reason: str = ""
    error: Optional[DomainError] = None

    @property
    def success(self) -> bool:
        return self.status in (DeliveryStatus.DELIVERED, DeliveryStatus.SKIPPED_DUPLICATE)

    @property
    def skipped(self) -> bool:
        return self.status in (
            DeliveryStatus.SKIPPED_DUPLICATE,
            DeliveryStatus.SKIPPED_NOT_FOUND,
        )


@dataclass(frozen=True)
class CurrentItem:
    """Item served to an on-demand request and where it came from."""

    item: Item
    source: str  # "cache" or "crawl"


@dataclass(frozen=True)
class SendResult:
    """Ledger entry and receipt of a direct send."""

    record: DeliveryRecord
    receipt: DeliveryReceipt


@dataclass(frozen=True)
class RefreshResult:
    """Latest item after a refresh and whether it was newly stored."""

    item: Item
    is_new: bool
