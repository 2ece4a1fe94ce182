"""Core interfaces for adapters."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from menu_notifier.core.entities import DeliveryReceipt, DeliveryRecord, Item


class ContentSource(ABC):
    """Interface for fetching the latest publication from the upstream channel."""

    @abstractmethod
    async def fetch_latest(self) -> Item:
        """Fetch the single most recent item.

        Raises:
            FetchError: Source unreachable or response unusable.
            ValidationError: Upstream record does not form a valid Item.
        """
        pass


class ItemStore(ABC):
    """Interface for persisting fetched items."""

    @abstractmethod
    def save(self, item: Item) -> Item:
        """Insert or update the item keyed by its id."""
        pass

    @abstractmethod
    def find_by_id(self, item_id: str) -> Optional[Item]:
        pass

    @abstractmethod
    def find_most_recent(self) -> Optional[Item]:
        """Most recently published stored item of any period."""
        pass

    @abstractmethod
    def find_current_period(self, now: Optional[datetime] = None) -> Optional[Item]:
        """Stored item belonging to the period containing ``now``."""
        pass


class DeliveryLedger(ABC):
    """Interface for the persistent record of deliveries."""

    @abstractmethod
    def find_by_item_and_destination(
        self, item_id: str, destination: str
    ) -> Optional[DeliveryRecord]:
        pass

    @abstractmethod
    def save(self, record: DeliveryRecord) -> DeliveryRecord:
        """Record a delivery.

        Raises:
            DuplicateError: A record for (item_id, destination) already exists.
        """
        pass

    @abstractmethod
    def find_latest_by_destination(self, destination: str) -> Optional[DeliveryRecord]:
        pass


class Notifier(ABC):
    """Interface for delivering items to a messaging destination."""

    @abstractmethod
    async def send(self, item: Item, destination: str) -> DeliveryReceipt:
        """Post the item to the destination. Raises SendError on failure."""
        pass

    @abstractmethod
    async def send_private(
        self, item: Item, destination: str, requester: str
    ) -> DeliveryReceipt:
        """Post the item visible only to ``requester``. Raises SendError on failure."""
        pass
