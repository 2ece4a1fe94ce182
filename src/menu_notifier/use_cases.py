"""Business logic use cases."""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Optional

from menu_notifier.core import (
    ContentSource,
    CurrentItem,
    DeliveryLedger,
    DeliveryOutcome,
    DeliveryRecord,
    DeliveryStatus,
    DomainError,
    DuplicateError,
    FetchError,
    Item,
    ItemStore,
    NotFoundError,
    Notifier,
    RefreshResult,
    Result,
    RetryExhaustedError,
    SendError,
    SendResult,
    ValidationError,
)
from menu_notifier.core.period import MONDAY, is_current_period

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
Sleep = Callable[[float], Awaitable[None]]

DEFAULT_MAX_ATTEMPTS = 6
DEFAULT_RETRY_DELAY = timedelta(hours=1)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DeliveryOrchestrator:
    """Poll the source until this period's item shows up, then deliver it once.

    A run ends in exactly one of the ``DeliveryStatus`` states. Fetch failures
    and a not-yet-published item are retried up to ``max_attempts`` with
    ``delay`` between attempts; a failed send is not retried.
    """

    def __init__(
        self,
        source: ContentSource,
        notifier: Notifier,
        item_store: ItemStore,
        ledger: DeliveryLedger,
        anchor_weekday: int = MONDAY,
        clock: Clock = utc_now,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.source = source
        self.notifier = notifier
        self.item_store = item_store
        self.ledger = ledger
        self.anchor_weekday = anchor_weekday
        self.clock = clock
        self.sleep = sleep

    async def check_and_send(
        self,
        destination: str,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        delay: timedelta = DEFAULT_RETRY_DELAY,
    ) -> DeliveryOutcome:
        stored = self.item_store.find_current_period(self.clock())
        if stored is not None:
            if self.ledger.find_by_item_and_destination(stored.id, destination):
                logger.info("Already delivered this period: %s -> %s", stored.title, destination)
                return DeliveryOutcome(
                    status=DeliveryStatus.SKIPPED_DUPLICATE,
                    attempt_count=0,
                    item=stored,
                    reason=f"Already delivered this period: {stored.title}",
                )

        for attempt in range(1, max_attempts + 1):
            is_last = attempt == max_attempts
            logger.info("Attempt %d/%d for %s", attempt, max_attempts, destination)

            try:
                outcome = await self._attempt(destination, attempt)
            except (FetchError, ValidationError) as e:
                logger.warning("Fetch failed (%d/%d): %s", attempt, max_attempts, e)
                if is_last:
                    return DeliveryOutcome(
                        status=DeliveryStatus.FAILED,
                        attempt_count=attempt,
                        reason=str(e),
                        error=e,
                    )
            except Exception as e:
                logger.exception("Unexpected error (%d/%d)", attempt, max_attempts)
                if is_last:
                    error = RetryExhaustedError(
                        f"Gave up after {attempt} attempts: {e}", attempts=attempt, cause=e
                    )
                    return DeliveryOutcome(
                        status=DeliveryStatus.FAILED,
                        attempt_count=attempt,
                        reason=str(error),
                        error=error,
                    )
            else:
                if outcome is not None:
                    return outcome
                if is_last:
                    return DeliveryOutcome(
                        status=DeliveryStatus.SKIPPED_NOT_FOUND,
                        attempt_count=attempt,
                        reason="This period's item was not found",
                    )

            logger.info("Retrying in %.0f minutes", delay.total_seconds() / 60)
            await self.sleep(delay.total_seconds())

        return DeliveryOutcome(
            status=DeliveryStatus.EXHAUSTED,
            attempt_count=max(max_attempts, 0),
            reason="No attempts left",
        )

    async def _attempt(self, destination: str, attempt: int) -> Optional[DeliveryOutcome]:
        """Run one poll. Returns None when the item is not out yet."""
        item = await self.source.fetch_latest()
        logger.info("Fetched %r (id=%s)", item.title, item.id)

        now = self.clock()
        if not is_current_period(item, now, self.anchor_weekday):
            logger.info("Not this period's item: %r", item.title)
            return None

        if self.ledger.find_by_item_and_destination(item.id, destination):
            return DeliveryOutcome(
                status=DeliveryStatus.SKIPPED_DUPLICATE,
                attempt_count=attempt,
                item=item,
                reason="Item already delivered",
            )

        if self.item_store.find_by_id(item.id) is None:
            self.item_store.save(item)

        try:
            await self.notifier.send(item, destination)
        except SendError as e:
            logger.error("Delivery of %s to %s failed: %s", item.id, destination, e)
            return DeliveryOutcome(
                status=DeliveryStatus.FAILED,
                attempt_count=attempt,
                item=item,
                reason=str(e),
                error=e,
            )

        delivered_at = self.clock()
        try:
            self.ledger.save(DeliveryRecord(item_id=item.id, destination=destination, delivered_at=delivered_at))
        except DuplicateError:
            logger.warning("Delivery of %s to %s was recorded by another run", item.id, destination)

        logger.info("Delivered %s to %s on attempt %d", item.id, destination, attempt)
        return DeliveryOutcome(
            status=DeliveryStatus.DELIVERED,
            attempt_count=attempt,
            delivered_at=delivered_at,
            item=item,
        )


class CurrentItemService:
    """Serve "this week's menu" on demand, privately to the requester."""

    def __init__(
        self,
        source: ContentSource,
        notifier: Notifier,
        item_store: ItemStore,
        anchor_weekday: int = MONDAY,
        clock: Clock = utc_now,
    ) -> None:
        self.source = source
        self.notifier = notifier
        self.item_store = item_store
        self.anchor_weekday = anchor_weekday
        self.clock = clock

    async def get_current(self, destination: str, requester: str) -> Result[CurrentItem]:
        try:
            now = self.clock()
            cached = self.item_store.find_current_period(now)
            if cached is not None:
                await self.notifier.send_private(cached, destination, requester)
                return Result.ok(CurrentItem(item=cached, source="cache"))

            fetched = await self.source.fetch_latest()

            if not is_current_period(fetched, now, self.anchor_weekday):
                latest = self.item_store.find_most_recent()
                if latest is None:
                    return Result.fail(NotFoundError("This week's menu was not found"))
                await self.notifier.send_private(latest, destination, requester)
                return Result.ok(CurrentItem(item=latest, source="cache"))

            saved = self.item_store.save(fetched)
            await self.notifier.send_private(saved, destination, requester)
            return Result.ok(CurrentItem(item=saved, source="crawl"))
        except DomainError as e:
            return Result.fail(e)
        except Exception as e:
            logger.exception("On-demand lookup failed")
            return Result.fail(DomainError(f"Menu lookup failed: {e}", e))


class DirectSendService:
    """Deliver a known item to a destination once, without polling."""

    def __init__(
        self,
        notifier: Notifier,
        ledger: DeliveryLedger,
        clock: Clock = utc_now,
    ) -> None:
        self.notifier = notifier
        self.ledger = ledger
        self.clock = clock

    async def send(self, item: Item, destination: str) -> Result[SendResult]:
        try:
            if self.ledger.find_by_item_and_destination(item.id, destination):
                return Result.fail(
                    DuplicateError(f"Already delivered: {item.id} -> {destination}")
                )

            receipt = await self.notifier.send(item, destination)
            record = self.ledger.save(
                DeliveryRecord(item_id=item.id, destination=destination, delivered_at=self.clock())
            )
            return Result.ok(SendResult(record=record, receipt=receipt))
        except (SendError, DuplicateError) as e:
            return Result.fail(e)
        except Exception as e:
            logger.exception("Direct send failed")
            return Result.fail(SendError(f"Direct send failed: {e}", e))


class RefreshService:
    """Fetch the latest item and store it when it is new."""

    def __init__(self, source: ContentSource, item_store: ItemStore) -> None:
        self.source = source
        self.item_store = item_store

    async def refresh(self, force: bool = False) -> Result[RefreshResult]:
        try:
            fetched = await self.source.fetch_latest()

            existing = self.item_store.find_by_id(fetched.id)
            if existing is not None and not force:
                return Result.ok(RefreshResult(item=existing, is_new=False))

            saved = self.item_store.save(fetched)
            return Result.ok(RefreshResult(item=saved, is_new=True))
        except (FetchError, ValidationError) as e:
            return Result.fail(e)
        except Exception as e:
            logger.exception("Refresh failed")
            return Result.fail(FetchError(f"Refresh failed: {e}", e))
