"""Shared fixtures."""

from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

import pytest

from menu_notifier.core import Item

KST = ZoneInfo("Asia/Seoul")

# Wednesday; the current week starts Monday 2024-12-16.
NOW = datetime(2024, 12, 18, 9, 0, tzinfo=KST)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_item():
    """Factory for items with sensible defaults."""

    def _make(
        item_id: str = "101",
        title: str = "주간메뉴[12/16-12/20]",
        media_url: str = "https://k.kakaocdn.net/dn/test/menu.jpg",
        published_at: Optional[datetime] = None,
    ) -> Item:
        return Item(
            id=item_id,
            title=title,
            media_url=media_url,
            published_at=published_at or datetime(2024, 12, 16, 8, 30, tzinfo=KST),
        )

    return _make
