"""Kakao channel source that scrapes the public posts page."""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from typing import Callable, Optional
from urllib.parse import urljoin
from zoneinfo import ZoneInfo

import httpx
from bs4 import BeautifulSoup

from menu_notifier.adapters.sources.kakao_api_source import USER_AGENT
from menu_notifier.core import ContentSource, FetchError, Item

logger = logging.getLogger(__name__)

DEFAULT_CHANNEL_URL = "https://pf.kakao.com/_LCxlxlxb/posts"


@dataclass
class PostCard:
    """Raw fields of the first post card on the page."""

    post_id: str
    title: str
    image_url: str
    date_text: str


def parse_post_date(date_text: str, now: datetime) -> datetime:
    """Parse card dates such as ``2시간 전``, ``3일 전`` or ``2025.12.22.``.

    Unrecognised text falls back to ``now``.
    """
    text = date_text.strip()
    number = re.match(r"(\d+)", text)
    amount = int(number.group(1)) if number else 1

    if "분 전" in text:
        return now - timedelta(minutes=amount)
    if "시간 전" in text:
        return now - timedelta(hours=amount)
    if "일 전" in text:
        return now - timedelta(days=amount)

    match = re.search(r"(\d{4})\.(\d{1,2})\.(\d{1,2})", text)
    if match:
        year, month, day = (int(g) for g in match.groups())
        try:
            return datetime(year, month, day, tzinfo=now.tzinfo)
        except ValueError:
            pass

    return now


class KakaoHtmlSource(ContentSource):
    """Fetch the latest channel post by parsing the posts page HTML."""

    name = "Kakao HTML"

    def __init__(
        self,
        channel_url: Optional[str] = None,
        timeout: float = 30.0,
        tz: Optional[tzinfo] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.channel_url = channel_url or DEFAULT_CHANNEL_URL
        self.timeout = timeout
        self.tz = tz or ZoneInfo("Asia/Seoul")
        self.clock = clock or (lambda: datetime.now(self.tz))

    async def fetch_latest(self) -> Item:
        async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
            try:
                response = await client.get(
                    self.channel_url,
                    headers={
                        "User-Agent": USER_AGENT,
                        "Accept-Language": "ko-KR,ko;q=0.9,en-US;q=0.8,en;q=0.7",
                    },
                )
                response.raise_for_status()
            except httpx.HTTPError as e:
                raise FetchError(f"Posts page request failed: {e}", e) from e

        card = self._extract_card(response.text)
        missing = [
            name for name, value in (
                ("post_id", card.post_id),
                ("title", card.title),
                ("image_url", card.image_url),
            )
            if not value
        ]
        if missing:
            raise FetchError(f"Post card is missing fields: {', '.join(missing)}")

        return Item(
            id=card.post_id,
            title=card.title,
            media_url=card.image_url,
            published_at=parse_post_date(card.date_text, self.clock()),
        )

    def _extract_card(self, html: str) -> PostCard:
        """Extract the first post card from the page."""
        soup = BeautifulSoup(html, "html.parser")

        post_id = ""
        link = soup.select_one('a[href*="/posts/"]')
        if link is not None:
            id_match = re.search(r"/(\d+)/?$", link.get("href", ""))
            post_id = id_match.group(1) if id_match else ""

        title_el = soup.select_one(".tit_card")
        title = title_el.get_text(strip=True) if title_el else ""

        image_url = ""
        thumb = soup.select_one(".wrap_fit_thumb")
        if thumb is not None:
            url_match = re.search(r"url\([\"']?([^\"')]+)[\"']?\)", thumb.get("style", ""))
            if url_match:
                image_url = urljoin("https:", url_match.group(1))

        date_el = soup.select_one(".txt_date")
        date_text = date_el.get_text(strip=True) if date_el else ""

        logger.debug("Parsed post card id=%s title=%r", post_id, title)
        return PostCard(post_id=post_id, title=title, image_url=image_url, date_text=date_text)
