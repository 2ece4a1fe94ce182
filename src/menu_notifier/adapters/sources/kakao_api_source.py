"""Kakao channel source backed by the channel's internal JSON API."""

import logging
import re
from datetime import datetime, timezone
from typing import Any, Optional

import httpx

from menu_notifier.core import ContentSource, FetchError, Item

logger = logging.getLogger(__name__)

DEFAULT_CHANNEL_ID = "_LCxlxlxb"

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


def extract_channel_id(channel_url: Optional[str]) -> Optional[str]:
    """Extract ``_abc`` from ``https://pf.kakao.com/_abc/posts``."""
    if not channel_url:
        return None
    match = re.search(r"pf\.kakao\.com/([^/?#]+)", channel_url)
    return match.group(1) if match else None


class KakaoApiSource(ContentSource):
    """Fetch the latest channel post from the Kakao posts API."""

    name = "Kakao API"
    base_url = "https://pf.kakao.com"

    def __init__(self, channel_url: Optional[str] = None, timeout: float = 30.0) -> None:
        self.channel_id = extract_channel_id(channel_url) or DEFAULT_CHANNEL_ID
        self.timeout = timeout

    @property
    def posts_url(self) -> str:
        return f"{self.base_url}/rocket-web/web/profiles/{self.channel_id}/posts"

    async def fetch_latest(self) -> Item:
        """Fetch the newest post and turn it into an Item."""
        post = await self._fetch_latest_post()
        if post is None:
            raise FetchError("No posts found on channel")

        image_url = self._extract_image_url(post)
        if not image_url:
            raise FetchError(f"Post {post.get('id')} has no image")

        published_ms = post.get("published_at") or post.get("created_at")
        if published_ms is None:
            raise FetchError(f"Post {post.get('id')} has no publish time")

        # ValidationError from Item propagates to the caller as is.
        return Item(
            id=str(post.get("id", "")),
            title=post.get("title") or "",
            media_url=image_url,
            published_at=datetime.fromtimestamp(published_ms / 1000, tz=timezone.utc),
        )

    async def _fetch_latest_post(self) -> Optional[dict[str, Any]]:
        headers = {
            "User-Agent": USER_AGENT,
            "Accept": "application/json",
            "Accept-Language": "ko-KR,ko;q=0.9,en-US;q=0.8,en;q=0.7",
            "Referer": f"{self.base_url}/{self.channel_id}/posts",
        }

        async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
            try:
                response = await client.get(
                    self.posts_url,
                    params={"includePinnedPost": "true"},
                    headers=headers,
                )
                response.raise_for_status()
                data = response.json()
            except httpx.HTTPError as e:
                raise FetchError(f"Kakao API request failed: {e}", e) from e
            except ValueError as e:
                raise FetchError(f"Kakao API returned invalid JSON: {e}", e) from e

        items = data.get("items") if isinstance(data, dict) else None
        if not items:
            return None

        logger.debug("Kakao API returned %d posts", len(items))
        return items[0]

    def _extract_image_url(self, post: dict[str, Any]) -> Optional[str]:
        """Pick the largest image rendition of the first image attachment."""
        media = post.get("media") or []
        image = next((m for m in media if m.get("type") == "image"), None)
        if image is None:
            return None

        url = (
            image.get("xlarge_url")
            or image.get("large_url")
            or image.get("medium_url")
            or image.get("url")
        )
        if not url:
            return None

        return url if url.startswith("http") else f"https:{url}"
