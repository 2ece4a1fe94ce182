"""Source adapters for fetching the latest channel post."""

from typing import Optional

from menu_notifier.adapters.sources.kakao_api_source import KakaoApiSource
from menu_notifier.adapters.sources.kakao_html_source import KakaoHtmlSource
from menu_notifier.core import ContentSource


def create_source(kind: str, channel_url: Optional[str] = None, timeout: float = 30.0) -> ContentSource:
    """Build the content source selected in configuration (``api`` or ``html``)."""
    if kind == "api":
        return KakaoApiSource(channel_url=channel_url, timeout=timeout)
    if kind == "html":
        return KakaoHtmlSource(channel_url=channel_url, timeout=timeout)
    raise ValueError(f"Unsupported source kind: {kind}")


__all__ = ["KakaoApiSource", "KakaoHtmlSource", "create_source"]
