"""Slack Block Kit message layouts."""

from typing import Any

from menu_notifier.core import Item
from menu_notifier.core.period import format_range

DEFAULT_HEADER = "🍽️ 판교 이노밸리 구내식당"
DEFAULT_CHANNEL_LINK = "https://pf.kakao.com/_LCxlxlxb/posts"


def build_fallback_text(item: Item) -> str:
    """Plain text shown in notifications and clients without block support."""
    return f"🍽️ {item.title}"


def build_item_blocks(
    item: Item,
    header: str = DEFAULT_HEADER,
    channel_link: str = DEFAULT_CHANNEL_LINK,
) -> list[dict[str, Any]]:
    """Build the message blocks for a weekly menu post."""
    range_text = format_range(item)
    section_text = f"*{item.title}*"
    if range_text:
        section_text += f"\n📅 {range_text}"

    return [
        {
            "type": "header",
            "text": {"type": "plain_text", "text": header, "emoji": True},
        },
        {
            "type": "section",
            "text": {"type": "mrkdwn", "text": section_text},
        },
        {
            "type": "image",
            "image_url": item.media_url,
            "alt_text": item.title or "menu",
        },
        {
            "type": "context",
            "elements": [
                {"type": "mrkdwn", "text": f"📎 <{channel_link}|카카오 채널에서 보기>"},
            ],
        },
        {"type": "divider"},
    ]
