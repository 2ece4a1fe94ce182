"""Tests for Kakao source adapters."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock, patch
from zoneinfo import ZoneInfo

import httpx
import pytest

from menu_notifier.adapters.sources import KakaoApiSource, KakaoHtmlSource, create_source
from menu_notifier.adapters.sources.kakao_api_source import extract_channel_id
from menu_notifier.adapters.sources.kakao_html_source import parse_post_date
from menu_notifier.core import FetchError, ValidationError

KST = ZoneInfo("Asia/Seoul")

POST = {
    "id": 107654321,
    "title": "주간메뉴[12/16-12/20]",
    "type": "image",
    "published_at": 1734308400000,  # 2024-12-16 00:20 UTC
    "created_at": 1734308300000,
    "media": [
        {"type": "video", "url": "https://example.com/clip.mp4"},
        {
            "type": "image",
            "url": "//k.kakaocdn.net/dn/menu.jpg",
            "large_url": "//k.kakaocdn.net/dn/menu_large.jpg",
            "xlarge_url": "//k.kakaocdn.net/dn/menu_xlarge.jpg",
        },
    ],
}

POSTS_PAGE = """
<html><body>
  <div class="area_card">
    <a href="https://pf.kakao.com/_LCxlxlxb/107654321">
      <div class="wrap_fit_thumb" style="background-image: url('//k.kakaocdn.net/dn/menu.jpg');"></div>
      <strong class="tit_card"> 주간메뉴[12/16-12/20] </strong>
    </a>
    <a href="https://pf.kakao.com/_LCxlxlxb/posts/107654321">link</a>
    <span class="txt_date">2시간 전</span>
  </div>
</body></html>
"""


def _patch_get(mock_client, response) -> AsyncMock:
    mock_get = AsyncMock(return_value=response)
    mock_client.return_value.__aenter__.return_value.get = mock_get
    return mock_get


def _json_response(data) -> Mock:
    response = Mock()
    response.raise_for_status = Mock()
    response.json = Mock(return_value=data)
    return response


def test_extract_channel_id() -> None:
    assert extract_channel_id("https://pf.kakao.com/_abcd/posts") == "_abcd"
    assert extract_channel_id("https://example.com") is None
    assert extract_channel_id(None) is None


@pytest.mark.asyncio
async def test_api_source_fetch_latest() -> None:
    source = KakaoApiSource("https://pf.kakao.com/_abcd/posts")

    with patch("httpx.AsyncClient") as mock_client:
        mock_get = _patch_get(mock_client, _json_response({"items": [POST], "has_next": True}))

        item = await source.fetch_latest()

    assert item.id == "107654321"
    assert item.title == "주간메뉴[12/16-12/20]"
    assert item.media_url == "https://k.kakaocdn.net/dn/menu_xlarge.jpg"
    assert item.published_at == datetime(2024, 12, 16, 0, 20, tzinfo=timezone.utc)
    assert mock_get.call_args.args[0] == "https://pf.kakao.com/rocket-web/web/profiles/_abcd/posts"
    assert mock_get.call_args.kwargs["params"] == {"includePinnedPost": "true"}


@pytest.mark.asyncio
async def test_api_source_no_posts() -> None:
    source = KakaoApiSource()

    with patch("httpx.AsyncClient") as mock_client:
        _patch_get(mock_client, _json_response({"items": []}))

        with pytest.raises(FetchError, match="No posts"):
            await source.fetch_latest()


@pytest.mark.asyncio
async def test_api_source_no_image() -> None:
    source = KakaoApiSource()
    post = dict(POST, media=[{"type": "video", "url": "https://example.com/clip.mp4"}])

    with patch("httpx.AsyncClient") as mock_client:
        _patch_get(mock_client, _json_response({"items": [post]}))

        with pytest.raises(FetchError, match="no image"):
            await source.fetch_latest()


@pytest.mark.asyncio
async def test_api_source_http_error() -> None:
    source = KakaoApiSource()
    response = Mock()
    response.raise_for_status = Mock(side_effect=httpx.HTTPError("503"))

    with patch("httpx.AsyncClient") as mock_client:
        _patch_get(mock_client, response)

        with pytest.raises(FetchError):
            await source.fetch_latest()


@pytest.mark.asyncio
async def test_api_source_invalid_post_raises_validation_error() -> None:
    source = KakaoApiSource()
    post = dict(POST, id="  ")

    with patch("httpx.AsyncClient") as mock_client:
        _patch_get(mock_client, _json_response({"items": [post]}))

        with pytest.raises(ValidationError):
            await source.fetch_latest()


@pytest.mark.asyncio
async def test_html_source_fetch_latest() -> None:
    now = datetime(2024, 12, 16, 12, 0, tzinfo=KST)
    source = KakaoHtmlSource("https://pf.kakao.com/_LCxlxlxb/posts", clock=lambda: now)
    response = Mock()
    response.raise_for_status = Mock()
    response.text = POSTS_PAGE

    with patch("httpx.AsyncClient") as mock_client:
        _patch_get(mock_client, response)

        item = await source.fetch_latest()

    assert item.id == "107654321"
    assert item.title == "주간메뉴[12/16-12/20]"
    assert item.media_url == "https://k.kakaocdn.net/dn/menu.jpg"
    assert item.published_at == datetime(2024, 12, 16, 10, 0, tzinfo=KST)


@pytest.mark.asyncio
async def test_html_source_missing_fields() -> None:
    source = KakaoHtmlSource()
    response = Mock()
    response.raise_for_status = Mock()
    response.text = "<html><body><p>nothing here</p></body></html>"

    with patch("httpx.AsyncClient") as mock_client:
        _patch_get(mock_client, response)

        with pytest.raises(FetchError, match="post_id, title, image_url"):
            await source.fetch_latest()


def test_parse_post_date() -> None:
    now = datetime(2024, 12, 18, 9, 0, tzinfo=KST)

    assert parse_post_date("30분 전", now) == datetime(2024, 12, 18, 8, 30, tzinfo=KST)
    assert parse_post_date("3시간 전", now) == datetime(2024, 12, 18, 6, 0, tzinfo=KST)
    assert parse_post_date("2일 전", now) == datetime(2024, 12, 16, 9, 0, tzinfo=KST)
    assert parse_post_date("2024.12.16.", now) == datetime(2024, 12, 16, tzinfo=KST)
    assert parse_post_date("어제", now) == now


def test_create_source() -> None:
    assert isinstance(create_source("api"), KakaoApiSource)
    assert isinstance(create_source("html"), KakaoHtmlSource)
    with pytest.raises(ValueError):
        create_source("playwright")
