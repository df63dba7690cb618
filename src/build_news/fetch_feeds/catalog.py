"""Scrape release tiles from an HTML catalog page."""

from __future__ import annotations

import asyncio
import logging
import re
from datetime import datetime
from typing import Awaitable, Callable, Optional
from urllib.parse import urljoin, urlparse

from build_news.fetch_feeds.extract import decode_entities, first_attr, first_tag_text, strip_markup
from build_news.models import CandidateItem
from common.datetime import parse_published

logger = logging.getLogger(__name__)

TILE_RE = re.compile(
    r"""<a\b[^>]*?\shref\s*=\s*["']([^"']*/(?:album|track)/[^"']*)["'][^>]*>(.*?)</a\s*>""",
    re.IGNORECASE | re.DOTALL,
)
IMG_TAG = r"<img\b[^>]*>"
TITLE_TAGS = ["p", "h2", "h3"]
META_DATE_TAG = r"""<meta\b[^>]*\bitemprop\s*=\s*["']datePublished["'][^>]*>"""
JSON_LD_DATE_RE = re.compile(r'"datePublished"\s*:\s*"([^"]+)"')

Fetch = Callable[[str], Awaitable[str]]


def parse_catalog_tiles(html: str, origin: str, source_label: str) -> list[CandidateItem]:
    """Extract album/track tiles from a listing page, in page order.

    The listing carries no dates, so every tile starts undated. Links to
    releases on other hosts (label mates, recommendations) are skipped.
    """
    if not html:
        return []

    origin_host = (urlparse(origin).hostname or "").lower()
    items = []
    seen: set[tuple[str, str]] = set()
    for m in TILE_RE.finditer(html):
        href = decode_entities(m.group(1)).strip()
        inner = m.group(2)
        title = strip_markup(first_tag_text(inner, TITLE_TAGS) or inner)
        if not href or not title:
            continue
        url = urljoin(origin.rstrip("/") + "/", href)
        if (urlparse(url).hostname or "").lower() != origin_host:
            logger.debug("Skipping off-site tile %s", url)
            continue
        key = (title, url)
        if key in seen:
            continue
        seen.add(key)
        image_url = first_attr(inner, IMG_TAG, "data-original") or first_attr(inner, IMG_TAG, "src")
        items.append(CandidateItem(
            title=title,
            url=url,
            published_at=None,
            image_url=urljoin(url, image_url) if image_url else "",
            source_label=source_label,
        ))
    return items


def extract_date_published(html: str) -> Optional[datetime]:
    """Find the machine-readable publish date on a release detail page."""
    if not html:
        return None
    value = first_attr(html, META_DATE_TAG, "content")
    if not value:
        m = JSON_LD_DATE_RE.search(html)
        value = m.group(1) if m else ""
    return parse_published(value)


async def parse_catalog_page(
    html: str,
    origin: str,
    source_label: str,
    fetch: Fetch,
    *,
    detail_fetch_cap: int = 6,
    stagger_seconds: float = 0.4,
) -> list[CandidateItem]:
    """Parse a catalog page and recover dates for the first few tiles.

    Only the first ``detail_fetch_cap`` tiles get a detail-page fetch, each
    delayed by ``stagger_seconds * index``. Tiles beyond the cap, and tiles
    whose detail fetch fails, keep ``published_at=None``.
    """
    items = parse_catalog_tiles(html, origin, source_label)
    if not items:
        return []

    head = items[:max(detail_fetch_cap, 0)]
    results = await asyncio.gather(
        *(_fetch_date(item.url, index * stagger_seconds, fetch) for index, item in enumerate(head)),
        return_exceptions=True,
    )
    for item, result in zip(head, results):
        if isinstance(result, BaseException):
            logger.warning("Detail fetch failed for %s: %s", item.url, result)
            continue
        item.published_at = result

    dated = sum(1 for item in items if item.published_at is not None)
    logger.info("Catalog %s: %d tiles, %d dated", origin, len(items), dated)
    return items


async def _fetch_date(url: str, delay: float, fetch: Fetch) -> Optional[datetime]:
    if delay > 0:
        await asyncio.sleep(delay)
    page = await fetch(url)
    if not page:
        return None
    published_at = extract_date_published(page)
    if published_at is None:
        logger.debug("No datePublished marker on %s", url)
    return published_at
