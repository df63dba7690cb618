"""Harvest all configured sources and merge them into news records."""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlparse

from build_news.config import Config
from build_news.fetch_feeds.catalog import parse_catalog_page
from build_news.fetch_feeds.fetcher import FeedFetcher
from build_news.fetch_feeds.sources import build_sources
from build_news.fetch_feeds.syndication import parse_feed
from build_news.filter_items.relevance import RelevanceFilter
from build_news.merge_items.merge import merge
from build_news.models import HarvestResult, SourceResult, SourceSpec

logger = logging.getLogger(__name__)


async def fetch_source(
    source: SourceSpec,
    fetcher: FeedFetcher,
    config: Config,
    relevance: RelevanceFilter,
    captured_at: datetime,
) -> SourceResult:
    """Fetch, parse and filter one source."""
    logger.info("Fetching %s: %s", source.label, source.url)

    # Feeds go to the parser undecoded so their XML encoding declaration applies
    fetch = fetcher.fetch if source.kind == "catalog" else fetcher.fetch_bytes
    body = await fetch(source.url)
    if not body:
        return SourceResult(source=source, error=f"no content from {source.url}")

    if source.kind == "catalog":
        parsed = urlparse(source.url)
        candidates = await parse_catalog_page(
            body,
            f"{parsed.scheme}://{parsed.netloc}",
            source.label,
            fetcher.fetch,
            detail_fetch_cap=config.bandcamp.detail_fetch_cap,
            stagger_seconds=config.bandcamp.detail_fetch_stagger_seconds,
        )
    else:
        candidates = parse_feed(body, source.label, captured_at)

    parsed_count = len(candidates)
    if not source.trusted:
        candidates = [c for c in candidates if relevance.accepts(c)]

    logger.info("Found %d items from %s, kept %d", parsed_count, source.url, len(candidates))
    return SourceResult(source=source, candidates=candidates, parsed=parsed_count)


async def harvest(
    config: Config,
    *,
    fetcher: Optional[FeedFetcher] = None,
    captured_at: Optional[datetime] = None,
) -> HarvestResult:
    """Fetch every source concurrently and merge the results.

    A failing source contributes no candidates and an error entry; it
    never affects the other sources.
    """
    captured_at = captured_at or datetime.now(timezone.utc)
    sources = build_sources(config)
    if not sources:
        logger.warning("No sources configured")

    relevance = RelevanceFilter(config.subject)

    if fetcher is None:
        async with FeedFetcher(config.http) as owned_fetcher:
            source_results = await _gather_sources(sources, owned_fetcher, config, relevance, captured_at)
    else:
        source_results = await _gather_sources(sources, fetcher, config, relevance, captured_at)

    candidates = [c for result in source_results for c in result.candidates]
    records = merge(candidates, config.output.max_items)

    failed = [r.source.url for r in source_results if not r.ok]
    if failed:
        logger.warning("Failed sources: %s", failed)
    logger.info("Total candidates collected: %d from %d sources", len(candidates), len(sources))

    return HarvestResult(captured_at=captured_at, records=records, source_results=source_results)


async def _gather_sources(
    sources: list[SourceSpec],
    fetcher: FeedFetcher,
    config: Config,
    relevance: RelevanceFilter,
    captured_at: datetime,
) -> list[SourceResult]:
    outcomes = await asyncio.gather(
        *(fetch_source(s, fetcher, config, relevance, captured_at) for s in sources),
        return_exceptions=True,
    )

    results = []
    for source, outcome in zip(sources, outcomes):
        if isinstance(outcome, Exception):
            logger.error("Failed to process %s (%s): %s", source.label, source.url, outcome)
            results.append(SourceResult(source=source, error=str(outcome) or type(outcome).__name__))
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            results.append(outcome)
    return results
