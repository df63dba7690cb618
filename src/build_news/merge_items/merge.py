"""Deduplicate, rank and truncate candidates into final records."""

import logging
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

from build_news.models import CandidateItem, NewsRecord
from common.hashing import generate_record_id

logger = logging.getLogger(__name__)

TRACKING_PARAM_PREFIXES = ("utm_",)
TRACKING_PARAM_NAMES = {
    "fbclid",
    "gclid",
    "dclid",
    "igshid",
    "mc_cid",
    "mc_eid",
    "yclid",
    "gbraid",
    "wbraid",
}
DEFAULT_PORTS = {"http": 80, "https": 443}


def _is_tracking_param(name: str) -> bool:
    lower = name.lower()
    return lower.startswith(TRACKING_PARAM_PREFIXES) or lower in TRACKING_PARAM_NAMES


def normalize_url(url: str) -> str:
    """Canonical form of a URL for identity comparisons."""
    url = (url or "").strip()
    if not url:
        return ""
    try:
        parsed = urlparse(url)
        port = parsed.port
    except ValueError:
        return url

    scheme = parsed.scheme.lower()
    host = (parsed.hostname or "").lower()
    netloc = host
    if port and DEFAULT_PORTS.get(scheme) != port:
        netloc = f"{host}:{port}"
    if not netloc:
        netloc = parsed.netloc.lower()

    query = [(k, v) for k, v in parse_qsl(parsed.query, keep_blank_values=True) if not _is_tracking_param(k)]
    return urlunparse((
        scheme,
        netloc,
        parsed.path.rstrip("/"),
        parsed.params,
        urlencode(sorted(query)),
        "",
    ))


def dedup_key(item: CandidateItem) -> str:
    """Normalized URL, or source label + title when there is no URL."""
    normalized = normalize_url(item.url)
    if normalized:
        return normalized.lower()
    return f"{item.source_label}|{item.title}".lower()


def dedupe(items: list[CandidateItem]) -> list[CandidateItem]:
    """Drop later duplicates; the first candidate seen for a key wins."""
    seen = set()
    out = []
    for item in items:
        key = dedup_key(item)
        if key in seen:
            continue
        seen.add(key)
        out.append(item)
    return out


def rank(items: list[CandidateItem]) -> list[CandidateItem]:
    """Newest first; undated items after all dated ones, in input order."""
    dated = [item for item in items if item.published_at is not None]
    undated = [item for item in items if item.published_at is None]
    dated.sort(key=lambda item: item.published_at, reverse=True)
    return dated + undated


def to_record(item: CandidateItem) -> NewsRecord:
    return NewsRecord(
        id=generate_record_id(normalize_url(item.url) or dedup_key(item)),
        title=item.title,
        url=item.url,
        published_at=item.published_at,
        excerpt=item.excerpt or "",
        image_url=item.image_url or "",
        source_label=item.source_label,
    )


def merge(items: list[CandidateItem], max_items: int) -> list[NewsRecord]:
    """Deduplicate, sort and truncate candidates into NewsRecords."""
    unique = dedupe(items)
    ranked = rank(unique)
    if max_items > 0:
        ranked = ranked[:max_items]
    logger.info(
        "Merged %d candidates into %d unique, kept %d",
        len(items), len(unique), len(ranked),
    )
    return [to_record(item) for item in ranked]
