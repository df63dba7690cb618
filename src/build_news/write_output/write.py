"""Persist the final record set and the diagnostic snapshot."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path

from build_news.models import HarvestResult, NewsRecord
from common.datetime import to_iso_utc
from common.local_io import write_json_local

logger = logging.getLogger(__name__)


@dataclass
class SourceStats:
    urls: list[str] = field(default_factory=list)
    parsed: int = 0
    kept: int = 0
    errors: list[str] = field(default_factory=list)


def records_payload(records: list[NewsRecord], captured_at: datetime) -> list[dict]:
    return [record.to_dict(captured_at) for record in records]


def write_records(records: list[NewsRecord], path: str | Path, captured_at: datetime) -> Path:
    """Write the output JSON array, replacing the previous file.

    Raises:
        OSError: If the file can't be written.
    """
    filepath = write_json_local(records_payload(records, captured_at), path)
    logger.info("Wrote %s (%d items)", filepath, len(records))
    return filepath


def build_diagnostics(result: HarvestResult, sample_size: int) -> dict:
    stats: dict[str, SourceStats] = defaultdict(SourceStats)
    for source_result in result.source_results:
        entry = stats[source_result.source.label]
        entry.urls.append(source_result.source.url)
        entry.parsed += source_result.parsed
        entry.kept += len(source_result.candidates)
        if source_result.error:
            entry.errors.append(source_result.error)

    return {
        "capturedAt": to_iso_utc(result.captured_at),
        "sources": {label: asdict(s) for label, s in stats.items()},
        "merged": sum(len(r.candidates) for r in result.source_results),
        "written": len(result.records),
        "sample": records_payload(result.records[:max(sample_size, 0)], result.captured_at),
    }


def write_diagnostics(result: HarvestResult, path: str | Path, sample_size: int = 5) -> Path | None:
    """Best-effort write of the diagnostic snapshot; never raises on I/O errors."""
    if not path:
        return None
    try:
        filepath = write_json_local(build_diagnostics(result, sample_size), path)
    except OSError as e:
        logger.warning("Failed to write diagnostics to %s: %s", path, e)
        return None
    logger.info("Wrote diagnostics to %s", filepath)
    return filepath


def write_empty_fallback(path: str | Path) -> bool:
    """Try to leave an empty array at ``path`` after a failed write."""
    try:
        write_json_local([], path)
    except OSError as e:
        logger.error("Fallback write to %s failed too: %s", path, e)
        return False
    logger.warning("Wrote empty fallback output to %s", path)
    return True
