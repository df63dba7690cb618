"""Relevance filtering for untrusted sources."""

from __future__ import annotations

import logging
import re
from urllib.parse import urlparse

from build_news.config import SubjectConfig
from build_news.models import CandidateItem

logger = logging.getLogger(__name__)


def _whole_word(term: str) -> re.Pattern:
    return re.compile(rf"\b{re.escape(term)}\b", re.IGNORECASE)


def item_host(url: str) -> str:
    """Lower-cased host of ``url`` without a leading www."""
    try:
        host = (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""
    return host[4:] if host.startswith("www.") else host


class RelevanceFilter:
    """Decide whether a candidate is about the tracked subject.

    Rules run in order on "title excerpt", case-insensitive:
      1. reject unless the subject name appears as a whole word
      2. reject if a homograph appears as a whole word
      3. reject if any block term appears as a substring
      4. accept if any context term appears as a substring
      5. accept if the item's host, or its publisher's host, is a
         trusted publication
      6. reject
    """

    def __init__(self, subject: SubjectConfig) -> None:
        self.subject_re = _whole_word(subject.name)
        self.homograph_res = [_whole_word(h) for h in subject.homographs if h]
        self.block_terms = [t.lower() for t in subject.block_terms if t]
        self.context_terms = [t.lower() for t in subject.context_terms if t]
        self.trusted_hosts = {h.lower().removeprefix("www.") for h in subject.trusted_hosts if h}

    def check(self, item: CandidateItem) -> tuple[bool, str]:
        """Return (accepted, reason)."""
        text = f"{item.title} {item.excerpt}"
        lowered = text.lower()

        if not self.subject_re.search(text):
            return False, "no subject mention"
        for pattern in self.homograph_res:
            if pattern.search(text):
                return False, f"homograph {pattern.pattern!r}"
        for term in self.block_terms:
            if term in lowered:
                return False, f"block term {term!r}"
        for term in self.context_terms:
            if term in lowered:
                return True, f"context term {term!r}"
        if self._is_trusted_host(item_host(item.url)) or self._is_trusted_host(item_host(item.origin_url)):
            return True, "trusted host"
        return False, "no context"

    def accepts(self, item: CandidateItem) -> bool:
        accepted, reason = self.check(item)
        if not accepted:
            logger.debug("Rejected %r from %s: %s", item.title, item.source_label, reason)
        return accepted

    def _is_trusted_host(self, host: str) -> bool:
        if not host:
            return False
        return any(host == trusted or host.endswith("." + trusted) for trusted in self.trusted_hosts)
