"""arXiv export API client.

Fetches paper metadata by ID list and parses the returned Atom feed. arXiv
asks for at most one request every three seconds; ``RateLimiter`` enforces
that by sleeping, never by dropping requests.
"""

import logging
import re
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence
from urllib.parse import urlencode
from xml.etree import ElementTree as ET

from arxivsync import config
from arxivsync.arxiv_ids import ID_PATTERN, canonical_id, pdf_url
from arxivsync.errors import DEFAULT_RETRY_AFTER, ArxivError, ErrorKind
from arxivsync.http import HttpClient, TransportError
from arxivsync.result import Err, Result, and_then, err, ok
from arxivsync.retry import DEFAULT_RETRY_OPTIONS, RetryOptions, retry

log = logging.getLogger(__name__)

_BASE = "https://export.arxiv.org/api/query"

ATOM_NS = "{http://www.w3.org/2005/Atom}"
ARXIV_NS = "{http://arxiv.org/schemas/atom}"

_ENTRY_ID_RE = re.compile(rf"({ID_PATTERN})(v\d+)?")
_WS_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class Paper:
    arxiv_id: str
    title: str
    authors: List[str] = field(default_factory=list)
    abstract: str = ""
    published_date: Optional[datetime] = None
    pdf_url: str = ""
    categories: List[str] = field(default_factory=list)
    primary_category: str = "unknown"


class RateLimiter:
    """Minimum spacing between requests, based on the last request time."""

    def __init__(self, min_interval: float) -> None:
        self.min_interval = min_interval
        self._last_request: Optional[float] = None

    def throttle(self) -> None:
        if self._last_request is not None:
            elapsed = time.monotonic() - self._last_request
            if elapsed < self.min_interval:
                wait = self.min_interval - elapsed
                log.debug("Rate limiting arXiv request, sleeping %.2fs", wait)
                time.sleep(wait)
        self._last_request = time.monotonic()


class ArxivClient:
    def __init__(
        self,
        http: Optional[HttpClient] = None,
        rate_limiter: Optional[RateLimiter] = None,
        max_results: Optional[int] = None,
    ) -> None:
        self.http = http or HttpClient()
        self.rate_limiter = rate_limiter or RateLimiter(config.ARXIV_RATE_LIMIT_SECONDS)
        self.max_results = max_results or config.ARXIV_MAX_RESULTS

    def fetch_by_ids(self, ids: Sequence[str]) -> "Result[str, ArxivError]":
        """Fetch the Atom feed for *ids* in a single request."""
        if not ids:
            return ok("")

        self.rate_limiter.throttle()

        # Commas and slashes stay literal so legacy IDs survive
        query = urlencode(
            {"id_list": ",".join(ids), "max_results": str(self.max_results)},
            safe=",/",
        )
        url = f"{_BASE}?{query}"
        try:
            resp = self.http.request(url, method="GET")
        except TransportError as exc:
            return err(ArxivError(ErrorKind.NETWORK_ERROR, str(exc)))
        except Exception as exc:
            log.exception("Unexpected error querying arXiv")
            return err(ArxivError(ErrorKind.UNKNOWN_ERROR, str(exc)))

        if resp.status == 200:
            return ok(resp.text)
        if resp.status == 429:
            try:
                wait = int(resp.header("retry-after"))
            except ValueError:
                wait = DEFAULT_RETRY_AFTER
            return err(ArxivError(ErrorKind.RATE_LIMITED, retry_after=wait))
        return err(ArxivError(
            ErrorKind.NETWORK_ERROR, f"ArXiv API returned status {resp.status}",
        ))


# -- Feed parsing --


def _clean(text: Optional[str]) -> str:
    return _WS_RE.sub(" ", text or "").strip()


def _parse_date(value: str) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _find_pdf_link(entry: ET.Element, arxiv_id: str) -> str:
    for link in entry.findall(f"{ATOM_NS}link"):
        if link.get("title") == "pdf" or link.get("type") == "application/pdf":
            href = link.get("href", "")
            if href:
                return href
    return pdf_url(arxiv_id)


def _parse_entry(entry: ET.Element) -> Optional[Paper]:
    """Build a Paper from one <entry>, or None if it has no usable ID."""
    id_text = _clean(entry.findtext(f"{ATOM_NS}id"))
    # arXiv reports bad IDs as entries under /api/errors
    m = None if "/api/errors" in id_text else _ENTRY_ID_RE.search(id_text)
    if not m:
        log.debug("Skipping feed entry without an arXiv ID")
        return None
    arxiv_id = canonical_id(m.group(1))

    authors = [
        name for name in (
            _clean(a.findtext(f"{ATOM_NS}name")) for a in entry.findall(f"{ATOM_NS}author")
        ) if name
    ]
    categories = [
        term for term in (c.get("term", "") for c in entry.findall(f"{ATOM_NS}category"))
        if term
    ]
    primary = entry.find(f"{ARXIV_NS}primary_category")
    primary_term = primary.get("term", "") if primary is not None else ""

    return Paper(
        arxiv_id=arxiv_id,
        title=_clean(entry.findtext(f"{ATOM_NS}title")) or "Untitled",
        authors=authors,
        abstract=_clean(entry.findtext(f"{ATOM_NS}summary")) or "No abstract available",
        published_date=_parse_date(_clean(entry.findtext(f"{ATOM_NS}published"))),
        pdf_url=_find_pdf_link(entry, arxiv_id),
        categories=categories,
        primary_category=primary_term or (categories[0] if categories else "unknown"),
    )


def parse_feed(xml_text: str) -> "Result[List[Paper], ArxivError]":
    """Parse an arXiv Atom feed into papers.

    A malformed document fails the whole batch with PARSE_ERROR; entries that
    cannot be parsed individually are dropped.
    """
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as exc:
        return err(ArxivError(ErrorKind.PARSE_ERROR, f"Failed to parse XML response: {exc}"))

    papers = []
    for entry in root.iter(f"{ATOM_NS}entry"):
        try:
            paper = _parse_entry(entry)
        except Exception:
            log.warning("Dropping unparseable arXiv feed entry", exc_info=True)
            continue
        if paper is not None:
            papers.append(paper)
    return ok(papers)


class ArxivService:
    def __init__(
        self,
        client: ArxivClient,
        retry_options: RetryOptions = DEFAULT_RETRY_OPTIONS,
    ) -> None:
        self.client = client
        self.retry_options = retry_options

    def _fetch_batch(self, ids: Sequence[str]) -> "Result[List[Paper], ArxivError]":
        feed = retry(
            lambda: self.client.fetch_by_ids(ids),
            self.retry_options,
            should_retry=lambda e: e.kind == ErrorKind.NETWORK_ERROR,
        )
        return and_then(feed, parse_feed)

    def fetch_papers(self, ids: Sequence[str]) -> "Result[List[Paper], ArxivError]":
        """Fetch metadata for *ids*. Any failed request fails the whole call."""
        if not ids:
            return ok([])

        batch_size = self.client.max_results
        papers: List[Paper] = []
        for start in range(0, len(ids), batch_size):
            batch = list(ids[start:start + batch_size])
            result = self._fetch_batch(batch)
            if isinstance(result, Err):
                log.warning("arXiv fetch failed: %s", result.error.describe())
                return result
            papers.extend(result.value)

        log.info("Fetched %d paper(s) from arXiv for %d ID(s)", len(papers), len(ids))
        return ok(papers)

    def fetch_paper(self, arxiv_id: str) -> "Result[Paper, ArxivError]":
        result = self.fetch_papers([arxiv_id])
        if isinstance(result, Err):
            return result
        if not result.value:
            return err(ArxivError(ErrorKind.NOT_FOUND, arxiv_id=arxiv_id))
        return ok(result.value[0])
