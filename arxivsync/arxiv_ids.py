"""arXiv identifier extraction from bookmark URLs.

Handles both identifier schemes:

- new style: ``2301.12345`` / ``2301.12345v2``
- legacy: ``hep-th/9901001`` / ``math.GT/0309136v1``

The canonical ID is the identifier with any ``vN`` suffix and legacy subject
class stripped (``math.GT/0309136v1`` -> ``math/0309136``).
"""

import re
from typing import Iterable, List
from urllib.parse import urlparse

from arxivsync.errors import ArxivError, ErrorKind
from arxivsync.result import Ok, Result, err, ok

# Permissive: anything shaped like an identifier after /abs/ or /pdf/
_URL_RE = re.compile(
    r"arxiv\.org/(?:abs|pdf)/(\d{4}\.\d{4,5}|[A-Za-z-]+(?:\.[A-Za-z]{2})?/\d{7})(v\d+)?"
)

_NEW_ID_RE = re.compile(r"^\d{4}\.\d{4,5}(v\d+)?$")
_LEGACY_ID_RE = re.compile(r"^[a-z-]+(\.[A-Z]{2})?/\d{7}(v\d+)?$")
_VERSION_RE = re.compile(r"v\d+$")
_SUBJECT_CLASS_RE = re.compile(r"^([a-z-]+)\.[A-Z]{2}/")

# Unanchored ID pattern for use inside other regexes (feed <id>, reading list links)
ID_PATTERN = r"\d{4}\.\d{4,5}|[a-z-]+(?:\.[A-Z]{2})?/\d{7}"


def strip_version(arxiv_id: str) -> str:
    return _VERSION_RE.sub("", arxiv_id)


def canonical_id(arxiv_id: str) -> str:
    """Drop the version and any legacy subject class.

    arXiv files ``math.GT/0309136`` under ``math/0309136``, which is the form
    its feed reports.
    """
    return _SUBJECT_CLASS_RE.sub(r"\1/", strip_version(arxiv_id))


def is_valid_arxiv_id(arxiv_id: str) -> bool:
    return bool(_NEW_ID_RE.match(arxiv_id) or _LEGACY_ID_RE.match(arxiv_id))


def abs_url(arxiv_id: str) -> str:
    return f"https://arxiv.org/abs/{arxiv_id}"


def pdf_url(arxiv_id: str) -> str:
    return f"https://arxiv.org/pdf/{arxiv_id}.pdf"


def _is_valid_url(url: str) -> bool:
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return bool(parsed.scheme and parsed.netloc)


def is_arxiv_url(url: str) -> bool:
    """Cheap pre-filter: does the URL point at an abstract or PDF page?"""
    return "arxiv.org/abs/" in url or "arxiv.org/pdf/" in url


def extract_id_from_url(url: str) -> "Result[str, ArxivError]":
    """Return the canonical arXiv ID referenced by *url*.

    INVALID_URL when *url* is not an absolute URL or has no
    ``arxiv.org/(abs|pdf)/<id>`` segment; INVALID_ID when the segment is
    there but the identifier is malformed (e.g. ``HEP-TH/9901001``).
    """
    if not _is_valid_url(url):
        return err(ArxivError(ErrorKind.INVALID_URL, url=url))

    m = _URL_RE.search(url)
    if not m:
        return err(ArxivError(ErrorKind.INVALID_URL, url=url))

    arxiv_id = m.group(1)
    if not is_valid_arxiv_id(arxiv_id):
        return err(ArxivError(ErrorKind.INVALID_ID, url=url, arxiv_id=arxiv_id))
    return ok(canonical_id(arxiv_id))


def extract_ids_from_urls(urls: Iterable[str]) -> List[str]:
    """Canonical IDs for *urls*, first-seen order, failures dropped."""
    ids: List[str] = []
    seen = set()
    for url in urls:
        result = extract_id_from_url(url)
        if isinstance(result, Ok) and result.value not in seen:
            seen.add(result.value)
            ids.append(result.value)
    return ids
