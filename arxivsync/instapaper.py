"""Bookmark source: Instapaper bookmarks as typed values."""

import json
import logging
from dataclasses import dataclass
from typing import Any, List, Optional

from arxivsync.errors import ErrorKind, InstapaperError
from arxivsync.instapaper_client import InstapaperClient
from arxivsync.result import Ok, Result, and_then, err, map_result, ok

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Bookmark:
    bookmark_id: str
    url: str
    title: str = ""
    description: str = ""
    time: int = 0


def _parse_bookmark(item: Any) -> Optional[Bookmark]:
    """Convert one list entry, or None if it is not a usable bookmark."""
    if not isinstance(item, dict):
        return None
    if "type" in item and item["type"] != "bookmark":
        return None
    if item.get("bookmark_id") is None or not isinstance(item.get("url"), str):
        return None
    try:
        ts = int(item.get("time") or 0)
    except (TypeError, ValueError):
        ts = 0
    return Bookmark(
        bookmark_id=str(item["bookmark_id"]),
        url=item["url"],
        title=item.get("title") or "",
        description=item.get("description") or "",
        time=ts,
    )


def decode_bookmarks(text: str) -> "Result[List[Bookmark], InstapaperError]":
    """Decode a ``bookmarks/list`` body.

    Accepts two shapes: a bare array of typed entries (user, meta, bookmark,
    ...) or an object with a ``bookmarks`` array. Anything else is an
    INVALID_RESPONSE.
    """
    try:
        data = json.loads(text)
    except ValueError as exc:
        return err(InstapaperError(
            ErrorKind.INVALID_RESPONSE, f"Failed to parse response: {exc}",
        ))

    if isinstance(data, list):
        entries = data
    elif isinstance(data, dict) and isinstance(data.get("bookmarks"), list):
        entries = data["bookmarks"]
    else:
        return err(InstapaperError(
            ErrorKind.INVALID_RESPONSE,
            f"Unrecognized bookmark list shape: {type(data).__name__}",
        ))

    bookmarks = []
    for item in entries:
        bookmark = _parse_bookmark(item)
        if bookmark is not None:
            bookmarks.append(bookmark)
    return ok(bookmarks)


class InstapaperService:
    def __init__(self, client: InstapaperClient) -> None:
        self.client = client

    def authenticate(self) -> "Result[None, InstapaperError]":
        """Verify credentials. No data is returned on success."""
        return map_result(self.client.verify_credentials(), lambda _: None)

    def fetch_bookmarks(self) -> "Result[List[Bookmark], InstapaperError]":
        decoded = and_then(self.client.fetch_bookmarks(), decode_bookmarks)
        if isinstance(decoded, Ok):
            log.info("Fetched %d bookmark(s) from Instapaper", len(decoded.value))
        return decoded

    def archive_bookmark(self, bookmark_id: str) -> "Result[None, InstapaperError]":
        return self.client.archive_bookmark(bookmark_id)
