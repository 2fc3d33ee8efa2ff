"""Sync pipeline: Instapaper bookmarks -> arXiv metadata -> vault notes.

One run is a single linear pass:

  1. fetch bookmarks (failure aborts the run)
  2. extract canonical arXiv IDs from bookmark URLs
  3. fetch paper metadata (failure aborts the run)
  4. create one note per paper, counting created / skipped / failed
  5. add successfully processed papers to the reading list
  6. archive the matching bookmarks in the background (optional)

Per-paper and reading list failures are collected rather than aborting, so
every paper is attempted before the outcome is classified. Re-running with
the same bookmarks only produces skips.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from arxivsync.arxiv_client import ArxivService, Paper
from arxivsync.arxiv_ids import extract_id_from_url, extract_ids_from_urls, is_arxiv_url
from arxivsync.errors import ServiceError, SyncError
from arxivsync.instapaper import Bookmark, InstapaperService
from arxivsync.obsidian import NoteCreator, ReadingList
from arxivsync.result import Err, Ok, Result, err, ok

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncStats:
    successful: int = 0
    skipped: int = 0
    failed: int = 0


class SyncState:
    """Run-scoped counters."""

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.successful = 0
        self.skipped = 0
        self.failed = 0

    def increment_successful(self) -> None:
        self.successful += 1

    def increment_skipped(self) -> None:
        self.skipped += 1

    def increment_failed(self) -> None:
        self.failed += 1

    @property
    def stats(self) -> SyncStats:
        return SyncStats(self.successful, self.skipped, self.failed)


@dataclass(frozen=True)
class ArchiveTask:
    bookmark_id: str
    future: "Future[Result[None, ServiceError]]"


@dataclass
class ArchiveReport:
    archived: List[str] = field(default_factory=list)
    failed: List[Tuple[str, str]] = field(default_factory=list)
    pending: List[str] = field(default_factory=list)


class SyncOrchestrator:
    def __init__(
        self,
        bookmarks: InstapaperService,
        papers: ArxivService,
        notes: NoteCreator,
        reading_list: ReadingList,
        archive_in_instapaper: bool = True,
    ) -> None:
        self.bookmarks = bookmarks
        self.papers = papers
        self.notes = notes
        self.reading_list = reading_list
        self.archive_in_instapaper = archive_in_instapaper
        self.state = SyncState()
        self.archive_tasks: List[ArchiveTask] = []
        self._executor: Optional[ThreadPoolExecutor] = None

    # -- Pipeline steps --

    def _process_papers(
        self, papers: Sequence[Paper],
    ) -> Tuple[List[Paper], List[ServiceError]]:
        processed: List[Paper] = []
        errors: List[ServiceError] = []
        for paper in papers:
            result = self.notes.create_note(paper)
            if isinstance(result, Ok):
                if result.value.created:
                    self.state.increment_successful()
                else:
                    self.state.increment_skipped()
                processed.append(paper)
            else:
                self.state.increment_failed()
                log.warning(
                    "Failed to create note for %s: %s",
                    paper.arxiv_id, result.error.describe(),
                )
                errors.append(result.error)
        return processed, errors

    def _archive_bookmarks(
        self, bookmarks: Sequence[Bookmark], processed_ids: Sequence[str],
    ) -> None:
        """Queue archive calls for bookmarks whose paper was processed."""
        wanted = set(processed_ids)
        for bookmark in bookmarks:
            if not is_arxiv_url(bookmark.url):
                continue
            result = extract_id_from_url(bookmark.url)
            if isinstance(result, Ok) and result.value in wanted:
                if self._executor is None:
                    self._executor = ThreadPoolExecutor(
                        max_workers=1, thread_name_prefix="archive",
                    )
                future = self._executor.submit(
                    self.bookmarks.archive_bookmark, bookmark.bookmark_id,
                )
                self.archive_tasks.append(ArchiveTask(bookmark.bookmark_id, future))
        if self.archive_tasks:
            log.info("Archiving %d bookmark(s) in the background", len(self.archive_tasks))

    def sync(self) -> "Result[SyncStats, SyncError]":
        self.state.reset()
        if self.archive_tasks:
            log.warning(
                "%d archive request(s) from a previous run were not collected",
                len(self.archive_tasks),
            )
            self.wait_for_archives(timeout=0)

        log.info("Step 1: Fetching Instapaper bookmarks...")
        bookmarks_result = self.bookmarks.fetch_bookmarks()
        if isinstance(bookmarks_result, Err):
            log.error("Could not fetch bookmarks: %s", bookmarks_result.error.describe())
            return err(SyncError.complete(bookmarks_result.error))
        bookmarks = bookmarks_result.value

        arxiv_ids = extract_ids_from_urls(b.url for b in bookmarks if is_arxiv_url(b.url))
        if not arxiv_ids:
            log.info("No arXiv bookmarks found")
            return ok(self.state.stats)
        log.info("Found %d arXiv paper(s) in %d bookmark(s)", len(arxiv_ids), len(bookmarks))

        log.info("Step 2: Fetching paper metadata from arXiv...")
        papers_result = self.papers.fetch_papers(arxiv_ids)
        if isinstance(papers_result, Err):
            log.error("Could not fetch papers: %s", papers_result.error.describe())
            return err(SyncError.complete(papers_result.error))

        log.info("Step 3: Creating notes...")
        processed, errors = self._process_papers(papers_result.value)

        if processed:
            list_result = self.reading_list.add_papers(processed)
            if isinstance(list_result, Err):
                log.warning("Reading list update failed: %s", list_result.error.describe())
                errors.append(list_result.error)

        if self.archive_in_instapaper and processed:
            self._archive_bookmarks(bookmarks, [p.arxiv_id for p in processed])

        stats = self.state.stats
        log.info(
            "Done: %d created, %d skipped, %d failed",
            stats.successful, stats.skipped, stats.failed,
        )
        if errors:
            return err(SyncError.partial(stats.successful, stats.failed, errors))
        return ok(stats)

    # -- Background archival --

    def wait_for_archives(self, timeout: Optional[float] = None) -> ArchiveReport:
        """Block until queued archive calls finish (or *timeout* passes).

        Finished tasks are reported and dropped. Tasks still running stay
        queued and show up in the next report.
        """
        report = ArchiveReport()
        if not self.archive_tasks:
            return report

        wait([t.future for t in self.archive_tasks], timeout=timeout)
        still_pending = []
        for task in self.archive_tasks:
            if not task.future.done():
                report.pending.append(task.bookmark_id)
                still_pending.append(task)
                continue
            exc = task.future.exception()
            if exc is not None:
                report.failed.append((task.bookmark_id, str(exc)))
                continue
            result = task.future.result()
            if isinstance(result, Ok):
                report.archived.append(task.bookmark_id)
            else:
                report.failed.append((task.bookmark_id, result.error.describe()))
        self.archive_tasks = still_pending

        for bookmark_id, reason in report.failed:
            log.warning("Could not archive bookmark %s: %s", bookmark_id, reason)
        if report.pending:
            log.warning("%d archive request(s) still pending", len(report.pending))
        log.info("Archived %d bookmark(s)", len(report.archived))
        return report

    def close(self) -> None:
        if self.archive_tasks:
            self.wait_for_archives()
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
