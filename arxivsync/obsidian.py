"""Note output into the vault.

Creates one markdown note per paper with YAML frontmatter, and maintains the
reading list: a single markdown table indexing every synced paper.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import List, Sequence, Set

from arxivsync.arxiv_client import Paper
from arxivsync.arxiv_ids import ID_PATTERN, abs_url, canonical_id
from arxivsync.errors import ErrorKind, VaultError
from arxivsync.result import Err, Result, ok
from arxivsync.vault import Vault

log = logging.getLogger(__name__)

MAX_FILENAME_LENGTH = 200
NOTE_EXTENSION = ".md"
UNTITLED = "Untitled Paper"

_ILLEGAL_CHARS_RE = re.compile(r'[\\/:*?"<>|]')
_WS_RE = re.compile(r"\s+")

_LAST_UPDATED_RE = re.compile(r"Last updated: .*")
_TABLE_HEADER_RE = re.compile(
    r"^\|[ \t]*Paper[ \t]*\|.*\|[ \t]*\n\|[ \t]*-+[ \t]*\|.*\|[ \t]*\n",
    re.MULTILINE,
)
_ARXIV_LINK_RE = re.compile(
    rf"\[((?:{ID_PATTERN})(?:v\d+)?)\]\(https://arxiv\.org/abs/(?:{ID_PATTERN})(?:v\d+)?\)"
)
_FRONTMATTER_ID_RE = re.compile(r"^arxiv_id:\s*\"?([^\"\n]+?)\"?\s*$", re.MULTILINE)

_TABLE_HEADER = "| Paper | ArXiv | Read | Added |\n| --- | --- | --- | --- |"


def sanitize_filename(name: str, max_length: int = MAX_FILENAME_LENGTH) -> str:
    """Strip filesystem-illegal characters, collapse whitespace, cap length."""
    result = _ILLEGAL_CHARS_RE.sub("", name)
    result = _WS_RE.sub(" ", result).strip()
    return result[:max_length].strip()


def filename_from_title(title: str) -> str:
    """Note filename (without extension) for a paper title.

    Shared by note creation and reading list rows, which link to notes by
    this name.
    """
    return sanitize_filename(title) or UNTITLED


def format_date(dt: datetime) -> str:
    return dt.strftime("%d/%m/%Y")


def format_datetime(dt: datetime) -> str:
    return dt.strftime("%d/%m/%Y %H:%M")


def _escape_yaml(value: str) -> str:
    """Quote a YAML scalar when it contains characters YAML would misread."""
    if ":" in value or "#" in value or "[" in value:
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return value


# -- Notes --


@dataclass(frozen=True)
class NoteFrontmatter:
    title: str
    authors: str
    arxiv_id: str
    pdf_link: str
    date_added: str
    tags: List[str]

    @classmethod
    def from_paper(cls, paper: Paper, today: datetime) -> "NoteFrontmatter":
        category_tags = [
            part.strip().lower().replace(".", "-")
            for cat in paper.categories
            for part in cat.split(";")
            if part.strip()
        ]
        return cls(
            title=paper.title,
            authors=", ".join(paper.authors),
            arxiv_id=paper.arxiv_id,
            pdf_link=paper.pdf_url,
            date_added=format_date(today),
            tags=["paper", "arxiv"] + category_tags,
        )

    def to_yaml(self) -> str:
        tags_yaml = "\n".join(f"  - {t}" for t in self.tags)
        return f"""\
---
title: {_escape_yaml(self.title)}
authors: {_escape_yaml(self.authors)}
arxiv_id: {self.arxiv_id}
pdf_link: {self.pdf_link}
date_added: {self.date_added}
tags:
{tags_yaml}
---"""


@dataclass(frozen=True)
class NoteResult:
    filepath: str
    created: bool


def render_note(paper: Paper, frontmatter: NoteFrontmatter) -> str:
    return f"""\
{frontmatter.to_yaml()}

# {paper.title}

[ArXiv]({abs_url(paper.arxiv_id)}) | [PDF]({paper.pdf_url})

## Abstract

{paper.abstract}

## Notes

"""


class NoteCreator:
    def __init__(self, vault: Vault, papers_folder: str) -> None:
        self.vault = vault
        self.papers_folder = papers_folder

    def note_path(self, paper: Paper) -> str:
        return f"{self.papers_folder}/{filename_from_title(paper.title)}{NOTE_EXTENSION}"

    def _warn_on_collision(self, filepath: str, paper: Paper) -> None:
        existing = self.vault.read_file(filepath)
        if isinstance(existing, Err):
            return
        m = _FRONTMATTER_ID_RE.search(existing.value)
        if m and canonical_id(m.group(1).strip()) != paper.arxiv_id:
            log.warning(
                "Title collision: %s already holds arXiv %s, not creating note for %s",
                filepath, m.group(1).strip(), paper.arxiv_id,
            )

    def create_note(self, paper: Paper) -> "Result[NoteResult, VaultError]":
        """Create the note for *paper* unless a note with its filename exists.

        Returns NoteResult(created=False) for an existing note; the file is
        left untouched.
        """
        folder = self.vault.ensure_folder(self.papers_folder)
        if isinstance(folder, Err):
            return folder

        filepath = self.note_path(paper)
        if self.vault.file_exists(filepath):
            log.info("Note already exists, skipping: %s", filepath)
            self._warn_on_collision(filepath, paper)
            return ok(NoteResult(filepath=filepath, created=False))

        frontmatter = NoteFrontmatter.from_paper(paper, datetime.now())
        created = self.vault.create_file(filepath, render_note(paper, frontmatter))
        if isinstance(created, Err):
            return created

        log.info("Created note: %s", filepath)
        return ok(NoteResult(filepath=filepath, created=True))


# -- Reading list --


def existing_arxiv_ids(content: str) -> Set[str]:
    """Canonical IDs already linked from the reading list."""
    return {canonical_id(m.group(1)) for m in _ARXIV_LINK_RE.finditer(content)}


def table_row(paper: Paper, today: datetime) -> str:
    filename = filename_from_title(paper.title)
    return (
        f"| [[{filename}]] | [{paper.arxiv_id}]({abs_url(paper.arxiv_id)}) "
        f"| [ ] | {format_date(today)} |"
    )


def _unique_papers(papers: Sequence[Paper], seen: Set[str]) -> List[Paper]:
    result = []
    for paper in papers:
        key = canonical_id(paper.arxiv_id)
        if key not in seen:
            seen.add(key)
            result.append(paper)
    return result


class ReadingList:
    def __init__(self, vault: Vault, papers_folder: str, filename: str) -> None:
        self.vault = vault
        self.papers_folder = papers_folder
        self.filename = filename

    @property
    def path(self) -> str:
        return f"{self.papers_folder}/{self.filename}"

    def render_new(self, papers: Sequence[Paper], now: datetime) -> str:
        rows = "\n".join(table_row(p, now) for p in _unique_papers(papers, set()))
        return (
            f"# Reading List\n\nLast updated: {format_datetime(now)}\n\n"
            f"{_TABLE_HEADER}\n{rows}\n"
        )

    def merge(self, existing: str, papers: Sequence[Paper], now: datetime) -> str:
        """Splice rows for unseen papers into an existing reading list.

        New rows go directly under the table header, newest first. If no
        header is found the rows are appended at the end. With nothing new,
        only the Last updated line changes.
        """
        stamp = f"Last updated: {format_datetime(now)}"
        updated = _LAST_UPDATED_RE.sub(lambda _: stamp, existing, count=1)

        new_papers = _unique_papers(papers, existing_arxiv_ids(existing))
        if not new_papers:
            return updated

        new_rows = "\n".join(table_row(p, now) for p in new_papers)
        m = _TABLE_HEADER_RE.search(updated)
        if m:
            pos = m.end()
            return f"{updated[:pos]}{new_rows}\n{updated[pos:]}"

        log.warning("Reading list table header not found, appending rows at end")
        body = updated.rstrip("\n")
        return f"{body}\n{new_rows}\n"

    def add_papers(self, papers: Sequence[Paper]) -> "Result[int, VaultError]":
        """Add rows for papers not yet listed. Returns the number added."""
        if not papers:
            return ok(0)

        folder = self.vault.ensure_folder(self.papers_folder)
        if isinstance(folder, Err):
            return folder

        now = datetime.now()
        existing = self.vault.read_file(self.path)
        if isinstance(existing, Err):
            if existing.error.kind != ErrorKind.NOT_FOUND:
                return existing
            content = self.render_new(papers, now)
            created = self.vault.create_file(self.path, content)
            if isinstance(created, Err):
                return created
            added = len(_unique_papers(papers, set()))
            log.info("Created reading list with %d paper(s): %s", added, self.path)
            return ok(added)

        before = existing_arxiv_ids(existing.value)
        content = self.merge(existing.value, papers, now)
        written = self.vault.modify_file(self.path, content)
        if isinstance(written, Err):
            return written
        added = len(_unique_papers(papers, set(before)))
        log.info("Updated reading list: %d new paper(s)", added)
        return ok(added)
