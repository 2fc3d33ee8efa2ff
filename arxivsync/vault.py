"""Vault file access rooted at a directory (an Obsidian vault or plain folder).

Paths are vault-relative and ``/``-separated. Every operation validates its
path before touching the filesystem and reports failures as ``VaultError``
values.
"""

import logging
from pathlib import Path, PurePosixPath
from typing import Union

from arxivsync.errors import ErrorKind, VaultError
from arxivsync.result import Result, err, ok

log = logging.getLogger(__name__)


def is_safe_path(path: str) -> bool:
    """Relative, non-empty, no parent traversal."""
    if not path or not path.strip() or "\0" in path:
        return False
    if path.startswith(("/", "\\")) or (len(path) > 1 and path[1] == ":"):
        return False
    parts = PurePosixPath(path.replace("\\", "/")).parts
    return ".." not in parts


class Vault:
    def __init__(self, root: Union[str, Path]) -> None:
        self.root = Path(root)

    def _resolve(self, path: str) -> Path:
        return self.root / path

    def ensure_folder(self, path: str) -> "Result[None, VaultError]":
        if not is_safe_path(path):
            return err(VaultError(ErrorKind.INVALID_PATH, path=path))

        folder = self._resolve(path)
        if folder.is_dir():
            return ok(None)
        try:
            folder.mkdir(parents=True, exist_ok=True)
            log.info("Created folder: %s", path)
            return ok(None)
        except OSError as exc:
            # Another writer may have created it between the check and mkdir
            if folder.is_dir():
                return ok(None)
            return err(VaultError(ErrorKind.FOLDER_CREATE_FAILED, str(exc), path=path))

    def file_exists(self, path: str) -> bool:
        return is_safe_path(path) and self._resolve(path).is_file()

    def create_file(self, path: str, content: str) -> "Result[None, VaultError]":
        """Create a new file; fails if something already exists at *path*."""
        if not is_safe_path(path):
            return err(VaultError(ErrorKind.INVALID_PATH, path=path))
        try:
            with open(self._resolve(path), "x", encoding="utf-8") as f:
                f.write(content)
        except OSError as exc:
            return err(VaultError(ErrorKind.FILE_WRITE_FAILED, str(exc), path=path))
        log.debug("Created file: %s", path)
        return ok(None)

    def read_file(self, path: str) -> "Result[str, VaultError]":
        if not is_safe_path(path):
            return err(VaultError(ErrorKind.INVALID_PATH, path=path))
        target = self._resolve(path)
        if not target.is_file():
            return err(VaultError(ErrorKind.NOT_FOUND, "File not found", path=path))
        try:
            return ok(target.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as exc:
            return err(VaultError(ErrorKind.FILE_READ_FAILED, str(exc), path=path))

    def modify_file(self, path: str, content: str) -> "Result[None, VaultError]":
        """Replace the content of an existing file."""
        if not is_safe_path(path):
            return err(VaultError(ErrorKind.INVALID_PATH, path=path))
        target = self._resolve(path)
        if not target.is_file():
            return err(VaultError(ErrorKind.FILE_WRITE_FAILED, "File not found", path=path))
        try:
            target.write_text(content, encoding="utf-8")
        except OSError as exc:
            return err(VaultError(ErrorKind.FILE_WRITE_FAILED, str(exc), path=path))
        return ok(None)
