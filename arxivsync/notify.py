"""User-facing sync messages and macOS notifications via osascript."""

import logging
import platform
import subprocess

from arxivsync.errors import SyncError, SyncErrorKind

log = logging.getLogger(__name__)

TITLE = "arXiv Sync"


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def success_message(stats) -> str:
    """Message for a successful run. Runs with failed papers end in a SyncError."""
    if stats.successful == 0:
        return "No new ArXiv papers found"
    message = f"Sync complete! Created {_plural(stats.successful, 'new paper')}"
    if stats.skipped:
        message += f", skipped {_plural(stats.skipped, 'duplicate')}"
    return message


def error_message(error: SyncError) -> str:
    if error.kind == SyncErrorKind.PARTIAL_FAILURE:
        return (
            f"Partial sync failure: {error.successful} succeeded, "
            f"{error.failed} failed"
        )
    cause = error.error.describe() if error.error is not None else "Unknown error"
    return f"Sync failed: {cause}"


def send(title: str, message: str) -> None:
    """Send a macOS notification. Silently no-ops on other platforms."""
    if platform.system() != "Darwin":
        log.debug("Notifications only supported on macOS, skipping")
        return

    script = (
        f'display notification "{_escape(message)}" '
        f'with title "{_escape(title)}"'
    )
    try:
        subprocess.run(
            ["osascript", "-e", script],
            capture_output=True, timeout=10,
        )
    except Exception as e:
        log.debug("Failed to send notification: %s", e)


def _escape(s: str) -> str:
    """Escape for AppleScript string."""
    return s.replace("\\", "\\\\").replace('"', '\\"')
