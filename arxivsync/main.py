"""arxivsync entry point.

One-shot script: reads Instapaper bookmarks, creates notes for the arXiv
papers among them, then exits. Suitable for cron or launchd.
"""

import logging
import sys

from arxivsync import __version__

log = logging.getLogger("arxivsync")

_HELP = """\
Usage: arxivsync [options]

  arxivsync                    Sync arXiv bookmarks into the vault
  arxivsync --no-archive       Sync without archiving bookmarks in Instapaper
  arxivsync --test-connection  Check Instapaper credentials and exit
  arxivsync --version          Show version
  arxivsync --help             Show this message

Configuration is read from .env (see INSTAPAPER_* and OBSIDIAN_VAULT_PATH).
"""


def _build_instapaper():
    from arxivsync import config
    from arxivsync.instapaper import InstapaperService
    from arxivsync.instapaper_client import InstapaperClient

    client = InstapaperClient(
        config.INSTAPAPER_USERNAME,
        config.INSTAPAPER_PASSWORD,
        config.INSTAPAPER_CONSUMER_KEY,
        config.INSTAPAPER_CONSUMER_SECRET,
    )
    return InstapaperService(client)


def build_orchestrator(archive: bool = True):
    from arxivsync import config
    from arxivsync.arxiv_client import ArxivClient, ArxivService
    from arxivsync.obsidian import NoteCreator, ReadingList
    from arxivsync.sync import SyncOrchestrator
    from arxivsync.vault import Vault

    vault = Vault(config.OBSIDIAN_VAULT_PATH)
    return SyncOrchestrator(
        bookmarks=_build_instapaper(),
        papers=ArxivService(ArxivClient()),
        notes=NoteCreator(vault, config.PAPERS_FOLDER),
        reading_list=ReadingList(vault, config.PAPERS_FOLDER, config.READING_LIST_FILENAME),
        archive_in_instapaper=archive and config.ARCHIVE_IN_INSTAPAPER,
    )


def _test_connection() -> int:
    from arxivsync.result import Ok

    result = _build_instapaper().authenticate()
    if isinstance(result, Ok):
        print("Connected to Instapaper successfully")
        return 0
    print(f"Authentication failed: {result.error.describe()}")
    return 1


def _sync(archive: bool) -> int:
    from arxivsync import config, notify
    from arxivsync.result import Ok

    if not config.OBSIDIAN_VAULT_PATH:
        print("Error: OBSIDIAN_VAULT_PATH is not set.")
        return 1

    orchestrator = build_orchestrator(archive=archive)
    try:
        result = orchestrator.sync()
        if isinstance(result, Ok):
            message = notify.success_message(result.value)
            code = 0
        else:
            message = notify.error_message(result.error)
            for error in result.error.errors:
                log.warning("  %s: %s", error.kind.value, error.describe())
            code = 2 if result.error.errors else 1
        print(message)
        notify.send(notify.TITLE, message)
        orchestrator.wait_for_archives()
        return code
    finally:
        orchestrator.close()


def main():
    if "--help" in sys.argv or "-h" in sys.argv:
        print(_HELP)
        return

    if "--version" in sys.argv or "-V" in sys.argv:
        print(f"arxivsync {__version__}")
        return

    from arxivsync import config
    config.ensure_loaded()
    config.setup_logging()

    if "--test-connection" in sys.argv:
        sys.exit(_test_connection())

    try:
        code = _sync(archive="--no-archive" not in sys.argv)
    except Exception:
        log.exception("Unexpected error")
        raise
    if code:
        sys.exit(code)


if __name__ == "__main__":
    main()
