import logging
import os
import re
import sys
from pathlib import Path

from dotenv import load_dotenv

# Config directory: respects XDG_CONFIG_HOME, overridable with ARXIVSYNC_CONFIG_DIR
CONFIG_DIR = Path(
    os.environ.get("ARXIVSYNC_CONFIG_DIR", "")
    or (
        Path(os.environ.get("XDG_CONFIG_HOME", "") or Path.home() / ".config")
        / "arxivsync"
    )
)
CONFIG_DIR.mkdir(parents=True, exist_ok=True)

# .env file: prefer CWD (for dev installs), then config dir
ENV_PATH = CONFIG_DIR / ".env"
if not ENV_PATH.exists() and (Path.cwd() / ".env").exists():
    ENV_PATH = Path.cwd() / ".env"

load_dotenv(ENV_PATH)


def _require(var: str) -> str:
    value = os.environ.get(var, "").strip()
    if not value or value.startswith("your_"):
        if not ENV_PATH.exists():
            print(f"Error: No config found. Create {ENV_PATH} with your Instapaper credentials.")
        else:
            print(f"Error: {var} is not set. Fill it in {ENV_PATH}")
        sys.exit(1)
    return value


def _flag(var: str, default: str) -> bool:
    return os.environ.get(var, default).strip().lower() in ("true", "1", "yes")


def save_to_env(key: str, value: str) -> None:
    """Update a single key in the .env file, preserving all other content."""
    if ENV_PATH.exists():
        text = ENV_PATH.read_text()
    else:
        text = ""

    pattern = rf"^{re.escape(key)}=.*$"
    replacement = f"{key}={value}"

    if re.search(pattern, text, flags=re.MULTILINE):
        text = re.sub(pattern, lambda _: replacement, text, flags=re.MULTILINE)
    else:
        text = text.rstrip("\n") + f"\n{replacement}\n"

    ENV_PATH.write_text(text)
    ENV_PATH.chmod(0o600)
    os.environ[key] = value


# Required, loaded lazily via ensure_loaded() at the start of main()
INSTAPAPER_USERNAME: str = ""
INSTAPAPER_PASSWORD: str = ""
INSTAPAPER_CONSUMER_KEY: str = ""
INSTAPAPER_CONSUMER_SECRET: str = ""

OBSIDIAN_VAULT_PATH: str = os.environ.get("OBSIDIAN_VAULT_PATH", "").strip()
PAPERS_FOLDER: str = os.environ.get("PAPERS_FOLDER", "Papers").strip()
READING_LIST_FILENAME: str = os.environ.get("READING_LIST_FILENAME", "Reading List.md").strip()

ARCHIVE_IN_INSTAPAPER: bool = _flag("ARCHIVE_IN_INSTAPAPER", "true")

ARXIV_RATE_LIMIT_SECONDS: float = float(os.environ.get("ARXIV_RATE_LIMIT_SECONDS", "3"))
ARXIV_MAX_RESULTS: int = int(os.environ.get("ARXIV_MAX_RESULTS", "100"))

HTTP_TIMEOUT: int = int(os.environ.get("HTTP_TIMEOUT", "30"))
LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO").strip().upper()


_loaded = False


def ensure_loaded() -> None:
    """Validate required config vars. Call at the start of main()."""
    global _loaded, INSTAPAPER_USERNAME, INSTAPAPER_PASSWORD
    global INSTAPAPER_CONSUMER_KEY, INSTAPAPER_CONSUMER_SECRET
    if _loaded:
        return
    _loaded = True
    INSTAPAPER_USERNAME = _require("INSTAPAPER_USERNAME")
    # Instapaper accounts may have no password
    INSTAPAPER_PASSWORD = os.environ.get("INSTAPAPER_PASSWORD", "")
    INSTAPAPER_CONSUMER_KEY = _require("INSTAPAPER_CONSUMER_KEY")
    INSTAPAPER_CONSUMER_SECRET = _require("INSTAPAPER_CONSUMER_SECRET")


def setup_logging() -> None:
    """Configure logging for the sync. Call once at each entry point."""
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
