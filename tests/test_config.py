"""Tests for config module: env loading, defaults, save_to_env, ensure_loaded."""

import os
from pathlib import Path

import pytest


class TestDefaults:
    """Verify default values when no env vars are set."""

    def test_folder_defaults(self):
        from arxivsync import config

        # These may be overridden by the user's .env, so just check types
        assert isinstance(config.PAPERS_FOLDER, str)
        assert isinstance(config.READING_LIST_FILENAME, str)
        assert isinstance(config.OBSIDIAN_VAULT_PATH, str)

    def test_numeric_settings(self):
        from arxivsync import config

        assert config.ARXIV_RATE_LIMIT_SECONDS >= 0
        assert config.ARXIV_MAX_RESULTS > 0
        assert config.HTTP_TIMEOUT > 0
        assert isinstance(config.ARCHIVE_IN_INSTAPAPER, bool)


class TestFlag:
    @pytest.mark.parametrize("raw,expected", [
        ("true", True), ("1", True), ("YES", True), (" True ", True),
        ("false", False), ("0", False), ("no", False), ("", False),
    ])
    def test_parses(self, monkeypatch, raw, expected):
        from arxivsync import config

        monkeypatch.setenv("ARXIVSYNC_TEST_FLAG", raw)
        assert config._flag("ARXIVSYNC_TEST_FLAG", "true") is expected

    def test_default(self, monkeypatch):
        from arxivsync import config

        monkeypatch.delenv("ARXIVSYNC_TEST_FLAG", raising=False)
        assert config._flag("ARXIVSYNC_TEST_FLAG", "true") is True


class TestSaveToEnv:
    """Tests for config.save_to_env()."""

    def test_creates_new_key(self, tmp_path, monkeypatch):
        from arxivsync import config

        env_file = tmp_path / ".env"
        env_file.write_text("EXISTING=value\n")
        monkeypatch.setattr(config, "ENV_PATH", env_file)

        config.save_to_env("NEW_KEY", "new_value")
        text = env_file.read_text()
        assert "NEW_KEY=new_value" in text
        assert "EXISTING=value" in text
        monkeypatch.delenv("NEW_KEY", raising=False)

    def test_updates_existing_key(self, tmp_path, monkeypatch):
        from arxivsync import config

        env_file = tmp_path / ".env"
        env_file.write_text("MY_KEY=old\nOTHER=keep\n")
        monkeypatch.setattr(config, "ENV_PATH", env_file)

        config.save_to_env("MY_KEY", "new")
        text = env_file.read_text()
        assert "MY_KEY=new" in text
        assert "MY_KEY=old" not in text
        assert "OTHER=keep" in text
        monkeypatch.delenv("MY_KEY", raising=False)

    def test_value_with_backslashes(self, tmp_path, monkeypatch):
        from arxivsync import config

        env_file = tmp_path / ".env"
        env_file.write_text("VAULT=old\n")
        monkeypatch.setattr(config, "ENV_PATH", env_file)

        config.save_to_env("VAULT", r"C:\Users\me\Vault")
        assert r"VAULT=C:\Users\me\Vault" in env_file.read_text()
        monkeypatch.delenv("VAULT", raising=False)

    def test_sets_env_file_permissions(self, tmp_path, monkeypatch):
        from arxivsync import config

        env_file = tmp_path / ".env"
        monkeypatch.setattr(config, "ENV_PATH", env_file)

        config.save_to_env("SECRET", "value")
        assert env_file.stat().st_mode & 0o777 == 0o600
        monkeypatch.delenv("SECRET", raising=False)

    def test_sets_os_environ(self, tmp_path, monkeypatch):
        from arxivsync import config

        env_file = tmp_path / ".env"
        monkeypatch.setattr(config, "ENV_PATH", env_file)

        config.save_to_env("TEST_ENV_VAR", "hello")
        assert os.environ.get("TEST_ENV_VAR") == "hello"
        monkeypatch.delenv("TEST_ENV_VAR", raising=False)


class TestEnsureLoaded:
    """Tests for lazy config loading."""

    def _set_credentials(self, monkeypatch, username="me@example.com"):
        monkeypatch.setenv("INSTAPAPER_USERNAME", username)
        monkeypatch.setenv("INSTAPAPER_CONSUMER_KEY", "ckey")
        monkeypatch.setenv("INSTAPAPER_CONSUMER_SECRET", "csecret")

    def test_ensure_loaded_succeeds_with_env(self, monkeypatch):
        from arxivsync import config

        monkeypatch.setattr(config, "_loaded", False)
        self._set_credentials(monkeypatch)
        monkeypatch.delenv("INSTAPAPER_PASSWORD", raising=False)

        config.ensure_loaded()
        assert config.INSTAPAPER_USERNAME == "me@example.com"
        assert config.INSTAPAPER_CONSUMER_KEY == "ckey"
        assert config.INSTAPAPER_PASSWORD == ""
        monkeypatch.setattr(config, "_loaded", False)

    def test_ensure_loaded_exits_without_env(self, monkeypatch):
        from arxivsync import config

        monkeypatch.setattr(config, "_loaded", False)
        monkeypatch.delenv("INSTAPAPER_USERNAME", raising=False)

        with pytest.raises(SystemExit):
            config.ensure_loaded()
        monkeypatch.setattr(config, "_loaded", False)

    def test_placeholder_value_rejected(self, monkeypatch):
        from arxivsync import config

        monkeypatch.setattr(config, "_loaded", False)
        self._set_credentials(monkeypatch, username="your_username")

        with pytest.raises(SystemExit):
            config.ensure_loaded()
        monkeypatch.setattr(config, "_loaded", False)

    def test_ensure_loaded_idempotent(self, monkeypatch):
        from arxivsync import config

        monkeypatch.setattr(config, "_loaded", False)
        self._set_credentials(monkeypatch, username="first")
        config.ensure_loaded()

        # Second call should be a no-op
        monkeypatch.setenv("INSTAPAPER_USERNAME", "second")
        config.ensure_loaded()
        assert config.INSTAPAPER_USERNAME == "first"
        monkeypatch.setattr(config, "_loaded", False)


class TestConfigDir:
    """Tests for CONFIG_DIR resolution."""

    def test_config_dir_is_path(self):
        from arxivsync.config import CONFIG_DIR

        assert isinstance(CONFIG_DIR, Path)

    def test_config_dir_exists(self):
        from arxivsync.config import CONFIG_DIR

        assert CONFIG_DIR.exists()
