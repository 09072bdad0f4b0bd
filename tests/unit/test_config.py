"""Tests for settings and filesystem helpers."""

import logging

import pytest

from core.config import Settings, get_settings
from core.errors import ConfigurationError
from core.fs import delete_local_file, get_sibling_file_name, read_local_file, write_local_file


class TestSettings:
    """Test settings loaded from the environment."""

    def test_defaults(self, monkeypatch):
        """Should fall back to local execution in the current directory."""
        for name in ("LOCAL_DIR", "BINARY_SOURCE", "DOCKER_IMAGE", "EXEC_TIMEOUT", "LOG_LEVEL"):
            monkeypatch.delenv(f"LOCKFIX_{name}", raising=False)

        settings = get_settings()

        assert settings == Settings()
        assert settings.binary_source == "global"

    def test_from_env(self, monkeypatch):
        """Should read LOCKFIX_* variables."""
        monkeypatch.setenv("LOCKFIX_LOCAL_DIR", "/tmp/repo")
        monkeypatch.setenv("LOCKFIX_BINARY_SOURCE", "Docker")
        monkeypatch.setenv("LOCKFIX_EXEC_TIMEOUT", "30")
        monkeypatch.setenv("LOCKFIX_LOG_LEVEL", "debug")

        settings = Settings.from_env()

        assert settings.local_dir == "/tmp/repo"
        assert settings.binary_source == "docker"
        assert settings.exec_timeout == 30.0
        assert settings.log_level == logging.DEBUG

    @pytest.mark.parametrize(
        "name, value",
        [
            ("LOCKFIX_BINARY_SOURCE", "install"),
            ("LOCKFIX_EXEC_TIMEOUT", "soon"),
            ("LOCKFIX_EXEC_TIMEOUT", "-1"),
            ("LOCKFIX_LOG_LEVEL", "chatty"),
        ],
    )
    def test_invalid_values_raise(self, monkeypatch, name, value):
        """Should reject invalid configuration values."""
        monkeypatch.setenv(name, value)

        with pytest.raises(ConfigurationError):
            Settings.from_env()


class TestLocalFiles:
    """Test filesystem helpers."""

    def test_sibling_file_name(self):
        """Should resolve siblings next to the manifest."""
        assert get_sibling_file_name("pyproject.toml", "requirements.lock") == "requirements.lock"
        assert get_sibling_file_name("folder/pyproject.toml", "requirements-dev.lock") == (
            "folder/requirements-dev.lock"
        )

    def test_read_missing_file_returns_none(self, tmp_path):
        """Should report absence instead of raising."""
        assert read_local_file("requirements.lock", Settings(local_dir=str(tmp_path))) is None

    def test_write_read_delete(self, tmp_path):
        """Should write below the local directory."""
        settings = Settings(local_dir=str(tmp_path))

        write_local_file("folder/requirements.lock", "pinned\n", settings)
        assert read_local_file("folder/requirements.lock", settings) == "pinned\n"

        delete_local_file("folder/requirements.lock", settings)
        assert not (tmp_path / "folder" / "requirements.lock").exists()
