"""Pytest configuration and fixtures."""


import os

import pytest

from core.config import Settings, set_settings


@pytest.fixture(autouse=True)
def reset_settings():
    """Drop cached global settings between tests."""
    set_settings(None)
    yield
    set_settings(None)


@pytest.fixture
def sample_pyproject():
    """Sample rye-managed pyproject.toml content for testing."""
    return """
[project]
name = "test-project"
requires-python = ">=3.11"
dependencies = [
    "fastapi>=0.85.0",
    "uvicorn>=0.18.0",
]

[project.optional-dependencies]
postgres = ["psycopg[binary]>=3.1"]

[tool.rye]
managed = true
dev-dependencies = [
    "pytest>=8.0",
    "ruff",
]
"""


@pytest.fixture
def project_dir(tmp_path, sample_pyproject):
    """Create a project with a pyproject.toml and both rye lock files."""
    (tmp_path / "pyproject.toml").write_text(sample_pyproject)
    (tmp_path / "requirements.lock").write_text("fastapi==0.85.0\nuvicorn==0.18.0\n")
    (tmp_path / "requirements-dev.lock").write_text(
        "fastapi==0.85.0\nuvicorn==0.18.0\npytest==8.0.0\nruff==0.4.0\n"
    )
    return tmp_path


@pytest.fixture
def settings(project_dir):
    """Settings rooted at the temporary project directory."""
    return Settings(local_dir=str(project_dir))


@pytest.fixture
def fake_rye(tmp_path, monkeypatch):
    """Put a ``rye`` stub on PATH that rewrites requirements.lock.

    Every invocation is appended to ``rye-calls.txt`` next to the stub.
    """
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    calls = bin_dir / "rye-calls.txt"
    script = bin_dir / "rye"
    script.write_text(
        "#!/bin/sh\n"
        f'printf "%s\\n" "$*" >> "{calls}"\n'
        "printf 'fastapi==9.9.9\\n' > requirements.lock\n"
    )
    script.chmod(0o755)
    monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")
    return calls
