"""Filesystem helpers scoped to the repository's local directory."""

import logging
import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path, PurePosixPath

from .config import Settings, get_settings

logger = logging.getLogger(__name__)


def get_sibling_file_name(file_name: str, sibling_file_name: str) -> str:
    """Return the path of ``sibling_file_name`` next to ``file_name``.

    Pure path derivation, no I/O:

        >>> get_sibling_file_name("folder/pyproject.toml", "requirements.lock")
        'folder/requirements.lock'
    """
    return str(PurePosixPath(file_name).parent / sibling_file_name)


def local_path(file_name: str, settings: Settings | None = None) -> Path:
    settings = settings or get_settings()
    return Path(settings.local_dir) / file_name


def read_local_file(file_name: str, settings: Settings | None = None) -> str | None:
    """Read a file relative to the local directory, or None when it is absent."""
    path = local_path(file_name, settings)
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.debug("%s does not exist", path)
        return None


def write_local_file(
    file_name: str, content: str, settings: Settings | None = None
) -> None:
    path = local_path(file_name, settings)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def delete_local_file(file_name: str, settings: Settings | None = None) -> None:
    local_path(file_name, settings).unlink(missing_ok=True)


@contextmanager
def scratch_copy(folder: str | Path) -> Iterator[Path]:
    """Yield a temporary copy of ``folder`` that is removed afterwards.

    Lock tools rewrite files in place; running them against the copy leaves
    ``folder`` untouched until change records are written back explicitly.
    """
    with tempfile.TemporaryDirectory(prefix="lockfix-") as tmp:
        target = Path(tmp) / "project"
        shutil.copytree(folder, target, symlinks=True)
        logger.debug("Copied %s to %s", folder, target)
        yield target
