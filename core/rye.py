"""Rye lock file processing."""

import logging

from .classify import generate_commands
from .config import Settings, get_settings
from .errors import LockfixError, TemporaryError
from .exec import exec_commands
from .fs import get_sibling_file_name, read_local_file
from .models import (
    UPDATE_LOCK_CMD,
    ArtifactError,
    DepType,
    DockerOptions,
    ExecOptions,
    FileChange,
    LockFileSnapshot,
    PackageDependency,
    ToolConstraint,
    UpdateArtifact,
    UpdateArtifactsResult,
)
from .parse_python import PyProjectParser

logger = logging.getLogger(__name__)

PYPI_DEFAULT_URL = "https://pypi.org/pypi/"
LOCK_FILE_NAME = "requirements.lock"
DEV_LOCK_FILE_NAME = "requirements-dev.lock"
RYE_DEV_GROUP = "dev"


class UnknownPackageError(LockfixError):
    """Raised when a requested package is not declared in the manifest."""


class RyeProcessor:
    """Extracts rye dependencies and keeps rye lock files in sync."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    def process(
        self, project: dict, deps: list[PackageDependency]
    ) -> list[PackageDependency]:
        """Add rye dev dependencies and rye source registries to ``deps``."""
        rye = (project.get("tool") or {}).get("rye")
        if rye is None:
            return deps

        logger.debug("Processing [tool.rye]")
        deps.extend(
            PyProjectParser().parse_dependency_list(
                DepType.RYE_DEV_DEPENDENCIES,
                rye.get("dev-dependencies"),
                RYE_DEV_GROUP,
            )
        )

        sources = rye.get("sources")
        if not sources:
            logger.debug("No rye sources found")
            return deps

        registry_urls: list[str] = []
        if not any(source.get("name") == "pypi" for source in sources):
            registry_urls.append(PYPI_DEFAULT_URL)
        registry_urls.extend(source["url"] for source in sources if source.get("url"))

        for dep in deps:
            dep.registry_urls = list(registry_urls)
        return deps

    def _read_lock_file(self, file_name: str) -> LockFileSnapshot:
        content = read_local_file(file_name, self.settings)
        if content is None:
            logger.debug("No %s found", file_name)
        return LockFileSnapshot(path=file_name, content=content)

    def _diff_lock_file(self, before: LockFileSnapshot) -> UpdateArtifactsResult | None:
        """Re-read a lock file and return a change record if its content moved."""
        after = read_local_file(before.path, self.settings)
        if after == before.content:
            logger.debug("%s is unchanged", before.path)
            return None

        change_type = "deletion" if after is None else "addition"
        return UpdateArtifactsResult(
            file=FileChange(path=before.path, contents=after, type=change_type)
        )

    def _exec_options(self, update_artifact: UpdateArtifact, project: dict) -> ExecOptions:
        constraints = update_artifact.config.constraints
        python_constraint = ToolConstraint(
            tool_name="python",
            constraint=constraints.get("python")
            or (project.get("project") or {}).get("requires-python"),
        )
        rye_constraint = ToolConstraint(tool_name="rye", constraint=constraints.get("rye"))
        return ExecOptions(
            cwd_file=update_artifact.package_file_name,
            docker=DockerOptions(),
            tool_constraints=[python_constraint, rye_constraint],
        )

    async def update_artifacts(
        self, update_artifact: UpdateArtifact, project: dict
    ) -> list[UpdateArtifactsResult] | None:
        """Run the lock tool and report which lock files changed.

        Args:
            update_artifact: Manifest path, upgrades and update config
            project: Decoded pyproject document

        Returns:
            Change records for every lock file whose content changed, one
            error record per lock file if the run failed, or None when there
            is nothing to report

        Raises:
            TemporaryError: The toolchain could not be run; retry later
        """
        package_file_name = update_artifact.package_file_name
        lock_file_name = get_sibling_file_name(package_file_name, LOCK_FILE_NAME)
        dev_lock_file_name = get_sibling_file_name(package_file_name, DEV_LOCK_FILE_NAME)

        try:
            snapshots = [
                self._read_lock_file(lock_file_name),
                self._read_lock_file(dev_lock_file_name),
            ]
            if all(snapshot.content is None for snapshot in snapshots):
                return None

            # Maintenance regenerates the whole lock, otherwise only the upgrades
            if update_artifact.config.is_lock_file_maintenance:
                cmds = [UPDATE_LOCK_CMD]
            else:
                cmds = generate_commands(update_artifact.updated_deps)

            await exec_commands(
                cmds, self._exec_options(update_artifact, project), self.settings
            )

            file_changes = []
            for snapshot in snapshots:
                change = self._diff_lock_file(snapshot)
                if change:
                    file_changes.append(change)
            return file_changes or None

        except TemporaryError:
            raise
        except Exception as err:
            logger.debug("Failed to update rye lock files: %s", err, exc_info=True)
            return [
                UpdateArtifactsResult(
                    artifact_error=ArtifactError(lock_file=lock_file, stderr=str(err))
                )
                for lock_file in (lock_file_name, dev_lock_file_name)
            ]


def select_upgrades(
    deps: list[PackageDependency], packages: list[str] | None = None
) -> list[PackageDependency]:
    """Pick the declared dependencies to upgrade.

    Without ``packages`` every dependency that can be updated is selected.
    Package names are compared case-insensitively.

    Raises:
        UnknownPackageError: A requested package is not declared
    """
    updatable = [dep for dep in deps if not dep.skip_reason]
    if not packages:
        return updatable

    wanted = {name.lower() for name in packages}
    selected = [dep for dep in updatable if (dep.package_name or "").lower() in wanted]
    found = {(dep.package_name or "").lower() for dep in selected}
    missing = sorted(wanted - found)
    if missing:
        raise UnknownPackageError(f"Packages not declared in manifest: {', '.join(missing)}")
    return selected
