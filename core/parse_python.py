"""PEP 621 pyproject.toml parsing."""

import logging
import tomllib

from packaging.requirements import InvalidRequirement, Requirement

from .errors import ManifestError
from .models import DepType, Manifest, PackageDependency

logger = logging.getLogger(__name__)


class PyProjectParser:
    """Parser for the dependency sections of a pyproject.toml file."""

    def _parse_requirement(
        self, line: str, dep_type: DepType, group_name: str | None = None
    ) -> PackageDependency | None:
        """Parse a single PEP 508 requirement string using packaging library."""
        if not isinstance(line, str) or not line.strip():
            return None

        try:
            req = Requirement(line.strip())
        except InvalidRequirement:
            # Skip malformed requirements gracefully
            logger.debug("Skipping invalid requirement %r in %s", line, dep_type.value)
            return None

        dep_name = f"{group_name}/{req.name}" if group_name else req.name
        return PackageDependency(
            dep_name=dep_name,
            package_name=req.name,
            dep_type=dep_type,
            group_name=group_name,
            current_value=str(req.specifier) if req.specifier else None,
            markers=str(req.marker) if req.marker else None,
            extras=sorted(req.extras) if req.extras else None,
            skip_reason="url-install" if req.url else None,
        )

    def parse_dependency_list(
        self, dep_type: DepType, lines: list | None, group_name: str | None = None
    ) -> list[PackageDependency]:
        """Parse a list of requirement strings declared under one section."""
        deps: list[PackageDependency] = []
        for line in lines or []:
            dep = self._parse_requirement(line, dep_type, group_name)
            if dep:
                deps.append(dep)
        return deps

    def parse_dependency_groups(
        self, dep_type: DepType, groups: dict | None
    ) -> list[PackageDependency]:
        deps: list[PackageDependency] = []
        for group_name, lines in (groups or {}).items():
            # {include-group = "..."} tables are not dependencies
            deps.extend(self.parse_dependency_list(dep_type, lines, group_name))
        return deps

    def parse(self, content: str) -> Manifest:
        """Parse pyproject.toml content into Manifest."""
        try:
            data = tomllib.loads(content)
        except tomllib.TOMLDecodeError as e:
            raise ManifestError(f"Invalid pyproject.toml: {e}") from e

        project = data.get("project") or {}
        entries = self.parse_dependency_list(
            DepType.DEPENDENCIES, project.get("dependencies")
        )
        entries.extend(
            self.parse_dependency_groups(
                DepType.OPTIONAL_DEPENDENCIES, project.get("optional-dependencies")
            )
        )
        entries.extend(
            self.parse_dependency_groups(
                DepType.DEPENDENCY_GROUPS, data.get("dependency-groups")
            )
        )

        return Manifest(ecosystem="python", raw=content, entries=entries, project=data)


def parse_pyproject(content: str) -> Manifest:
    """Parse pyproject.toml content into Manifest.

    Args:
        content: The pyproject.toml file content

    Returns:
        Parsed Manifest object, with the decoded TOML document as ``project``

    Raises:
        ManifestError: The content is not valid TOML
    """
    parser = PyProjectParser()
    return parser.parse(content)
