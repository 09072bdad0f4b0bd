"""Core data models for lockfix."""

import shlex
from dataclasses import dataclass, field
from enum import Enum

LOCK_FILE_MAINTENANCE = "lockFileMaintenance"

UPDATE_LOCK_CMD = "rye lock"
UPDATE_PACKAGE_CMD = "rye lock --update"
# Not rye options: rye locks every group at once and rejects these flags.
# Grouped commands keep the pdm-style shape until rye grows group selection.
OPTIONAL_GROUP_FLAG = "-G"
DEV_GROUP_FLAG = "-dG"


class DepType(str, Enum):
    """Manifest section a dependency was declared in."""

    DEPENDENCIES = "project.dependencies"
    OPTIONAL_DEPENDENCIES = "project.optional-dependencies"
    DEPENDENCY_GROUPS = "dependency-groups"
    RYE_DEV_DEPENDENCIES = "tool.rye.dev-dependencies"


class Category(str, Enum):
    """Command category a dependency is updated under."""

    DIRECT = "direct"
    OPTIONAL_GROUP = "optional-group"
    DEV_GROUP = "dev-group"


CATEGORY_BY_DEP_TYPE = {
    DepType.DEPENDENCIES: Category.DIRECT,
    DepType.OPTIONAL_DEPENDENCIES: Category.OPTIONAL_GROUP,
    DepType.DEPENDENCY_GROUPS: Category.DEV_GROUP,
    DepType.RYE_DEV_DEPENDENCIES: Category.DEV_GROUP,
}


@dataclass
class PackageDependency:
    """A single dependency declared in a pyproject manifest.

    Grouped dependencies carry a composite ``dep_name`` of the form
    ``"<group>/<name>"``.
    """

    dep_name: str | None = None
    package_name: str | None = None
    dep_type: DepType | None = None
    group_name: str | None = None
    current_value: str | None = None
    markers: str | None = None
    extras: list[str] | None = None
    registry_urls: list[str] = field(default_factory=list)
    skip_reason: str | None = None

    @property
    def category(self) -> Category:
        return CATEGORY_BY_DEP_TYPE.get(self.dep_type, Category.DIRECT)


@dataclass
class Manifest:
    """A parsed pyproject manifest."""

    ecosystem: str
    raw: str
    entries: list[PackageDependency]
    project: dict = field(default_factory=dict)


@dataclass(frozen=True)
class CommandKey:
    """Groups packages that can be updated by one tool invocation."""

    category: Category
    group_name: str | None = None

    @property
    def prefix(self) -> str:
        if self.category is Category.OPTIONAL_GROUP:
            return f"{UPDATE_PACKAGE_CMD} {OPTIONAL_GROUP_FLAG} {shlex.quote(self.group_name)}"
        if self.category is Category.DEV_GROUP:
            return f"{UPDATE_PACKAGE_CMD} {DEV_GROUP_FLAG} {shlex.quote(self.group_name)}"
        return UPDATE_PACKAGE_CMD


@dataclass(frozen=True)
class ToolConstraint:
    tool_name: str
    constraint: str | None = None


@dataclass
class DockerOptions:
    """Marks a run as eligible for the containerized toolchain."""

    image: str | None = None


@dataclass
class ExecOptions:
    """Options handed to the process runner."""

    cwd_file: str | None = None
    docker: DockerOptions | None = None
    tool_constraints: list[ToolConstraint] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)


@dataclass
class UpdateConfig:
    update_type: str | None = None
    constraints: dict[str, str] = field(default_factory=dict)

    @property
    def is_lock_file_maintenance(self) -> bool:
        return self.update_type == LOCK_FILE_MAINTENANCE


@dataclass
class UpdateArtifact:
    """Input of a single lock-file reconciliation run."""

    package_file_name: str
    updated_deps: list[PackageDependency]
    config: UpdateConfig = field(default_factory=UpdateConfig)
    new_package_file_content: str = ""


@dataclass
class LockFileSnapshot:
    path: str
    content: str | None


@dataclass
class FileChange:
    path: str
    contents: str | None
    type: str = "addition"  # addition, deletion


@dataclass
class ArtifactError:
    lock_file: str
    stderr: str


@dataclass
class UpdateArtifactsResult:
    """Either a staged file change or an error for one lock file."""

    file: FileChange | None = None
    artifact_error: ArtifactError | None = None
