"""Tests for pyproject.toml parsing."""

import pytest

from core.errors import ManifestError
from core.models import DepType
from core.parse_python import PyProjectParser, parse_pyproject


class TestPyProjectParser:
    """Test PEP 621 dependency extraction."""

    def test_parse_project_dependencies(self, sample_pyproject):
        """Should parse [project].dependencies as direct dependencies."""
        manifest = parse_pyproject(sample_pyproject)

        assert manifest.ecosystem == "python"
        assert manifest.raw == sample_pyproject

        direct = [e for e in manifest.entries if e.dep_type == DepType.DEPENDENCIES]
        assert [e.package_name for e in direct] == ["fastapi", "uvicorn"]
        assert direct[0].dep_name == "fastapi"
        assert direct[0].current_value == ">=0.85.0"
        assert direct[0].group_name is None

    def test_parse_optional_dependencies(self, sample_pyproject):
        """Should parse optional dependency groups with composite names."""
        manifest = parse_pyproject(sample_pyproject)

        optional = [e for e in manifest.entries if e.dep_type == DepType.OPTIONAL_DEPENDENCIES]
        assert len(optional) == 1
        assert optional[0].dep_name == "postgres/psycopg"
        assert optional[0].package_name == "psycopg"
        assert optional[0].group_name == "postgres"
        assert optional[0].extras == ["binary"]

    def test_rye_dev_dependencies_are_left_to_processor(self, sample_pyproject):
        """Should not parse tool-specific tables on its own."""
        manifest = parse_pyproject(sample_pyproject)

        assert all(e.dep_type != DepType.RYE_DEV_DEPENDENCIES for e in manifest.entries)
        assert manifest.project["tool"]["rye"]["managed"] is True

    def test_parse_dependency_groups(self):
        """Should parse PEP 735 dependency groups and skip include tables."""
        content = """
[project]
name = "demo"

[dependency-groups]
test = ["pytest>=8", {include-group = "lint"}]
lint = ["ruff"]
"""
        manifest = parse_pyproject(content)

        assert [(e.dep_name, e.dep_type) for e in manifest.entries] == [
            ("test/pytest", DepType.DEPENDENCY_GROUPS),
            ("lint/ruff", DepType.DEPENDENCY_GROUPS),
        ]

    def test_parse_with_environment_markers(self):
        """Should keep environment markers."""
        content = """
[project]
dependencies = ['uvloop>=0.17.0; sys_platform != "win32"']
"""
        entry = parse_pyproject(content).entries[0]

        assert entry.package_name == "uvloop"
        assert entry.markers == 'sys_platform != "win32"'

    def test_skip_malformed_requirements(self):
        """Should skip requirement strings that do not parse."""
        content = """
[project]
dependencies = ["fastapi>=0.85.0", "not a valid ===", ""]
"""
        manifest = parse_pyproject(content)

        assert [e.package_name for e in manifest.entries] == ["fastapi"]

    def test_url_requirements_are_marked_skipped(self):
        """Should flag direct URL installs as not updatable."""
        content = """
[project]
dependencies = ["mylib @ https://example.com/mylib-1.0.tar.gz"]
"""
        entry = parse_pyproject(content).entries[0]

        assert entry.package_name == "mylib"
        assert entry.skip_reason == "url-install"

    def test_parse_without_project_table(self):
        """Should return no entries for a pyproject without dependencies."""
        manifest = parse_pyproject("[tool.ruff]\nline-length = 100\n")

        assert manifest.entries == []

    def test_invalid_toml_raises(self):
        """Should raise ManifestError for broken TOML."""
        with pytest.raises(ManifestError):
            parse_pyproject("[project\nname = ")

    def test_parse_dependency_list_with_group(self):
        """Should build composite names when a group is given."""
        deps = PyProjectParser().parse_dependency_list(
            DepType.RYE_DEV_DEPENDENCIES, ["pytest>=8.0"], "dev"
        )

        assert deps[0].dep_name == "dev/pytest"
        assert deps[0].group_name == "dev"
