"""Grouping of upgraded dependencies into lock tool invocations."""

import shlex

from .models import Category, CommandKey, PackageDependency


def _split_dep_name(dep_name: str | None) -> tuple[str | None, str | None]:
    if not dep_name or "/" not in dep_name:
        return None, dep_name
    group, name = dep_name.rsplit("/", 1)
    return group, name


def command_key(dep: PackageDependency) -> CommandKey:
    """Return the command group a dependency is updated under."""
    category = dep.category
    if category is Category.DIRECT:
        return CommandKey(Category.DIRECT)
    group = dep.group_name or _split_dep_name(dep.dep_name)[0]
    return CommandKey(category, group)


def package_name(dep: PackageDependency) -> str:
    """Return the bare package name handed to the lock tool."""
    if dep.category is Category.DEV_GROUP:
        return _split_dep_name(dep.dep_name)[1]
    return dep.package_name or _split_dep_name(dep.dep_name)[1]


def group_packages(updated_deps: list[PackageDependency]) -> dict[CommandKey, list[str]]:
    """Group package names by command key, keeping first-seen key order."""
    packages_by_key: dict[CommandKey, list[str]] = {}
    for dep in updated_deps:
        packages_by_key.setdefault(command_key(dep), []).append(package_name(dep))
    return packages_by_key


def generate_commands(updated_deps: list[PackageDependency]) -> list[str]:
    """Build one update command per category and group.

    Args:
        updated_deps: Dependencies to update, in upgrade order

    Returns:
        Command strings like ``rye lock --update -dG dev pytest ruff``, with
        group and package names shell-quoted
    """
    return [
        f"{key.prefix} {' '.join(shlex.quote(name) for name in names)}"
        for key, names in group_packages(updated_deps).items()
    ]
