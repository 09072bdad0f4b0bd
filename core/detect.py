"""Lock manager detection for pyproject manifests."""

import re


def identify(content: str, filename: str | None = None) -> str:
    """Detect which lock manager a pyproject is set up for.

    Args:
        content: The manifest file content
        filename: Optional filename for additional context

    Returns:
        Detected manager: 'rye', 'pdm', 'poetry', 'uv' or 'unknown'
    """
    # Only pyproject manifests carry lock manager configuration
    if filename and not filename.endswith("pyproject.toml"):
        return "unknown"

    # Tool tables, most specific first
    tool_patterns = [
        ("rye", r"^\[tool\.rye(\]|\.)"),
        ("pdm", r"^\[tool\.pdm(\]|\.)"),
        ("poetry", r"^\[tool\.poetry(\]|\.)"),
        ("uv", r"^\[tool\.uv(\]|\.)"),
    ]

    for manager, pattern in tool_patterns:
        if re.search(pattern, content, re.MULTILINE):
            return manager

    # A plain PEP 621 project can still be locked by rye
    if re.search(r"^\[project\]", content, re.MULTILINE):
        return "rye"

    return "unknown"
