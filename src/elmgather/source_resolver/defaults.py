"""
Default names and patterns for Elm source discovery.

Exclusion patterns use gitignore syntax. Directory patterns end with `/`.
"""

from __future__ import annotations

SOURCE_EXTENSION: str = ".elm"

# Per-project manifest, also shipped by every installed dependency.
MANIFEST_FILENAME: str = "elm-package.json"

# Dependencies are installed under `<cache>/<install>/<name>/<version>/`.
DEPENDENCY_CACHE_DIR: str = "elm-stuff"
DEPENDENCY_INSTALL_DIR: str = "packages"
LOCK_FILENAME: str = "exact-dependencies.json"

# Never first-party source, wherever they appear below the search base.
DEFAULT_EXCLUDES: list[str] = [
    f"{DEPENDENCY_CACHE_DIR}/",
    "node_modules/",
]
