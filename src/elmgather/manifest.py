"""
Typed loading of `elm-package.json` manifests and the exact-dependencies lock-file.

Documents are validated at load time: a missing or wrongly-typed required field
raises `ManifestError` instead of surfacing later as a missing key.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, cast


class ManifestError(ValueError):
    """A manifest, dependency descriptor, or lock-file is malformed."""


@dataclass
class Manifest:
    """A project's `elm-package.json`."""

    dependencies: dict[str, str]
    source_directories: list[str]
    version: str | None = None
    summary: str | None = None
    repository: str | None = None
    license: str | None = None
    elm_version: str | None = None


@dataclass
class DependencyDescriptor(Manifest):
    """The `elm-package.json` of an installed dependency."""

    exposed_modules: list[str] = field(default_factory=list)


def _read_json(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ManifestError(f"Invalid JSON in {path}: {e}") from e


def _require_str_list(data: dict[str, Any], key: str, path: Path) -> list[str]:
    if key not in data:
        raise ManifestError(f"Missing `{key}` in {path}")
    value = data[key]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in cast(list[Any], value)):
        raise ManifestError(f"`{key}` in {path} must be a list of strings")
    return list(cast(list[str], value))


def _require_str_map(data: Any, key: str | None, path: Path) -> dict[str, str]:
    label = f"`{key}` in {path}" if key else str(path)
    if key is not None:
        if key not in data:
            raise ManifestError(f"Missing `{key}` in {path}")
        data = data[key]
    if not isinstance(data, dict):
        raise ManifestError(f"{label} must be an object")
    mapping = cast(dict[Any, Any], data)
    if not all(isinstance(v, str) for v in mapping.values()):
        raise ManifestError(f"{label} must map names to version strings")
    return dict(cast(dict[str, str], mapping))


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    return value if isinstance(value, str) else None


def _load_object(path: Path) -> dict[str, Any]:
    data = _read_json(path)
    if not isinstance(data, dict):
        raise ManifestError(f"{path} must contain a JSON object")
    return cast(dict[str, Any], data)


def load_manifest(path: Path) -> Manifest:
    """
    Load a project manifest. Raises `FileNotFoundError` if it is absent and
    `ManifestError` if it is malformed.
    """
    data = _load_object(path)
    return Manifest(
        dependencies=_require_str_map(data, "dependencies", path),
        source_directories=_require_str_list(data, "source-directories", path),
        version=_optional_str(data, "version"),
        summary=_optional_str(data, "summary"),
        repository=_optional_str(data, "repository"),
        license=_optional_str(data, "license"),
        elm_version=_optional_str(data, "elm-version"),
    )


def load_dependency_descriptor(path: Path) -> DependencyDescriptor:
    """Load an installed dependency's manifest, which must also list `exposed-modules`."""
    data = _load_object(path)
    return DependencyDescriptor(
        dependencies=_require_str_map(data, "dependencies", path),
        source_directories=_require_str_list(data, "source-directories", path),
        version=_optional_str(data, "version"),
        summary=_optional_str(data, "summary"),
        repository=_optional_str(data, "repository"),
        license=_optional_str(data, "license"),
        elm_version=_optional_str(data, "elm-version"),
        exposed_modules=_require_str_list(data, "exposed-modules", path),
    )


def load_lock_file(path: Path) -> dict[str, str]:
    """Load the lock-file mapping each dependency name to its exact resolved version."""
    return _require_str_map(_read_json(path), None, path)
