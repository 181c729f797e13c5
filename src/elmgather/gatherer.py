"""
Project-level gathering: first-party sources, resolved dependencies, and the
exposed module files of each installed dependency.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from elmgather.manifest import (
    Manifest,
    load_dependency_descriptor,
    load_lock_file,
    load_manifest,
)
from elmgather.source_resolver import (
    DEPENDENCY_CACHE_DIR,
    DEPENDENCY_INSTALL_DIR,
    LOCK_FILENAME,
    MANIFEST_FILENAME,
    SourceResolver,
    SourceResolverConfig,
    is_exposed,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InterfaceFile:
    """A dependency with a resolved version, not yet expanded to file paths."""

    name: str
    version: str


@dataclass
class GatherResult:
    """Resolved dependencies plus the project's own source files."""

    interface_files: list[InterfaceFile] = field(default_factory=list)
    source_files: list[str] = field(default_factory=list)

    def to_json(self) -> dict[str, Any]:
        """The `{"interfaceFiles": [[name, version], ...], "sourceFiles": [...]}` shape."""
        return {
            "interfaceFiles": [[f.name, f.version] for f in self.interface_files],
            "sourceFiles": list(self.source_files),
        }


def dependency_path(directory: str | Path, name: str, version: str) -> Path:
    """Install location of a dependency: `<directory>/elm-stuff/packages/<name>/<version>`."""
    return Path(directory) / DEPENDENCY_CACHE_DIR / DEPENDENCY_INSTALL_DIR / name / version


def collect_source_files(
    directory: str | Path,
    path: str | Path,
    manifest: Manifest,
    config: SourceResolverConfig | None = None,
) -> list[str]:
    """Run the source collection for a manifest's `source-directories` below `path`."""
    return SourceResolver(config).collect(directory, path, manifest.source_directories)


def gather(directory: str | Path, config: SourceResolverConfig | None = None) -> GatherResult:
    """
    Load the project manifest and lock-file, pair each locked dependency with its
    version, and collect the project's own source files.

    Dependencies without a resolved version are omitted, and each one produces a
    single WARNING record on the `elmgather.gatherer` logger. The record carries
    the full `WARN: Missing dependency ...` line; where it is written depends on
    the caller's logging setup. With none, Python's last-resort handler prints it
    to stderr. The CLI attaches a handler that prints it on stdout. A missing or
    malformed manifest or lock-file raises.
    """
    root = Path(directory)
    manifest = load_manifest(root / MANIFEST_FILENAME)
    exact_deps = load_lock_file(root / DEPENDENCY_CACHE_DIR / LOCK_FILENAME)

    interface_files: list[InterfaceFile] = []
    for name in manifest.dependencies:
        version = exact_deps.get(name)
        if version:
            interface_files.append(InterfaceFile(name, version))
        else:
            logger.warning(
                "WARN: Missing dependency `%s`. Maybe run elm-package to update the dependencies.",
                name,
            )

    return GatherResult(
        interface_files=interface_files,
        source_files=collect_source_files(root, root, manifest, config),
    )


def get_dependency_files(
    directory: str | Path,
    name: str,
    version: str,
    config: SourceResolverConfig | None = None,
) -> list[str]:
    """
    Collect the exposed module files of an installed dependency, relative to
    `directory`. Internal (unexposed) modules are dropped even if present.
    """
    dep_path = dependency_path(directory, name, version)
    descriptor = load_dependency_descriptor(dep_path / MANIFEST_FILENAME)

    candidates = collect_source_files(directory, dep_path, descriptor, config)
    extension = (config or SourceResolverConfig()).extension
    return [f for f in candidates if is_exposed(f, descriptor.exposed_modules, extension)]


def gather_all(
    directory: str | Path, config: SourceResolverConfig | None = None
) -> tuple[GatherResult, dict[str, list[str]]]:
    """Run `gather`, then expand every resolved dependency to its exposed files."""
    result = gather(directory, config)
    dependency_files = {
        dep.name: get_dependency_files(directory, dep.name, dep.version, config)
        for dep in result.interface_files
    }
    return result, dependency_files
