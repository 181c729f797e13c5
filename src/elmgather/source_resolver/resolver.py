"""
SourceResolver — main entry point for source file discovery.

Walks the declared source directories below a search base, keeps valid module
files, and rewrites them relative to the project directory.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Sequence
from pathlib import Path

import pathspec

from elmgather.source_resolver.paths import is_module_path, posix_relpath, relativize
from elmgather.source_resolver.types import SourceResolverConfig

logger = logging.getLogger(__name__)


class SourceResolver:
    """
    Discovers source files under a set of source directories, pruning excluded
    directories (dependency caches, installs) and rejecting files whose path
    segments are not valid module names.

    No imports from `elmgather` outside this `source_resolver` package.
    """

    def __init__(self, config: SourceResolverConfig | None = None) -> None:
        self._config: SourceResolverConfig = config or SourceResolverConfig()
        self._exclude_spec: pathspec.PathSpec = pathspec.PathSpec.from_lines(
            "gitignore", self._config.effective_exclude
        )
        self._include_spec: pathspec.PathSpec = pathspec.PathSpec.from_lines(
            "gitignore", [self._config.include_pattern]
        )

    @property
    def config(self) -> SourceResolverConfig:
        return self._config

    def collect(
        self,
        directory: str | Path,
        path: str | Path,
        source_directories: Sequence[str],
    ) -> list[str]:
        """
        Collect source files under `path / entry` for each of `source_directories`,
        returned deduplicated, sorted, and relative to `directory`.

        `path` is the search base: the project itself (`path == directory`) or an
        installed dependency below it. Missing source directories are skipped.
        """
        base = Path(path)
        root = os.path.normpath(directory)
        seen: set[str] = set()
        found: list[str] = []

        for entry in source_directories:
            source_dir = Path(os.path.normpath(base / entry))
            if not source_dir.is_dir():
                logger.debug("Skipping missing source directory: %s", source_dir)
                continue
            for file_path in self._walk_source_dir(source_dir, base):
                key = str(file_path)
                if key not in seen:
                    seen.add(key)
                    found.append(key)

        result = [relativize(f, root) for f in found]
        result.sort()
        return result

    def _walk_source_dir(self, source_dir: Path, base: Path) -> Iterable[Path]:
        """
        Walk one source directory using `os.walk()`, pruning excluded directories
        in-place and yielding files that pass every filter.
        """
        for dirpath, dirnames, filenames in os.walk(source_dir):
            current = Path(dirpath)

            # Prune excluded directories in-place (prevents descent)
            dirnames[:] = [d for d in dirnames if not self._is_excluded(current / d, base, True)]

            for filename in filenames:
                if not self._include_spec.match_file(filename):
                    continue
                file_path = current / filename
                if self._is_excluded(file_path, base, False):
                    continue
                if self._config.check_module_names and not is_module_path(source_dir, file_path):
                    continue
                yield file_path

    def _is_excluded(self, candidate: Path, base: Path, is_dir: bool) -> bool:
        """Check the path relative to the search base against the exclusion patterns."""
        rel = posix_relpath(candidate, base)
        if is_dir:
            rel += "/"
        return self._exclude_spec.match_file(rel)
