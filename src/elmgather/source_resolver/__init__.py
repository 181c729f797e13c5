"""
Self-contained Elm source discovery: walks declared source directories, skips
dependency caches, keeps only valid module paths, and relativizes the results.

No imports from `elmgather` outside this package.

Usage::

    from elmgather.source_resolver import SourceResolver, SourceResolverConfig

    config = SourceResolverConfig(extend_exclude=["generated/"])
    resolver = SourceResolver(config)
    files = resolver.collect("/work/app", "/work/app", ["src", "../shared"])
"""

from elmgather.source_resolver.defaults import (
    DEFAULT_EXCLUDES,
    DEPENDENCY_CACHE_DIR,
    DEPENDENCY_INSTALL_DIR,
    LOCK_FILENAME,
    MANIFEST_FILENAME,
    SOURCE_EXTENSION,
)
from elmgather.source_resolver.paths import is_exposed, is_module_path, relativize
from elmgather.source_resolver.resolver import SourceResolver
from elmgather.source_resolver.types import SourceResolverConfig

__all__ = [
    "DEFAULT_EXCLUDES",
    "DEPENDENCY_CACHE_DIR",
    "DEPENDENCY_INSTALL_DIR",
    "LOCK_FILENAME",
    "MANIFEST_FILENAME",
    "SOURCE_EXTENSION",
    "SourceResolver",
    "SourceResolverConfig",
    "is_exposed",
    "is_module_path",
    "relativize",
]
