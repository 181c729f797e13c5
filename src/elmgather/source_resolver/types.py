"""Configuration types for source resolution."""

from __future__ import annotations

from dataclasses import dataclass, field

from elmgather.source_resolver.defaults import DEFAULT_EXCLUDES, SOURCE_EXTENSION


@dataclass
class SourceResolverConfig:
    """
    Configuration for source file discovery and filtering.

    `exclude=None` means use `DEFAULT_EXCLUDES`; providing a list replaces them entirely.
    `check_module_names=False` keeps files whose path segments are not valid module names.
    """

    extension: str = SOURCE_EXTENSION
    exclude: list[str] | None = None
    extend_exclude: list[str] = field(default_factory=list)
    check_module_names: bool = True

    @property
    def include_pattern(self) -> str:
        """Gitignore-style pattern matching source file names."""
        return f"*{self.extension}"

    @property
    def effective_exclude(self) -> list[str]:
        """Combined exclude patterns: defaults (or `exclude`) + `extend_exclude`."""
        base = self.exclude if self.exclude is not None else list(DEFAULT_EXCLUDES)
        return base + self.extend_exclude
