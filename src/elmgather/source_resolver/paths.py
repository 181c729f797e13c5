"""Segment-wise path helpers: module-name validation, relativizing, exposure matching."""

from __future__ import annotations

import os
import re
from collections.abc import Iterable
from pathlib import PurePath, PurePosixPath

# Elm module names (and so every directory leading to a module file) are capitalized.
_MODULE_SEGMENT = re.compile(r"[A-Z]")


def is_module_path(source_dir: str | PurePath, file_path: str | PurePath) -> bool:
    """
    Check that every segment from `source_dir` down to `file_path` (inclusive
    of the file name) starts with an uppercase ASCII letter.

    Segments are compared over parsed paths, so `Foo` never matches a sibling
    `FooBar/`. A file outside `source_dir` is never a module path.
    """
    try:
        parts = PurePath(file_path).relative_to(source_dir).parts
    except ValueError:
        return False
    if not parts:
        return False
    return all(_MODULE_SEGMENT.match(part) for part in parts)


def relativize(file_path: str | PurePath, directory: str | PurePath) -> str:
    """
    Rewrite `file_path` relative to `directory` by pure segment comparison.

    Common leading segments are dropped from both, then one `../` is prepended
    per remaining segment of `directory`. Nothing is checked on disk, and two
    paths with no common ancestor still produce a result.
    """
    file_parts = list(PurePath(file_path).parts)
    dir_parts = list(PurePath(directory).parts)

    common = 0
    for file_part, dir_part in zip(file_parts, dir_parts):
        if file_part != dir_part:
            break
        common += 1

    ups = "../" * (len(dir_parts) - common)
    return ups + "/".join(file_parts[common:])


def module_segments(module_name: str, extension: str) -> tuple[str, ...]:
    """`Foo.Bar.Baz` -> `("Foo", "Bar", "Baz.elm")` for extension `.elm`."""
    *packages, leaf = module_name.split(".")
    return (*packages, leaf + extension)


def is_exposed(rel_path: str, exposed_modules: Iterable[str], extension: str) -> bool:
    """
    Check whether `rel_path` is the file of one of `exposed_modules`.

    The module's segments must form a proper trailing run of the path's segments,
    i.e. the path ends with `/Foo/Bar.elm` for module `Foo.Bar`.
    """
    parts = PurePosixPath(rel_path).parts
    for module_name in exposed_modules:
        segments = module_segments(module_name, extension)
        if len(parts) > len(segments) and parts[-len(segments) :] == segments:
            return True
    return False


def posix_relpath(path: str | PurePath, base: str | PurePath) -> str:
    """Relative path from `base` to `path` with `/` separators, for pattern matching."""
    return PurePath(os.path.relpath(path, base)).as_posix()
