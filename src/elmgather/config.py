"""
TOML-based config file loading for elmgather.

Searches for `.elmgather.toml`, `elmgather.toml`, or `pyproject.toml [tool.elmgather]`
from the project directory upward. Each value is checked against the type of its
`ElmgatherConfig` field; a mistyped or unknown key is reported and dropped. Values
are merged with CLI flags using three-way precedence: explicit CLI flags > config
file > built-in defaults.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, TypeVar, cast

if sys.version_info >= (3, 11):
    import tomllib  # pyright: ignore[reportUnreachable]
else:
    import tomli as tomllib  # type: ignore[no-redef]  # pyright: ignore[reportUnreachable]

logger = logging.getLogger(__name__)


@dataclass
class ElmgatherConfig:
    """
    Parsed config from a TOML file. `None` means "not configured", so an explicit
    default value in the file still takes part in the merge.
    """

    extension: str | None = None
    exclude: list[str] | None = None
    extend_exclude: list[str] | None = None
    check_module_names: bool | None = None


_PYPROJECT = "pyproject.toml"

# Searched in this order within each directory level.
_CONFIG_FILENAMES = (".elmgather.toml", "elmgather.toml", _PYPROJECT)


def _is_str_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(v, str) for v in cast(list[Any], value))


# Expected TOML shape per config field, with the wording used when a value is rejected.
_FIELD_CHECKS: dict[str, tuple[Callable[[Any], bool], str]] = {
    "extension": (lambda v: isinstance(v, str) and v.startswith("."), 'a string like ".elm"'),
    "exclude": (_is_str_list, "a list of strings"),
    "extend_exclude": (_is_str_list, "a list of strings"),
    "check_module_names": (lambda v: isinstance(v, bool), "true or false"),
}


def _tool_section(data: dict[str, Any]) -> dict[str, Any] | None:
    section = data.get("tool", {}).get("elmgather")
    return cast(dict[str, Any], section) if isinstance(section, dict) else None


def find_config_file(start_dir: Path) -> Path | None:
    """
    Return the nearest config file at or above `start_dir`, or `None`.
    A `pyproject.toml` only counts when it has a `[tool.elmgather]` table.
    """
    start = start_dir.resolve()
    for directory in (start, *start.parents):
        for filename in _CONFIG_FILENAMES:
            candidate = directory / filename
            if not candidate.is_file():
                continue
            if filename != _PYPROJECT:
                return candidate
            try:
                if _tool_section(tomllib.loads(candidate.read_text())) is not None:
                    return candidate
            except (tomllib.TOMLDecodeError, OSError):
                pass
    return None


def load_config(config_path: Path) -> ElmgatherConfig:
    """
    Load an `ElmgatherConfig` from a standalone TOML file or from the
    `[tool.elmgather]` table of a `pyproject.toml`. A file that is not valid
    TOML is reported and yields an empty config.
    """
    try:
        data = tomllib.loads(config_path.read_text())
    except tomllib.TOMLDecodeError as e:
        logger.warning("Ignoring invalid config file %s: %s", config_path, e)
        return ElmgatherConfig()

    if config_path.name == _PYPROJECT:
        data = _tool_section(data) or {}

    return _parse_config_data(data, config_path)


def _parse_config_data(data: dict[str, Any], source: Path) -> ElmgatherConfig:
    """
    Build an `ElmgatherConfig` from a flat or sectioned TOML table (tables such as
    `[discovery]` merge into the top level). Keys are kebab-case in TOML.
    """
    flat: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            flat.update(cast(dict[str, Any], value))
        else:
            flat[key] = value

    values: dict[str, Any] = {}
    for key, value in flat.items():
        name = key.replace("-", "_")
        check = _FIELD_CHECKS.get(name)
        if check is None:
            logger.warning("Ignoring unrecognized config key: %s", key)
            continue
        is_valid, expected = check
        if not is_valid(value):
            logger.warning(
                "Ignoring config key `%s` in %s: expected %s, got %r", key, source, expected, value
            )
            continue
        values[name] = value

    return ElmgatherConfig(**values)


_T = TypeVar("_T")


def merge_cli_with_config(
    cli_opts: _T,
    config: ElmgatherConfig | None,
    explicit_flags: set[str],
) -> _T:
    """
    Copy configured values onto `cli_opts`, skipping fields the user set
    explicitly on the command line.
    """
    if config is None:
        return cli_opts

    for cfg_field in fields(config):
        value = getattr(config, cfg_field.name)
        if value is not None and cfg_field.name not in explicit_flags:
            setattr(cli_opts, cfg_field.name, value)

    return cli_opts
