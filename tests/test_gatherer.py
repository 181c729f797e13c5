"""Tests for project gathering and dependency expansion."""

from __future__ import annotations

import io
import json
import logging
from pathlib import Path

import pytest

from elmgather import (
    GatherResult,
    InterfaceFile,
    ManifestError,
    collect_source_files,
    dependency_path,
    gather,
    gather_all,
    get_dependency_files,
)
from elmgather.manifest import Manifest

CORE_PREFIX = "elm-stuff/packages/elm-lang/core/5.1.1/src"


def _write_json(path: Path, data: object) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data))


def _touch(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("module X exposing (..)\n")


def _make_project(root: Path, locked: dict[str, str] | None = None) -> None:
    """Create a project with two declared dependencies and one installed copy."""
    _write_json(
        root / "elm-package.json",
        {
            "version": "1.0.0",
            "source-directories": ["src"],
            "exposed-modules": [],
            "dependencies": {
                "elm-lang/core": "5.1.1 <= v < 6.0.0",
                "elm-lang/html": "2.0.0 <= v < 3.0.0",
            },
        },
    )
    if locked is None:
        locked = {"elm-lang/core": "5.1.1", "elm-lang/html": "2.0.0"}
    _write_json(root / "elm-stuff" / "exact-dependencies.json", locked)

    _touch(root / "src" / "Main.elm")
    _touch(root / "src" / "Page" / "Home.elm")
    _touch(root / "src" / "util" / "helpers.elm")

    core = dependency_path(root, "elm-lang/core", "5.1.1")
    _write_json(
        core / "elm-package.json",
        {
            "version": "5.1.1",
            "source-directories": ["src"],
            "exposed-modules": ["Basics", "Json.Decode"],
            "dependencies": {},
        },
    )
    _touch(core / "src" / "Basics.elm")
    _touch(core / "src" / "Json" / "Decode.elm")
    _touch(core / "src" / "Json" / "Internal.elm")
    _touch(core / "tests" / "Test.elm")


def test_dependency_path(tmp_path: Path) -> None:
    path = dependency_path(tmp_path, "elm-lang/core", "5.1.1")
    assert path == tmp_path / "elm-stuff" / "packages" / "elm-lang" / "core" / "5.1.1"


def test_gather(tmp_path: Path) -> None:
    _make_project(tmp_path)
    result = gather(tmp_path)
    assert result.interface_files == [
        InterfaceFile("elm-lang/core", "5.1.1"),
        InterfaceFile("elm-lang/html", "2.0.0"),
    ]
    assert result.source_files == ["src/Main.elm", "src/Page/Home.elm"]


def test_gather_accepts_string_directory(tmp_path: Path) -> None:
    _make_project(tmp_path)
    assert gather(str(tmp_path)).source_files == ["src/Main.elm", "src/Page/Home.elm"]


def test_gather_missing_lock_entry_warns_once(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    _make_project(tmp_path, locked={"elm-lang/core": "5.1.1"})
    with caplog.at_level(logging.WARNING, logger="elmgather"):
        result = gather(tmp_path)

    assert result.interface_files == [InterfaceFile("elm-lang/core", "5.1.1")]
    warnings = [r for r in caplog.records if "Missing dependency" in r.getMessage()]
    assert len(warnings) == 1
    assert "`elm-lang/html`" in warnings[0].getMessage()
    assert warnings[0].levelno == logging.WARNING
    # Source files are still collected.
    assert result.source_files == ["src/Main.elm", "src/Page/Home.elm"]


def test_gather_empty_lock_version_treated_as_missing(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    _make_project(tmp_path, locked={"elm-lang/core": "5.1.1", "elm-lang/html": ""})
    with caplog.at_level(logging.WARNING, logger="elmgather"):
        result = gather(tmp_path)
    assert [f.name for f in result.interface_files] == ["elm-lang/core"]
    assert len([r for r in caplog.records if "Missing dependency" in r.getMessage()]) == 1


def test_gather_missing_manifest(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        gather(tmp_path)


def test_gather_missing_lock_file(tmp_path: Path) -> None:
    _write_json(tmp_path / "elm-package.json", {"source-directories": ["src"], "dependencies": {}})
    with pytest.raises(FileNotFoundError):
        gather(tmp_path)


def test_gather_malformed_manifest(tmp_path: Path) -> None:
    _write_json(tmp_path / "elm-package.json", {"dependencies": {}})
    _write_json(tmp_path / "elm-stuff" / "exact-dependencies.json", {})
    with pytest.raises(ManifestError):
        gather(tmp_path)


def test_gather_project_root_as_source_directory(tmp_path: Path) -> None:
    _make_project(tmp_path)
    _write_json(
        tmp_path / "elm-package.json",
        {"source-directories": ["."], "dependencies": {"elm-lang/core": "5.1.1 <= v < 6.0.0"}},
    )
    _touch(tmp_path / "Root.elm")
    _touch(tmp_path / "node_modules" / "Pkg" / "Thing.elm")

    # Installed dependency sources under elm-stuff never count as first-party.
    result = gather(tmp_path)
    assert result.source_files == ["Root.elm"]


def test_get_dependency_files_filters_to_exposed(tmp_path: Path) -> None:
    _make_project(tmp_path)
    files = get_dependency_files(tmp_path, "elm-lang/core", "5.1.1")
    assert files == [f"{CORE_PREFIX}/Basics.elm", f"{CORE_PREFIX}/Json/Decode.elm"]


def test_get_dependency_files_missing_descriptor(tmp_path: Path) -> None:
    _make_project(tmp_path)
    with pytest.raises(FileNotFoundError):
        get_dependency_files(tmp_path, "elm-lang/html", "2.0.0")


def test_get_dependency_files_malformed_descriptor(tmp_path: Path) -> None:
    _make_project(tmp_path)
    html = dependency_path(tmp_path, "elm-lang/html", "2.0.0")
    _write_json(html / "elm-package.json", {"source-directories": ["src"], "dependencies": {}})
    with pytest.raises(ManifestError, match="exposed-modules"):
        get_dependency_files(tmp_path, "elm-lang/html", "2.0.0")


def test_gather_all(tmp_path: Path) -> None:
    _make_project(tmp_path)
    html = dependency_path(tmp_path, "elm-lang/html", "2.0.0")
    _write_json(
        html / "elm-package.json",
        {"source-directories": ["src"], "exposed-modules": ["Html"], "dependencies": {}},
    )
    _touch(html / "src" / "Html.elm")

    result, dependency_files = gather_all(tmp_path)
    assert result.source_files == ["src/Main.elm", "src/Page/Home.elm"]
    assert dependency_files == {
        "elm-lang/core": [f"{CORE_PREFIX}/Basics.elm", f"{CORE_PREFIX}/Json/Decode.elm"],
        "elm-lang/html": ["elm-stuff/packages/elm-lang/html/2.0.0/src/Html.elm"],
    }


def test_gather_result_to_json() -> None:
    result = GatherResult(
        interface_files=[InterfaceFile("elm-lang/core", "5.1.1")],
        source_files=["src/Main.elm"],
    )
    assert result.to_json() == {
        "interfaceFiles": [["elm-lang/core", "5.1.1"]],
        "sourceFiles": ["src/Main.elm"],
    }


def test_collect_source_files_from_manifest(tmp_path: Path) -> None:
    _touch(tmp_path / "src" / "App" / "Main.elm")
    _touch(tmp_path / "lib" / "Extra.elm")
    manifest = Manifest(dependencies={}, source_directories=["src", "src/App", "lib", "gone"])

    files = collect_source_files(tmp_path, tmp_path, manifest)
    assert files == ["lib/Extra.elm", "src/App/Main.elm"]


def test_gather_unnormalized_directory(tmp_path: Path) -> None:
    proj = tmp_path / "proj"
    _make_project(proj)
    (tmp_path / "sub").mkdir()
    unnormalized = str(tmp_path / "sub" / ".." / "proj")

    assert gather(unnormalized).source_files == ["src/Main.elm", "src/Page/Home.elm"]
    assert get_dependency_files(unnormalized, "elm-lang/core", "5.1.1") == [
        f"{CORE_PREFIX}/Basics.elm",
        f"{CORE_PREFIX}/Json/Decode.elm",
    ]


def test_gather_missing_dependency_line_reaches_caller_handler(tmp_path: Path) -> None:
    _make_project(tmp_path, locked={"elm-lang/core": "5.1.1"})
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter("%(message)s"))
    package_logger = logging.getLogger("elmgather")
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.WARNING)
    try:
        gather(tmp_path)
    finally:
        package_logger.removeHandler(handler)

    assert stream.getvalue() == (
        "WARN: Missing dependency `elm-lang/html`. Maybe run elm-package to update the dependencies.\n"
    )
