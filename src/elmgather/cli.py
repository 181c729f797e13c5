#!/usr/bin/env python3
"""
elmgather: Find the Elm source files of a project and the exposed modules of its dependencies

Common usage:
  elmgather .
  elmgather --json --expand path/to/project
  elmgather --dependency elm-lang/core 5.1.1 .

Reads `elm-package.json` and `elm-stuff/exact-dependencies.json` from the project directory.
"""

from __future__ import annotations

import argparse
import importlib.metadata
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

from strif import atomic_output_file

from elmgather.config import find_config_file, load_config, merge_cli_with_config
from elmgather.gatherer import gather, gather_all, get_dependency_files
from elmgather.manifest import ManifestError
from elmgather.source_resolver import SOURCE_EXTENSION, SourceResolverConfig


@dataclass
class Options:
    """Command-line options for the elmgather tool."""

    directory: str
    output: str
    json: bool
    expand: bool
    dependency: list[str] | None
    extension: str
    exclude: list[str] | None
    extend_exclude: list[str]
    check_module_names: bool
    verbose: bool
    quiet: bool
    version: bool


def _parse_args(args: list[str] | None = None) -> tuple[Options, set[str]]:
    """
    Parse command-line arguments.

    Returns `(options, explicit_flags)` where `explicit_flags` tracks which
    config-backed flags the user explicitly passed (for config merge precedence).
    """
    module_doc = __doc__ or ""
    doc_parts = module_doc.split("\n\n")
    description = doc_parts[0]
    epilog = "\n\n".join(doc_parts[1:])

    parser = argparse.ArgumentParser(
        description=description,
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Project directory containing elm-package.json (default: %(default)s)",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=str,
        default="-",
        help="Output file (use '-' for stdout)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON with `interfaceFiles` and `sourceFiles` keys",
    )
    parser.add_argument(
        "--expand",
        action="store_true",
        help="Also list the exposed module files of every resolved dependency",
    )
    parser.add_argument(
        "--dependency",
        nargs=2,
        default=None,
        metavar=("NAME", "VERSION"),
        help="Only list the exposed module files of one installed dependency",
    )
    parser.add_argument(
        "--extension",
        type=str,
        default=SOURCE_EXTENSION,
        help="Source file extension (default: %(default)s)",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=None,
        metavar="PATTERN",
        help="Replace the default exclusion patterns (elm-stuff/, node_modules/). Can be repeated",
    )
    parser.add_argument(
        "--extend-exclude",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Add to default exclusion patterns (e.g., 'generated/'). Can be repeated",
    )
    parser.add_argument(
        "--no-module-check",
        action="store_true",
        dest="no_module_check",
        help="Keep files whose path segments are not capitalized module names",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only log errors")
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version information and exit",
    )
    opts = parser.parse_args(args)

    # Re-parse with sentinel defaults to detect which flags were actually supplied.
    _SENTINEL = object()
    sentinel_parser = argparse.ArgumentParser(add_help=False)
    sentinel_parser.add_argument("--extension", default=_SENTINEL)
    sentinel_parser.add_argument("--exclude", action="append", default=None)
    sentinel_parser.add_argument("--extend-exclude", action="append", default=None)
    sentinel_parser.add_argument(
        "--no-module-check", dest="no_module_check", action="store_true", default=_SENTINEL
    )
    sentinel_opts, _ = sentinel_parser.parse_known_args(args if args is not None else sys.argv[1:])

    explicit_flags: set[str] = set()
    if sentinel_opts.extension is not _SENTINEL:
        explicit_flags.add("extension")
    if sentinel_opts.exclude is not None:
        explicit_flags.add("exclude")
    if sentinel_opts.extend_exclude is not None:
        explicit_flags.add("extend_exclude")
    if sentinel_opts.no_module_check is not _SENTINEL:
        explicit_flags.add("check_module_names")

    return (
        Options(
            directory=opts.directory,
            output=opts.output,
            json=opts.json,
            expand=opts.expand,
            dependency=opts.dependency,
            extension=opts.extension,
            exclude=opts.exclude,
            extend_exclude=opts.extend_exclude,
            check_module_names=not opts.no_module_check,
            verbose=opts.verbose,
            quiet=opts.quiet,
            version=opts.version,
        ),
        explicit_flags,
    )


def _configure_logging(options: Options) -> logging.Handler:
    """
    Route `elmgather` log records to a bare-message handler. Warnings go to
    stdout like the rest of the listing, except in JSON mode where stdout must
    stay parseable.
    """
    stream = sys.stderr if options.json else sys.stdout
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter("%(message)s"))

    package_logger = logging.getLogger("elmgather")
    package_logger.addHandler(handler)
    if options.verbose:
        package_logger.setLevel(logging.DEBUG)
    elif options.quiet:
        package_logger.setLevel(logging.ERROR)
    else:
        package_logger.setLevel(logging.WARNING)
    return handler


def _render(options: Options, resolver_config: SourceResolverConfig) -> str:
    """Run the requested operation and render its output text."""
    directory = options.directory

    if options.dependency:
        name, version = options.dependency
        files = get_dependency_files(directory, name, version, resolver_config)
        if options.json:
            return json.dumps(files, indent=2) + "\n"
        return "".join(f"{f}\n" for f in files)

    if options.expand:
        result, dependency_files = gather_all(directory, resolver_config)
    else:
        result, dependency_files = gather(directory, resolver_config), None

    if options.json:
        data = result.to_json()
        if dependency_files is not None:
            data["dependencyFiles"] = dependency_files
        return json.dumps(data, indent=2) + "\n"

    lines = list(result.source_files)
    if dependency_files is not None:
        for files in dependency_files.values():
            lines.extend(files)
    return "".join(f"{line}\n" for line in lines)


def main(args: list[str] | None = None) -> int:
    """
    Main entry point for the elmgather CLI.

    Args:
        args: Command-line arguments (uses sys.argv if None)

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    options, explicit_flags = _parse_args(args)

    if options.version:
        try:
            version = importlib.metadata.version("elmgather")
            print(f"v{version}")
        except importlib.metadata.PackageNotFoundError:
            print("unknown (package not installed)")
        return 0

    if options.dependency and options.expand:
        print(
            "Error: --dependency lists a single dependency and cannot be combined with --expand",
            file=sys.stderr,
        )
        return 1

    handler = _configure_logging(options)
    try:
        return _run(options, explicit_flags)
    finally:
        logging.getLogger("elmgather").removeHandler(handler)


def _run(options: Options, explicit_flags: set[str]) -> int:
    # Load and merge config file settings
    config_path = find_config_file(Path(options.directory))
    if config_path:
        config = load_config(config_path)
        merge_cli_with_config(options, config, explicit_flags)

    resolver_config = SourceResolverConfig(
        extension=options.extension,
        exclude=options.exclude,
        extend_exclude=options.extend_exclude,
        check_module_names=options.check_module_names,
    )

    try:
        content = _render(options, resolver_config)
    except (ManifestError, FileNotFoundError) as e:
        # Broken project setup: missing or malformed manifest, lock-file, or descriptor.
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    if options.output == "-":
        sys.stdout.write(content)
    else:
        with atomic_output_file(options.output, make_parents=True) as temp_path:
            Path(temp_path).write_text(content, encoding="utf-8")

    return 0


if __name__ == "__main__":
    sys.exit(main())
