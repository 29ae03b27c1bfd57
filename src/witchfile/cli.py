"""Command-line entry point for witchfile.

Startup happens in a fixed order so that every later failure can be logged:

1. Parse the command line.
2. Find or create the per-user configuration directory (exit 1 if impossible).
3. Start logging into that directory, then load the config file.
4. Show the log, inspect a single path, or list a directory.

Ctrl-C at any of these steps exits with code 130.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console

from witchfile import __version__
from witchfile.colors import get_styles
from witchfile.config import (
    ConfigDirUnavailableError,
    config_file_path,
    create_default_config,
    ensure_config_dir,
    get_bulk_settings,
    get_log_level,
    get_text_probe_limit,
    load_config,
)
from witchfile.inspector import (
    DirectoryUnreadableError,
    EntryError,
    InspectionError,
    PathNotFoundError,
    collect,
    collect_all,
)
from witchfile.logs import close_logging, setup_logging, show_log_file
from witchfile.render import build_listing_table, build_record_table

logger = logging.getLogger("witchfile.cli")

BULK_SENTINEL = "*"

LONG_DESCRIPTION = """\
Get metadata from files:
  - name
  - extension
  - type
  - type category
  - unicode
  - ascii
  - size
  - creation time
  - last access time
  - last modification time
  - hidden
  - system file
  - temporary
  - readonly
"""


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Turn the command-line text into structured information."""
    parser = argparse.ArgumentParser(
        prog="wf",
        description=LONG_DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
        help="Show version number and exit.",
    )
    parser.add_argument(
        "path",
        nargs="?",
        default=None,
        help=f"Path to inspect. Use '{BULK_SENTINEL}' to list every entry in the current directory.",
    )
    parser.add_argument(
        "-a",
        "--all",
        dest="list_all",
        action="store_true",
        help="List every entry of PATH instead of inspecting PATH itself.",
    )
    parser.add_argument(
        "-L",
        "--log",
        dest="show_log",
        action="store_true",
        help="Show content of the log file.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Write debug details to the log file.",
    )
    return parser.parse_args(argv)


def inspect_path(path: Path, config: dict, console: Console) -> int:
    """Print the detail table for one path; a missing path is only a warning."""
    try:
        record = collect(path, text_probe_limit=get_text_probe_limit(config))
    except PathNotFoundError as err:
        logger.warning(str(err))
        return 0
    except InspectionError as err:
        logger.error(str(err))
        return 1
    console.print(build_record_table(record, get_styles(config)))
    return 0


def inspect_directory(directory: Path, config: dict, console: Console) -> int:
    """Print one row per directory entry, skipping entries that cannot be read."""
    bulk = get_bulk_settings(config)
    try:
        results = collect_all(
            directory,
            text_probe_limit=get_text_probe_limit(config),
            sort_entries=bulk["sort_entries"],
            workers=bulk["workers"],
        )
    except DirectoryUnreadableError as err:
        logger.error(str(err))
        return 1

    records = []
    for result in results:
        if isinstance(result, EntryError):
            logger.warning(str(result.error))
            continue
        records.append(result)

    console.print(build_listing_table(records, get_styles(config)))
    return 0


def print_log(config_dir: Path, console: Console) -> int:
    console.print("Available logs:", style="bold yellow")
    console.print(show_log_file(config_dir), markup=False, highlight=False, soft_wrap=True)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Run the tool and return the process exit code."""
    try:
        args = parse_args(argv)
        config_dir = ensure_config_dir()
    except ConfigDirUnavailableError as err:
        print(f"Unable to find or create a config directory: {err}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Received Ctrl-C!", file=sys.stderr)
        return 130

    try:
        # Log from the start so config problems reach the log file too
        setup_logging(config_dir, verbose=args.verbose)
        config_file = config_file_path(config_dir)
        create_default_config(config_file)
        config = load_config(config_file)
        level = get_log_level(config)
        if level != "INFO":
            setup_logging(config_dir, level, verbose=args.verbose)
        console = Console()

        if args.show_log or args.path is None:
            return print_log(config_dir, console)
        if args.path == BULK_SENTINEL:
            return inspect_directory(Path("."), config, console)
        if args.list_all:
            return inspect_directory(Path(args.path).expanduser(), config, console)
        return inspect_path(Path(args.path).expanduser(), config, console)
    except KeyboardInterrupt:
        # Everything is read-only, so there is nothing to undo
        print("Received Ctrl-C!", file=sys.stderr)
        return 130
    except Exception:
        logger.exception("Unexpected failure")
        return 1
    finally:
        close_logging()


if __name__ == "__main__":
    raise SystemExit(main())
