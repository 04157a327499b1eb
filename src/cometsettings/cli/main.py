"""
Command-line interface for cometsettings.

This module provides a CLI for inspecting and changing the enzyme settings
without opening the settings dialog.
"""

import argparse
import logging
import sys
from pathlib import Path

from .. import __version__
from ..config.settings import SettingsManager
from ..core.enzyme_config import describe_search_enzyme
from ..core.models import DirtyFlag, EditorResult, EnzymeTermini, FormatError
from ..core.option_sync import (
    ENZYME_TERMINI_SLOT,
    MISSED_CLEAVAGES_SLOT,
    SAMPLE_ENZYME_SLOT,
    SEARCH_ENZYME_SLOT,
    create_enzyme_synchronizer,
)
from ..infrastructure.logging_config import setup_logging, get_logger
from ..infrastructure.params_file import read_params_file, write_params_file
from ..infrastructure.record_codec import parse_records


logger = get_logger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """
    Create the argument parser for the CLI.

    Returns:
        Configured ArgumentParser.
    """
    parser = argparse.ArgumentParser(
        prog="cometsettings",
        description="Inspect and edit Comet enzyme search settings"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"cometsettings {__version__}"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="Settings file to use instead of the default location"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("show", help="Display the current enzyme settings")
    subparsers.add_parser("enzymes", help="List the enzyme catalogue")

    set_parser = subparsers.add_parser("set", help="Change enzyme settings")
    set_parser.add_argument("--search-enzyme", type=int, help="Search enzyme number")
    set_parser.add_argument("--sample-enzyme", type=int, help="Sample enzyme number")
    set_parser.add_argument("--missed-cleavages", type=int, help="Allowed missed cleavages")
    set_parser.add_argument("--termini", choices=[t.label for t in EnzymeTermini], help="Enzyme termini")

    import_parser = subparsers.add_parser("import-params", help="Import enzyme settings from a comet.params file")
    import_parser.add_argument("params", type=Path, help="Path to comet.params")

    export_parser = subparsers.add_parser("export-params", help="Export enzyme settings to a comet.params file")
    export_parser.add_argument("params", type=Path, help="Path to comet.params (updated in place if it exists)")

    return parser


def _no_editor() -> EditorResult:
    """The CLI cannot edit the catalogue interactively."""
    return EditorResult(committed=False)


def cmd_show(manager: SettingsManager, args: argparse.Namespace) -> int:
    """
    Display the current enzyme settings.

    Returns:
        Exit code (0 for success).
    """
    search = manager.get().search
    sync = create_enzyme_synchronizer(search, _no_editor, lambda: None)

    for slot in sync.slots:
        print(f"{slot.setting}: {slot.persisted_value} ({slot.displayed_label})")

    record = sync.store.current()[sync.slot(SEARCH_ENZYME_SLOT).displayed_index]
    print(describe_search_enzyme(record, search.allowed_missed_cleavages, search.enzyme_termini))
    return 0


def cmd_enzymes(manager: SettingsManager, args: argparse.Namespace) -> int:
    """
    List the enzyme catalogue, marking the search (S) and sample (s) enzymes.

    Returns:
        Exit code (0 for success).
    """
    search = manager.get().search
    sync = create_enzyme_synchronizer(search, _no_editor, lambda: None)
    search_index = sync.slot(SEARCH_ENZYME_SLOT).displayed_index
    sample_index = sync.slot(SAMPLE_ENZYME_SLOT).displayed_index

    for index, label in enumerate(sync.slot(SEARCH_ENZYME_SLOT).labels[:-1]):
        marks = ("S" if index == search_index else " ") + ("s" if index == sample_index else " ")
        print(f"{marks} {index:>3}. {label}")
    return 0


def cmd_set(manager: SettingsManager, args: argparse.Namespace) -> int:
    """
    Change enzyme settings and save them if anything changed.

    Returns:
        Exit code (0 for success).
    """
    search = manager.get().search
    dirty = DirtyFlag()
    sync = create_enzyme_synchronizer(search, _no_editor, dirty.notify_dirty)

    requested = {
        SEARCH_ENZYME_SLOT: args.search_enzyme,
        SAMPLE_ENZYME_SLOT: args.sample_enzyme,
        MISSED_CLEAVAGES_SLOT: args.missed_cleavages,
    }
    if args.termini is not None:
        requested[ENZYME_TERMINI_SLOT] = sync.slot(ENZYME_TERMINI_SLOT).labels.index(args.termini)

    for slot_id, index in requested.items():
        if index is None:
            continue
        slot = sync.slot(slot_id)
        if not 0 <= index < len(slot.labels) or index == slot.sentinel_index:
            logger.error(f"{slot.setting}: {index} is not a valid choice")
            return 1
        sync.select(slot_id, index)

    sync.reconcile()
    if not dirty:
        print("No settings changed")
        return 0

    manager.save()
    dirty.clear()
    print(f"Settings saved to {manager.config_file}")
    return 0


def cmd_import_params(manager: SettingsManager, args: argparse.Namespace) -> int:
    """
    Import enzyme settings from a params file and save them.

    Returns:
        Exit code (0 for success).
    """
    try:
        imported = read_params_file(args.params)
        create_enzyme_synchronizer(imported, _no_editor, lambda: None)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to import {args.params}: {e}")
        return 1

    settings = manager.get()
    if imported == settings.search:
        print("No settings changed")
        return 0

    settings.search = imported
    manager.save()
    print(f"Imported {len(parse_records(imported.enzyme_info))} enzymes from {args.params}")
    return 0


def cmd_export_params(manager: SettingsManager, args: argparse.Namespace) -> int:
    """
    Export enzyme settings to a params file.

    Returns:
        Exit code (0 for success).
    """
    try:
        write_params_file(args.params, manager.get().search)
    except (OSError, FormatError) as e:
        logger.error(f"Failed to export {args.params}: {e}")
        return 1

    print(f"Exported enzyme settings to {args.params}")
    return 0


COMMANDS = {
    "show": cmd_show,
    "enzymes": cmd_enzymes,
    "set": cmd_set,
    "import-params": cmd_import_params,
    "export-params": cmd_export_params,
}


def main(argv=None):
    """
    Main entry point for the CLI.

    Args:
        argv: Argument list, defaults to sys.argv[1:].

    Returns:
        Exit code.
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    # Setup logging
    log_level = logging.DEBUG if args.verbose else logging.WARNING
    setup_logging(level=log_level, log_to_file=False)

    handler = COMMANDS.get(args.command)
    if handler is None:
        parser.print_help()
        return 0

    manager = SettingsManager(config_file=args.config)
    manager.load()

    try:
        return handler(manager, args)
    except ValueError as e:
        logger.error(f"Invalid enzyme settings in {manager.config_file}: {e}")
        return 1
    except OSError as e:
        logger.error(f"Failed to save settings: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
