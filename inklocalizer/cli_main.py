# -*- coding: utf-8 -*-
"""
InkLocalizer CLI Main Module
"""

import sys
import argparse
import logging
from typing import List, Optional

from inklocalizer.core.exceptions import ConfigError, ExportError
from inklocalizer.core.localizer import Localizer, LocalizerResult
from inklocalizer.core.output_formatter import TableOutputFormatter
from inklocalizer.utils.config import DEFAULT_CONFIG_FILE, ConfigManager
from inklocalizer.version import VERSION


def setup_logging(verbose: bool):
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler()]
    )


def print_header():
    print("=" * 60)
    print(f"  InkLocalizer v{VERSION}")
    print("=" * 60)


def print_result(result: LocalizerResult):
    print("\n" + "=" * 60)
    if result.success:
        print("SUCCESS")
    else:
        print("FAILED")
    print(result.message)
    if result.stats:
        print("\nStatistics:")
        print(f"  Files scanned: {result.stats.get('files_scanned', 0)}")
        print(f"  Strings:       {result.stats.get('strings', 0)}")
        print(f"  Existing IDs:  {result.stats.get('existing_ids', 0)}")
        print(f"  New IDs:       {result.stats.get('new_ids', 0)}")
        print(f"  Files updated: {result.stats.get('files_updated', 0)}")
        if result.stats.get('duplicates'):
            print(f"  Duplicate IDs: {result.stats['duplicates']} (second occurrences dropped)")
    if result.error:
        print(f"Details: {result.error}")
    print("=" * 60)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="inklocalizer",
        description=f"InkLocalizer V{VERSION} - tag Ink dialogue with IDs and export string tables",
    )
    parser.add_argument("--folder", dest="root_folder",
                        help="Root folder to scan for Ink files (default: current directory)")
    parser.add_argument("--file-pattern", "--filePattern", dest="file_pattern",
                        help="Glob for files to include, searched in subfolders too (default: *.ink)")
    parser.add_argument("--retag", action="store_true", default=None,
                        help="Regenerate all localisation tag IDs, rather than keep old IDs")
    parser.add_argument("--csv", dest="csv_path", help="CSV file to export (default: none)")
    parser.add_argument("--json", dest="json_path", help="JSON file to export (default: none)")
    parser.add_argument("--po", dest="po_path", help="Gettext .po catalog to export (default: none)")
    parser.add_argument("--config", help=f"JSON settings file (default: {DEFAULT_CONFIG_FILE} if present)")
    parser.add_argument("--seed", dest="id_seed", type=int, help="Random seed for reproducible IDs")
    parser.add_argument("--debug-retag", dest="debug_retag_files", action="store_true", default=None,
                        help="Write tagged copies as <file>.txt instead of overwriting sources")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    return parser


def export_tables(localizer: Localizer, config_manager: ConfigManager) -> int:
    outputs = config_manager.table_output_settings
    formatter = TableOutputFormatter(localizer.store)
    try:
        written = formatter.export_all(outputs.as_outputs(), root_dir=localizer.root_dir)
    except ExportError as e:
        print(f"Error: {e}")
        print("Table not written.")
        return 1

    for file_format, path in written.items():
        print(f"{file_format.upper()} file written: {path}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    config_manager = ConfigManager(args.config or DEFAULT_CONFIG_FILE)
    try:
        config_manager.load_config(required=bool(args.config))
    except ConfigError as e:
        print(f"Error: {e}")
        return 1

    # Explicit CLI args take priority over the config file
    config_manager.apply_overrides(
        root_folder=args.root_folder,
        file_pattern=args.file_pattern,
        retag=args.retag,
        id_seed=args.id_seed,
        debug_retag_files=args.debug_retag_files,
        csv_path=args.csv_path,
        json_path=args.json_path,
        po_path=args.po_path,
    )

    print_header()
    localizer = Localizer(config_manager.localizer_settings)
    print(f"Root:    {localizer.get_directory_path()}")
    print(f"Pattern: {config_manager.localizer_settings.file_pattern}")
    if config_manager.localizer_settings.retag:
        print("Mode:    retag (all IDs regenerated)")
    print("-" * 40)

    try:
        result = localizer.run()
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
        return 2

    print_result(result)
    if not result.success:
        print("Not localized.")
        return 1

    return export_tables(localizer, config_manager)


if __name__ == "__main__":
    sys.exit(main())
