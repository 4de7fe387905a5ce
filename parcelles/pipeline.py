#!/usr/bin/env python3
"""
Main pipeline orchestrator.

Commands:
1. process - Join social housing parcels with cadastral geometries
2. add-id  - Add the CNIG id column to the social housing file
3. check   - Show headers and row counts of both input files

Usage:
    parcelles process --config config.yaml
    parcelles process --social parcelles-des-personnes-morales.csv \
                      --cadastral parcelles_cadastrales.csv \
                      --output-csv out.csv --output-geojson out.geojson
    parcelles add-id --social parcelles-des-personnes-morales.csv --yes
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Callable, List, Optional

from tqdm import tqdm

from .cadastral import build_geometry_index
from .config import Config, load_config
from .csv_io import check_columns, count_data_rows, create_backup, write_rows
from .enrich import IdColumnResult, add_id_column, id_column_exists
from .errors import NotFound, ParcelError
from .geometry import write_geojson
from .join import JoinSummary, ParcelJoiner

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False, log_file: Optional[Path] = None) -> None:
    """Configure logging to console and optionally to a file."""
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    root.handlers = []

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    root.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s'))
        root.addHandler(file_handler)


def run_process(config: Config, progress: Optional[Callable[[], None]] = None) -> JoinSummary:
    """
    Build the geometry index, stream the join, write both outputs.

    The output CSV is written while the social file is read; the GeoJSON
    is written once at the end.
    """
    cc = config.cadastral_columns
    index = build_geometry_index(
        config.cadastral_file,
        cc.id_parcellaire,
        cc.geometry,
        cc.lat,
        cc.lon
    )

    joiner = ParcelJoiner(index, config.columns, config.location_name, geometry_column=cc.geometry)
    rows = joiner.iter_rows(config.social_file, progress=progress)
    write_rows(config.output_csv, rows)
    write_geojson(config.output_geojson, joiner.feature_collection())

    return joiner.summary


def log_summary(summary: JoinSummary, duration: float, config: Config) -> None:
    logger.info("=" * 60)
    logger.info("Processing complete")
    logger.info("=" * 60)
    for label, value in summary.as_rows():
        logger.info(f"  {label:<32s} {value:>8d}")
    logger.info(f"  {'Processing duration':<32s} {duration:>7.2f}s")
    logger.info("Output files:")
    logger.info(f"  CSV: {config.output_csv}")
    logger.info(f"  GeoJSON: {config.output_geojson}")


def cmd_process(config: Config, args: argparse.Namespace) -> bool:
    start_time = time.time()

    if not config.social_file.exists():
        raise NotFound(config.social_file)

    if args.backup:
        for output in (config.output_csv, config.output_geojson):
            if output.exists():
                create_backup(output)

    total = count_data_rows(config.social_file)
    logger.info(f"Total: {total} social housing parcels")

    with tqdm(total=total, desc="Processing", disable=args.no_progress) as pbar:
        summary = run_process(config, progress=lambda: pbar.update(1))

    log_summary(summary, time.time() - start_time, config)
    return True


def log_id_column_result(result: IdColumnResult, config: Config) -> None:
    logger.info(f"  Lines processed:        {result.total}")
    logger.info(f"  Successful conversions: {result.converted}")
    logger.info(f"  Conversion errors:      {result.errors}")
    logger.info(f"File updated: {config.social_file}")
    if result.backup_path:
        logger.info(f"Backup: {result.backup_path}")
    logger.info("Sample conversions:")
    for majic, cnig in result.samples:
        logger.info(f"  MAJIC: {majic} -> CNIG: {cnig}")


def confirm(prompt: str) -> bool:
    try:
        answer = input(prompt)
    except EOFError:
        return False
    return answer.strip().lower() in ('y', 'yes')


def cmd_add_id(config: Config, args: argparse.Namespace) -> bool:
    columns = config.columns

    if id_column_exists(config.social_file, columns.id_parcellaire) and not args.yes:
        if not confirm(f"Column '{columns.id_parcellaire}' already exists. Update it? (y/n) "):
            logger.info("Operation cancelled")
            return True

    result = add_id_column(
        config.social_file,
        columns.code_parcelle,
        columns.id_parcellaire,
        backup=not args.no_backup
    )
    log_id_column_result(result, config)
    return True


def cmd_check(config: Config, args: argparse.Namespace) -> bool:
    cc = config.cadastral_columns
    checks = [
        ('Social housing', config.social_file, [config.columns.gps_coords, config.columns.code_parcelle]),
        ('Cadastral', config.cadastral_file, [cc.id_parcellaire, cc.geometry]),
    ]
    for label, path, required in checks:
        header = check_columns(path, required)
        logger.info(f"{label} file: {path}")
        logger.info(f"  Columns: {list(header)}")
        logger.info(f"  Data rows: {count_data_rows(path)}")
    logger.info("All required columns present")
    return True


COMMANDS = {
    'process': cmd_process,
    'add-id': cmd_add_id,
    'check': cmd_check,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='parcelles',
        description='Reconcile social housing parcels with cadastral geometries',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument('--config', type=Path, help='YAML configuration file')
    parser.add_argument('--social', type=Path, help='Social housing CSV file')
    parser.add_argument('--cadastral', type=Path, help='Cadastral CSV file')
    parser.add_argument('--location-name', help='Value of the appended name column')
    parser.add_argument('--verbose', action='store_true', help='Enable verbose logging')
    parser.add_argument('--log-file', type=Path, help='Also write logs to this file')

    subparsers = parser.add_subparsers(dest='command', required=True)

    p_process = subparsers.add_parser('process', help='Join parcels and export CSV + GeoJSON')
    p_process.add_argument('--output-csv', type=Path, help='Output CSV file')
    p_process.add_argument('--output-geojson', type=Path, help='Output GeoJSON file')
    p_process.add_argument('--backup', action='store_true',
                           help='Back up existing output files before overwriting')
    p_process.add_argument('--no-progress', action='store_true', help='Hide the progress bar')

    p_add = subparsers.add_parser('add-id', help='Add the CNIG id column to the social file')
    p_add.add_argument('--yes', action='store_true', help='Update an existing column without asking')
    p_add.add_argument('--no-backup', action='store_true', help='Do not back up the social file')

    subparsers.add_parser('check', help='Check headers of both input files')

    return parser


def make_config(args: argparse.Namespace) -> Config:
    config = load_config(args.config) if args.config else Config()
    config = config.with_overrides(
        social_file=args.social,
        cadastral_file=args.cadastral,
        output_csv=getattr(args, 'output_csv', None),
        output_geojson=getattr(args, 'output_geojson', None),
        location_name=args.location_name,
    )
    return config.resolved()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose, args.log_file)

    try:
        config = make_config(args)
        success = COMMANDS[args.command](config, args)
    except (ParcelError, ValueError) as e:
        logger.error(str(e))
        return 1

    return 0 if success else 1


if __name__ == '__main__':
    sys.exit(main())
