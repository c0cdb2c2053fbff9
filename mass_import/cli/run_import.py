# =============================================================================
# mass_import/cli/run_import.py - Mass Import Command
# =============================================================================
#
# Loads a JSON export from disk, maps every entry through the adapter for
# its source type, and runs one import session against the SQLite catalog.
#
# Typical usage:
#   python -m mass_import.cli.run_import --file art.geojson --source-type osm-import
#   python -m mass_import.cli.run_import --file vancouver.json \
#       --source-type api-import --source-name vancouver-opendata --dry-run
#   python -m mass_import.cli.run_import --file dump.json \
#       --source-type crowd-import --auto-approve --json
#
# Accepted file shapes:
#   - a JSON list of records
#   - a GeoJSON FeatureCollection ({"type": "FeatureCollection", "features": [...]})
#   - an Overpass API response ({"elements": [...]})
#   - a wrapper object ({"records": [...]})
#
# Exit codes:
#   0 - every record was imported, skipped as a duplicate, or dry-run
#   1 - at least one record failed
#   2 - configuration or input-file error; no record was processed
# =============================================================================

"""Command-line entry point for running a mass import session.

Usage::

    python -m mass_import.cli.run_import --file data.json --source-type osm-import
    python -m mass_import.cli.run_import --file data.json --source-type api-import --json
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from mass_import.adapters import map_records
from mass_import.config.loader import build_import_config, load_config
from mass_import.config.settings import Settings
from mass_import.models.records import SourceType
from mass_import.models.session import ImportSessionResult
from mass_import.pipeline.orchestrator import BatchImportOrchestrator
from mass_import.providers.audit.sqlite_audit_sink import SQLiteAuditSink
from mass_import.providers.catalog.sqlite_catalog_store import SQLiteCatalogStore
from mass_import.utils.errors import ConfigurationError
from mass_import.utils.logging import configure_logging

EXIT_OK = 0
EXIT_RECORD_FAILURES = 1
EXIT_CONFIG_ERROR = 2


# ---------------------------------------------------------------------------
# Input loading
# ---------------------------------------------------------------------------


def extract_records(payload: Any) -> list[Any]:
    """Pull the record list out of a decoded JSON document.

    Raises
    ------
    ConfigurationError
        If the document has none of the accepted shapes.
    """
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in ("features", "elements", "records"):
            if isinstance(payload.get(key), list):
                return payload[key]
    raise ConfigurationError(
        "Input must be a JSON list, a GeoJSON FeatureCollection, an Overpass "
        "response or an object with a 'records' list"
    )


def load_input(path: Path) -> list[Any]:
    """Read and decode the input file."""
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigurationError(f"Could not read {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"{path} is not valid JSON: {exc}") from exc
    return extract_records(payload)


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


def format_summary(result: ImportSessionResult, dry_run: bool) -> str:
    """Human-readable session report."""
    sep = "=" * 60
    lines = [
        sep,
        "  Mass Import - Session Summary" + ("  (DRY RUN)" if dry_run else ""),
        sep,
        f"Total records:       {result.total_records}",
        f"Imported:            {result.successful_imports}",
        f"Duplicates skipped:  {result.duplicates_skipped}",
        f"Failed:              {result.failed_imports}",
        f"Artworks created:    {len(result.created_artwork_ids)}",
        f"Artists created:     {len(result.created_artist_ids)}",
        f"Submissions created: {len(result.created_submission_ids)}",
        f"Processing time:     {result.processing_time_ms} ms",
    ]
    if result.errors:
        lines.append("")
        lines.append("ERRORS")
        lines.append("-" * 40)
        lines.extend(f"  {err}" for err in result.errors[:50])
        if len(result.errors) > 50:
            lines.append(f"  ... and {len(result.errors) - 50} more")
    if result.warnings:
        lines.append("")
        lines.append("WARNINGS")
        lines.append("-" * 40)
        lines.extend(f"  {warning}" for warning in result.warnings[:50])
        if len(result.warnings) > 50:
            lines.append(f"  ... and {len(result.warnings) - 50} more")
    lines.append(sep)
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------


async def _run(args: argparse.Namespace, settings: Settings) -> int:
    config_data = load_config(args.config, settings=settings)
    import_section = dict(config_data.get("import") or {})
    import_section.setdefault(
        "duplicate_check_radius", config_data["duplicates"]["search_radius_m"]
    )

    source_type = SourceType.parse(args.source_type)
    config = build_import_config(
        import_section,
        source_name=args.source_name,
        dry_run=True if args.dry_run else None,
        auto_approve=True if args.auto_approve else None,
        batch_size=args.batch_size,
        duplicate_check_radius=args.radius,
        skip_duplicates=False if args.no_skip_duplicates else None,
        create_artists=False if args.no_create_artists else None,
    )

    blobs = load_input(Path(args.file))
    mapped, failures = map_records(source_type, blobs)

    store = SQLiteCatalogStore(args.db or config_data["storage"]["catalog_db_path"])
    await store.initialize()
    audit_sink = SQLiteAuditSink(config_data["storage"]["audit_db_path"])
    await audit_sink.initialize()

    orchestrator = BatchImportOrchestrator(store, config, audit_sink=audit_sink, settings=settings)
    result = await orchestrator.run(mapped, prior_failures=failures)

    if args.json_output:
        print(json.dumps(result.to_summary(), indent=2))
    else:
        print(format_summary(result, config.dry_run))

    return EXIT_RECORD_FAILURES if result.failed_imports else EXIT_OK


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m mass_import.cli.run_import",
        description=(
            "Import public-art records from a JSON export, skipping entries "
            "that already exist in the catalog."
        ),
    )
    parser.add_argument("--file", required=True, help="Path to the JSON export.")
    parser.add_argument(
        "--source-type",
        required=True,
        choices=[s.value for s in SourceType],
        help="Which adapter maps the file's records.",
    )
    parser.add_argument(
        "--source-name",
        default=None,
        help="Source attribution recorded on submissions (default from config).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Run validation and duplicate checks without writing to the catalog.",
    )
    parser.add_argument(
        "--auto-approve",
        action="store_true",
        help="Approve created submissions immediately.",
    )
    parser.add_argument("--batch-size", type=int, default=None, help="Records per batch.")
    parser.add_argument(
        "--radius",
        type=float,
        default=None,
        help="Duplicate candidate search radius in meters.",
    )
    parser.add_argument(
        "--no-skip-duplicates",
        action="store_true",
        help="Import every record without running the duplicate check.",
    )
    parser.add_argument(
        "--no-create-artists",
        action="store_true",
        help="Do not resolve or submit artists.",
    )
    parser.add_argument(
        "--config",
        default="config/config.yaml",
        help="YAML configuration file (default: config/config.yaml).",
    )
    parser.add_argument("--db", default=None, help="Catalog SQLite database path.")
    parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Print the session summary as JSON.",
    )
    return parser


def run_cli(argv: list[str] | None = None) -> int:
    """Parse ``argv``, run one session and return the exit code."""
    args = _build_parser().parse_args(argv)
    settings = Settings()
    # Logs go to stderr; stdout carries only the summary.
    configure_logging(settings.log_level, json_output=settings.app_env == "production")

    try:
        return asyncio.run(_run(args, settings))
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR


def main() -> None:
    sys.exit(run_cli())


if __name__ == "__main__":
    main()
