"""CLI entrypoint for the Overpass infrastructure snapshot engine."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from infrascan.common.config_loader import load_settings
from infrascan.common.constants import EXIT_HARD_FAIL, EXIT_PARTIAL, EXIT_SUCCESS, LOG_LEVELS
from infrascan.common.errors import PipelineError
from infrascan.common.fs import write_json
from infrascan.common.http import HttpClient
from infrascan.common.logging import build_logger, generate_request_id, log_event
from infrascan.common.models import Location
from infrascan.overpass.catalog import QUERY_CATALOG, validate_catalog
from infrascan.overpass.orchestrator import collect_infrastructure
from infrascan.providers import collect_raw_data


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("command", choices=["snapshot", "raw-data", "categories"])
    parser.add_argument("--lat", type=float, default=None)
    parser.add_argument("--lon", type=float, default=None)
    parser.add_argument("--radius", type=float, default=None)
    parser.add_argument("--config", default=None)
    parser.add_argument("--overlay-config", default=None)
    parser.add_argument("--output", default=None)
    parser.add_argument("--summary-only", action="store_true")
    parser.add_argument("--log-level", default=None, choices=LOG_LEVELS)
    parser.add_argument("--log-file", default=None)
    parser.add_argument("--request-id", default=None)
    return parser.parse_args(argv)


def _list_categories() -> int:
    validate_catalog(QUERY_CATALOG)
    for category, query in QUERY_CATALOG.items():
        filters = " | ".join(tag_filter.render() for tag_filter in query.filters)
        print(f"{category}\t{','.join(query.element_types)}\t{filters}")
    return EXIT_SUCCESS


def _emit(payload: dict, output: str | None) -> None:
    if output:
        write_json(Path(output), payload)
    else:
        print(json.dumps(payload, ensure_ascii=False, indent=2))


def run_command(args: argparse.Namespace) -> int:
    if args.command == "categories":
        return _list_categories()

    if args.lat is None or args.lon is None:
        raise SystemExit(f"{args.command} requires --lat and --lon")

    request_id = args.request_id or generate_request_id()
    settings = load_settings(
        Path(args.config) if args.config else None,
        overlay_path=Path(args.overlay_config) if args.overlay_config else None,
    )
    logger = build_logger(
        request_id,
        level=args.log_level or settings.log_level,
        log_path=Path(args.log_file) if args.log_file else None,
    )

    try:
        location = Location(latitude=args.lat, longitude=args.lon)
        with HttpClient(
            timeout=settings.http_timeout,
            retry=settings.retry,
            pool_maxsize=settings.max_workers or len(QUERY_CATALOG),
        ) as client:
            if args.command == "raw-data":
                raw_data = collect_raw_data(
                    location,
                    args.radius,
                    settings=settings,
                    http_client=client,
                    logger=logger,
                    request_id=request_id,
                )
            else:
                snapshot = collect_infrastructure(
                    location,
                    args.radius,
                    settings=settings,
                    http_client=client,
                    logger=logger,
                    request_id=request_id,
                )
    except PipelineError as exc:
        log_event(
            logger,
            f"{args.command} aborted: {exc}",
            request_id=request_id,
            stage=args.command,
            event="SNAPSHOT_FAIL",
            status="error",
            error_code=exc.error_code,
        )
        return EXIT_HARD_FAIL

    if args.command == "raw-data":
        _emit(raw_data, args.output)
        failed = [name for name, result in raw_data.items() if "error" in result]
        if failed and len(failed) == len(raw_data):
            return EXIT_HARD_FAIL
        return EXIT_PARTIAL if failed else EXIT_SUCCESS

    _emit(snapshot.narrative_payload() if args.summary_only else snapshot.to_dict(), args.output)
    if snapshot.all_failed:
        return EXIT_HARD_FAIL
    if snapshot.failed_categories:
        return EXIT_PARTIAL
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    try:
        return run_command(args)
    except PipelineError:
        return EXIT_HARD_FAIL


if __name__ == "__main__":
    raise SystemExit(main())
