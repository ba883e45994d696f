#!/usr/bin/env python3
"""smblogparser: turn Samba audit logs into per-user Prometheus gauges."""

import argparse
import logging
import sys

from smblogparser.aggregator import (
    aggregate,
    compute_stats,
    format_stats_json,
    format_stats_text,
)
from smblogparser.config import DEFAULT_CONFIG_PATH, Config, load_config
from smblogparser.errors import ExportError, SmbLogParserError
from smblogparser.export import events_to_csv, format_json
from smblogparser.parsers import parse_records
from smblogparser.publisher import MetricsPublisher
from smblogparser.sources import LokiClient, read_log_file

logger = logging.getLogger(__name__)

SAMPLE_COUNT = 3
SAMPLE_WIDTH = 100


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="smblogparser",
        description="Parse Samba audit logs and push per-user operation counters.",
    )
    parser.add_argument(
        "--config", default=DEFAULT_CONFIG_PATH,
        help=f"Path to config file (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "--file", default=None,
        help="Read logs from file instead of Loki (for testing)",
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Parse and aggregate, but do not push to the Pushgateway",
    )
    parser.add_argument(
        "--export-csv", default=None,
        help="Write parsed events to this CSV file",
    )
    parser.add_argument(
        "--print-events", action="store_true",
        help="Print parsed events to stdout as NDJSON",
    )
    parser.add_argument(
        "--stats", action="store_true",
        help="Print parse statistics to stdout as JSON",
    )
    return parser


def export_csv(events, path: str) -> None:
    try:
        with open(path, "w", encoding="utf-8", newline="") as f:
            rows = events_to_csv(events, f)
    except OSError as e:
        raise ExportError(f"failed to write CSV export {path}: {e}") from e
    logger.info("Exported %d events to %s", rows, path)


def fetch_records(config: Config, filepath: str | None) -> list[str]:
    if filepath:
        logger.info("Reading logs from file: %s", filepath)
        return read_log_file(filepath)

    start, end = config.query.time_range()
    logger.info("Querying Loki from %s to %s with query: %s",
                start.isoformat(), end.isoformat(), config.query.query)
    client = LokiClient(config.loki.url)
    return client.fetch_records(config.query.query, start, end, config.query.limit)


def run(args) -> int:
    config = load_config(args.config)
    records = fetch_records(config, args.file)

    if records:
        logger.info("Sample log records:")
        for i, record in enumerate(records[:SAMPLE_COUNT], start=1):
            logger.info("  Record %d: %s", i, record[:SAMPLE_WIDTH])

    events = parse_records(records, config.query.device)
    logger.info("Parsed %d SMB log events", len(events))
    stats = compute_stats(len(records), events)
    logger.info("Stats: %s", format_stats_text(stats))

    if args.stats:
        print(format_stats_json(stats))

    if args.print_events:
        for event in events:
            print(format_json(event))

    if args.export_csv:
        export_csv(events, args.export_csv)

    metrics = aggregate(events)
    logger.info("Aggregated metrics for %d users (%d operations)",
                len(metrics), sum(m.total for m in metrics.values()))

    publisher = MetricsPublisher(config.prometheus.pushgateway_url, config.prometheus.job_name)
    publisher.publish(metrics.values())

    if args.dry_run:
        logger.info("Dry run, skipping push")
        return 0

    publisher.push()
    logger.info("Successfully pushed metrics to Prometheus Pushgateway")
    return 0


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [SMBLOG] %(levelname)s %(message)s",
        stream=sys.stderr,
    )
    args = build_parser().parse_args(argv)
    try:
        return run(args)
    except SmbLogParserError as e:
        logger.error("%s", e)
        return 1
    except OSError as e:
        logger.error("Failed to read logs: %s", e)
        return 1


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        sys.exit(0)
