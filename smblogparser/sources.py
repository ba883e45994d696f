"""Raw-line sources: local log files and Loki query_range results.

Each source hands back logical records, reconstructed with the strategy that
matches how its lines arrive.
"""

import logging
from datetime import datetime
from typing import Generator

import requests

from smblogparser.errors import LokiQueryError
from smblogparser.reconstruct import Strategy, reconstruct

logger = logging.getLogger(__name__)

QUERY_RANGE_PATH = "/loki/api/v1/query_range"
DEFAULT_TIMEOUT = 30.0


def read_lines(filepath: str) -> Generator[str, None, None]:
    """Yield each line of a single file, line feed included."""
    with open(filepath, "r", encoding="utf-8", errors="replace") as f:
        for line in f:
            yield line


def read_log_file(filepath: str) -> list[str]:
    """Read a Samba log file and return its logical records."""
    records = reconstruct(read_lines(filepath), Strategy.DIRECT)
    logger.info("Read %d log records from file %s", len(records), filepath)
    return records


def _unix_nanos(ts: datetime) -> str:
    return str(int(ts.timestamp()) * 1_000_000_000 + ts.microsecond * 1_000)


class LokiClient:
    """Minimal client for Loki's query_range endpoint."""

    def __init__(self, base_url: str, timeout: float = DEFAULT_TIMEOUT,
                 session: requests.Session | None = None):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()

    def query_range(self, query: str, start: datetime, end: datetime,
                    limit: int = 0) -> list[str]:
        """Return the raw log lines of every stream, in response order."""
        params = {
            "query": query,
            "start": _unix_nanos(start),
            "end": _unix_nanos(end),
        }
        if limit > 0:
            params["limit"] = str(limit)

        url = self._base_url + QUERY_RANGE_PATH
        try:
            response = self._session.get(url, params=params, timeout=self._timeout)
        except requests.RequestException as e:
            raise LokiQueryError(f"failed to execute request: {e}") from e

        if not response.ok:
            raise LokiQueryError(
                f"unexpected status code {response.status_code}: {response.text}"
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise LokiQueryError(f"invalid JSON from Loki: {e}") from e

        lines = []
        for stream in payload.get("data", {}).get("result", []):
            for value in stream.get("values", []):
                if len(value) >= 2:
                    lines.append(value[1])
        return lines

    def fetch_records(self, query: str, start: datetime, end: datetime,
                      limit: int = 0) -> list[str]:
        """Query Loki and reassemble the one-line-per-result output."""
        lines = self.query_range(query, start, end, limit)
        logger.info("Retrieved %d log lines from Loki", len(lines))
        records = reconstruct(lines, Strategy.REASSEMBLE)
        logger.info("Reconstructed into %d multi-line log entries", len(records))
        return records
