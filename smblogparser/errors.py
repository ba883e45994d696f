"""Exceptions raised by the I/O collaborators. The parsing core never raises."""


class SmbLogParserError(Exception):
    """Base class for all smblogparser errors."""


class ConfigError(SmbLogParserError):
    """Config file missing, unreadable, or not a YAML mapping."""


class LokiQueryError(SmbLogParserError):
    """Loki query_range request failed or returned a non-2xx status."""


class MetricsPushError(SmbLogParserError):
    """Pushgateway rejected the push or could not be reached."""


class ExportError(SmbLogParserError):
    """Event export file could not be written."""
