"""
Analytics error taxonomy

Every failure raised by the aggregation / report pipeline carries an
ErrorKind so the API can tell bad input (4xx) from infrastructure
failures (5xx).
"""
from enum import Enum


class ErrorKind(str, Enum):
    INVALID_INPUT = "invalid_input"
    UPSTREAM_FAILURE = "upstream_failure"
    EXPORT_FAILURE = "export_failure"
    LEDGER_FAILURE = "ledger_failure"


class AnalyticsError(Exception):
    """Base class for analytics engine failures."""

    kind: ErrorKind = ErrorKind.UPSTREAM_FAILURE

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(AnalyticsError):
    """Unrecognised report format, statement type or domain."""

    kind = ErrorKind.INVALID_INPUT


class UpstreamFailureError(AnalyticsError):
    """A query against the transactional store failed."""

    kind = ErrorKind.UPSTREAM_FAILURE


class ExportFailureError(AnalyticsError):
    """The exporter could not render or write the report file."""

    kind = ErrorKind.EXPORT_FAILURE


class LedgerFailureError(AnalyticsError):
    """The report file was written but recording it failed."""

    kind = ErrorKind.LEDGER_FAILURE
