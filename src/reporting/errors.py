"""
Reporting Errors

Only a failure to read the underlying collections is reported to callers.
Malformed documents and empty windows are handled inside the aggregator.
"""


class ReportingError(Exception):
    """Base class for reporting failures"""


class UpstreamUnavailableError(ReportingError):
    """The document database could not be reached or returned a transport error"""

    def __init__(self, message: str = "Report data source is unavailable"):
        super().__init__(message)
        self.message = message
