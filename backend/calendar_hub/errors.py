from fastapi import status

class BaseAppException(Exception):
    def __init__(self, code: str, message: str, http_status: int):
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)

class ConfigurationError(Exception):
    """Raised at startup when the calendar source configuration is unusable."""

class AggregationUnavailableError(BaseAppException):
    """A request-scoped failure while serving aggregated data.

    ``error`` is the public label rendered in the ``{error, message}`` body.
    """
    error = "Aggregation failed"

    def __init__(self, message: str):
        super().__init__("AGGREGATION_FAILED", message, status.HTTP_500_INTERNAL_SERVER_ERROR)

class EventsUnavailableError(AggregationUnavailableError):
    error = "Failed to fetch calendar events"

class StatsUnavailableError(AggregationUnavailableError):
    error = "Failed to fetch statistics"
