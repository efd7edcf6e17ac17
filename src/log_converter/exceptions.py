"""
Exceptions raised while fetching and converting activity logs.
"""

from typing import Optional


class LogConverterError(Exception):
    """Base class for all log converter errors."""


class MalformedDateError(LogConverterError):
    """An activity date does not match the DD-MM-YYYY format."""

    def __init__(self, date_string: str):
        self.date_string = date_string
        super().__init__(f"invalid date format: {date_string}")


class ProjectNotFoundError(LogConverterError):
    """The project filter matched none of the fetched activities."""

    def __init__(self, project_filter: str):
        self.project_filter = project_filter
        super().__init__(f"no activities found for project: {project_filter}")


class InvalidDurationRangeError(LogConverterError):
    """Randomization was requested with max_duration below min_duration."""

    def __init__(self, min_duration: int, max_duration: int):
        self.min_duration = min_duration
        self.max_duration = max_duration
        super().__init__(
            f"invalid duration range: min_duration={min_duration} is greater than max_duration={max_duration}"
        )


class FetchFailedError(LogConverterError):
    """A request to the ESS API failed or returned an unusable payload."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class AuthenticationError(FetchFailedError):
    """Login against the ESS API was rejected."""
