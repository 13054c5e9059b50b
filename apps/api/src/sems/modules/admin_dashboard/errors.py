"""
Admin Dashboard Errors

Share the exit request error base so routers map them the same way.
"""

from sems.modules.exit_requests.errors import ExitRequestServiceError, ValidationError


class EmptySelectionError(ValidationError):
    """Raised when a bulk delete names no entries."""

    def __init__(self):
        super().__init__(
            message="Invalid or empty IDs array provided.",
            error_code="EMPTY_SELECTION",
        )


class NoMatchingEntriesError(ExitRequestServiceError):
    """Raised when none of the IDs in a bulk delete exist."""

    def __init__(self):
        super().__init__(
            message="No matching records found to delete.",
            error_code="DASHBOARD_ENTRIES_NOT_FOUND",
            status_code=404,
        )
