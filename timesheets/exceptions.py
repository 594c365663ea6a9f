"""
Error taxonomy for the timesheet service.

Every failure is local to the operation that raised it: callers report the
message and carry on, nothing here is meant to stop the process.
"""


class TimesheetError(Exception):
    """Base class for all errors raised by the service."""


class StoreNotConfiguredError(TimesheetError):
    """The document store / identity provider has no configuration."""

    def __init__(self, operation: str = "access the document store"):
        super().__init__(
            f"Cannot {operation}: the document store is not configured. "
            "Set DATABASE_URL in the environment or .env file."
        )
        self.operation = operation


class WriteError(TimesheetError):
    """A single-shot write to the store failed. Never retried."""

    def __init__(self, collection: str, reason: str):
        super().__init__(f"Failed to write to '{collection}': {reason}")
        self.collection = collection
        self.reason = reason


class InvalidInputError(TimesheetError):
    """Input rejected before any write was attempted."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class AuthenticationError(TimesheetError):
    """Missing, unknown or expired identity."""
