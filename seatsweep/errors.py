"""Exceptions raised by seatsweep."""

from typing import Any


class SeatsweepError(Exception):
    """Base class for seatsweep errors."""


class AccountConfigError(SeatsweepError):
    """Account configuration is missing or refers to an unknown account."""


class AdminViewError(SeatsweepError):
    """The authenticated admin members view could not be reached."""


class TableScanError(SeatsweepError):
    """The members table never rendered, so no further progress is possible.

    Carries whatever the sweep accomplished before the failure.
    """

    def __init__(self, message: str, result: Any = None):
        super().__init__(message)
        self.result = result


class RemovalError(SeatsweepError):
    """A step of the remove-member interaction did not complete."""

    def __init__(self, step: str, message: str):
        super().__init__(f"{step}: {message}")
        self.step = step
