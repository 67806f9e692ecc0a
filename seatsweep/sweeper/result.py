"""Sweep run results and the one-line summary contract."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


NO_ANOMALIES = "no anomalies data"


class SweepStatus(str, Enum):
    """How a sweep ended."""

    COMPLETED = "completed"
    ITERATION_LIMIT = "iteration_limit"
    DEADLINE = "deadline"
    FAILED = "failed"


@dataclass
class SweepResult:
    """Outcome of one sweep over one account's members table."""

    deleted_emails: list[str] = field(default_factory=list)
    unconfirmed_emails: list[str] = field(default_factory=list)
    iterations: int = 0
    status: SweepStatus = SweepStatus.COMPLETED
    errors: list[dict[str, str]] = field(default_factory=list)
    dry_run: bool = False
    # Members a dry run would remove
    pending_emails: list[str] = field(default_factory=list)

    @property
    def deleted_count(self) -> int:
        return len(self.deleted_emails)

    @property
    def is_clean(self) -> bool:
        return not self.deleted_emails

    @property
    def succeeded(self) -> bool:
        return self.status != SweepStatus.FAILED

    def record_deletion(self, email: str, confirmed: bool = True) -> None:
        """Record a removal; unconfirmed removals still count as deleted."""
        self.deleted_emails.append(email)
        if not confirmed:
            self.unconfirmed_emails.append(email)

    def confirm_deletion(self, email: str) -> None:
        """Mark a recorded removal as verified."""
        if email in self.unconfirmed_emails:
            self.unconfirmed_emails.remove(email)

    def record_error(self, email: str, error: Exception | str) -> None:
        self.errors.append({"email": email, "error": str(error)})

    @classmethod
    def failure(cls, error: Exception | str, partial: "SweepResult | None" = None) -> "SweepResult":
        """Build a failed result, keeping any progress made before the failure."""
        result = partial if partial is not None else cls()
        result.status = SweepStatus.FAILED
        result.record_error("", error)
        return result

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "deleted": self.deleted_count,
            "deleted_emails": list(self.deleted_emails),
            "unconfirmed_emails": list(self.unconfirmed_emails),
            "iterations": self.iterations,
            "dry_run": self.dry_run,
            "pending_emails": list(self.pending_emails),
            "errors": self.errors[:10],
            "total_errors": len(self.errors),
        }


def format_summary_line(account_email: str, result: SweepResult) -> str:
    """
    Format the summary line reported for one account.

    Format: ``{account} | {clean|dirty} | {emails} | {success|failure}``

    Args:
        account_email: Email (or id) of the account that was swept.
        result: The sweep result.

    Returns:
        The summary line.
    """
    status = "clean" if result.is_clean else "dirty"
    emails = ", ".join(result.deleted_emails) if result.deleted_emails else NO_ANOMALIES
    outcome = "success" if result.succeeded else "failure"
    return f"{account_email} | {status} | {emails} | {outcome}"
