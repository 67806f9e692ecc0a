"""Sweep module: find and remove members outside the allow-list."""

from .budget import SweepBudget
from .executor import (
    find_violating_row,
    preview_violations,
    remove_member,
    sweep_members,
    verify_removal,
)
from .extractor import EmailFound, EmailNotFound, extract_email, extract_emails
from .policy import DomainPolicy, get_protected_domains
from .result import NO_ANOMALIES, SweepResult, SweepStatus, format_summary_line

__all__ = [
    "DomainPolicy",
    "EmailFound",
    "EmailNotFound",
    "NO_ANOMALIES",
    "SweepBudget",
    "SweepResult",
    "SweepStatus",
    "extract_email",
    "extract_emails",
    "find_violating_row",
    "format_summary_line",
    "get_protected_domains",
    "preview_violations",
    "remove_member",
    "sweep_members",
    "verify_removal",
]
