"""Admin console page access."""

from .members_table import MemberRow, MembersTable, PlaywrightMembersTable
from .navigation import get_base_url, open_members_page, wait_for_members_view

__all__ = [
    "MemberRow",
    "MembersTable",
    "PlaywrightMembersTable",
    "get_base_url",
    "open_members_page",
    "wait_for_members_view",
]
