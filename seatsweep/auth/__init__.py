"""Account configuration, saved sessions and login."""

from .accounts import (
    UserAccount,
    get_user_account,
    get_user_accounts,
    select_accounts,
)
from .login import authenticate_user, login_account
from .storage import (
    SavedSession,
    auth_file_for,
    delete_auth_files,
    discover_sessions,
    get_auth_dir,
    list_auth_files,
)

__all__ = [
    "SavedSession",
    "UserAccount",
    "auth_file_for",
    "authenticate_user",
    "delete_auth_files",
    "discover_sessions",
    "get_auth_dir",
    "get_user_account",
    "get_user_accounts",
    "list_auth_files",
    "login_account",
    "select_accounts",
]
