"""Account configuration read from environment variables.

Accounts are resolved from, in order of precedence:

1. ``CHATGPT_USERS``: a JSON array such as
   ``[{"id": "user1", "email": "a@example.com", "password": "..."}]``
2. Numbered pairs ``CHATGPT_USER1_EMAIL`` / ``CHATGPT_USER1_PASSWORD``,
   ``CHATGPT_USER2_EMAIL`` / ``CHATGPT_USER2_PASSWORD``, ...
3. A single ``CHATGPT_EMAIL`` / ``CHATGPT_PASSWORD`` pair.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from seatsweep.errors import AccountConfigError

from .storage import auth_file_for

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserAccount:
    """A console account and where its session state is stored."""

    id: str
    email: str
    password: str
    auth_file: Path

    def __repr__(self) -> str:
        return f"UserAccount(id={self.id!r}, email={self.email!r}, auth_file={str(self.auth_file)!r})"


def _strip_quotes(value: str) -> str:
    """Remove one pair of surrounding quotes left over from shell exports."""
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def _accounts_from_json(raw: str) -> list[UserAccount] | None:
    try:
        users = json.loads(_strip_quotes(raw))
    except json.JSONDecodeError as e:
        logger.error("Could not parse CHATGPT_USERS: %s", e)
        return None

    if not isinstance(users, list):
        logger.error("CHATGPT_USERS must be a JSON array")
        return []

    accounts = []
    for index, user in enumerate(users, start=1):
        user_id = user.get("id") or f"user{index}"
        auth_file = user.get("authFile") or user.get("auth_file")
        accounts.append(
            UserAccount(
                id=user_id,
                email=user.get("email", ""),
                password=user.get("password", ""),
                auth_file=Path(auth_file) if auth_file else auth_file_for(user_id),
            )
        )
    return accounts


def _accounts_from_numbered_env() -> list[UserAccount]:
    accounts = []
    index = 1

    while True:
        email = os.getenv(f"CHATGPT_USER{index}_EMAIL")
        password = os.getenv(f"CHATGPT_USER{index}_PASSWORD")
        if not email or not password:
            break

        user_id = f"user{index}"
        accounts.append(
            UserAccount(id=user_id, email=email, password=password, auth_file=auth_file_for(user_id))
        )
        index += 1

    return accounts


def get_user_accounts() -> list[UserAccount]:
    """
    Get all configured accounts.

    Returns:
        List of accounts, empty if nothing is configured.
    """
    raw = os.getenv("CHATGPT_USERS")
    if raw:
        accounts = _accounts_from_json(raw)
        if accounts is not None:
            return accounts

    accounts = _accounts_from_numbered_env()
    if accounts:
        return accounts

    email = os.getenv("CHATGPT_EMAIL")
    password = os.getenv("CHATGPT_PASSWORD")
    if email and password:
        return [UserAccount(id="user", email=email, password=password, auth_file=auth_file_for("user"))]

    return []


def get_user_account(user_id: str) -> Optional[UserAccount]:
    """Get a configured account by id."""
    for account in get_user_accounts():
        if account.id == user_id:
            return account
    return None


def select_accounts(user_id: str | None = None) -> list[UserAccount]:
    """
    Select the accounts to act on.

    Args:
        user_id: Only this account. Falls back to ``CHATGPT_USER_ID``.

    Returns:
        The selected accounts.

    Raises:
        AccountConfigError: If no accounts are configured or the id is unknown.
    """
    accounts = get_user_accounts()
    if not accounts:
        raise AccountConfigError(
            "No user accounts found. Set CHATGPT_USERS, CHATGPT_USER1_EMAIL/"
            "CHATGPT_USER1_PASSWORD or CHATGPT_EMAIL/CHATGPT_PASSWORD."
        )

    user_id = user_id or os.getenv("CHATGPT_USER_ID")
    if not user_id:
        return accounts

    account = get_user_account(user_id)
    if account is not None:
        return [account]

    available = ", ".join(a.id for a in accounts)
    raise AccountConfigError(f'User with ID "{user_id}" not found. Available users: {available}')
