"""Session-state files: one Playwright storage-state JSON per account."""

import os
from dataclasses import dataclass
from pathlib import Path


def get_auth_dir() -> Path:
    """Get the directory holding saved session files."""
    return Path(os.getenv("AUTH_DIR", "playwright/.auth"))


def auth_file_for(account_id: str) -> Path:
    """Get the session file path for an account id."""
    return get_auth_dir() / f"{account_id}.json"


@dataclass(frozen=True)
class SavedSession:
    """A saved session file and the account it belongs to."""

    account_id: str
    account_email: str
    auth_file: Path


def list_auth_files(auth_dir: Path | None = None) -> list[Path]:
    """
    List saved session files, sorted by name.

    Args:
        auth_dir: Directory to scan. Uses default if not provided.

    Returns:
        Paths of ``*.json`` files; empty if the directory does not exist.
    """
    auth_dir = auth_dir or get_auth_dir()
    if not auth_dir.is_dir():
        return []
    return sorted(p for p in auth_dir.glob("*.json") if p.is_file())


def discover_sessions(
    auth_dir: Path | None = None,
    emails: dict[str, str] | None = None,
) -> list[SavedSession]:
    """
    Build the list of sessions to run from the auth directory.

    The account id is the file stem. The reported email comes from the
    configured account with that id, falling back to the id itself.

    Args:
        auth_dir: Directory to scan.
        emails: Mapping of account id to email.

    Returns:
        One session per file.
    """
    emails = emails or {}
    sessions = []
    for path in list_auth_files(auth_dir):
        account_id = path.stem
        sessions.append(
            SavedSession(
                account_id=account_id,
                account_email=emails.get(account_id) or account_id,
                auth_file=path,
            )
        )
    return sessions


def delete_auth_files(paths: list[Path]) -> int:
    """
    Delete saved session files.

    Returns:
        Number of files deleted.
    """
    deleted = 0
    for path in paths:
        if path.exists():
            path.unlink()
            deleted += 1
    return deleted
