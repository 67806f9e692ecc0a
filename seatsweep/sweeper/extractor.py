"""Email extraction from flattened table row text.

Table cells are rendered without separators, so a row's text often reads
like ``jdoe@good.orgMemberNov 12, 2023``. Extraction first looks for an
address delimited by word boundaries and falls back to an unanchored match
when the address runs straight into the next column.
"""

import re
from dataclasses import dataclass


TLD_PATTERN = r"[a-zA-Z]{2,}"

# Top-level domain in a single case: "org", "ORG" or "Org"
SINGLE_CASE_TLD_PATTERN = r"(?:[a-z]{2,}|[A-Z][a-z]+|[A-Z]{2,})"

ADDRESS_PATTERN = r"[\w.-]+@[\w.-]+\." + TLD_PATTERN

GLUED_ADDRESS_PATTERN = r"[\w.-]+@[\w.-]+\." + SINGLE_CASE_TLD_PATTERN

# Address delimited by non-word characters (spaces, punctuation, ends)
BOUNDED_EMAIL_RE = re.compile(r"\b(" + ADDRESS_PATTERN + r")\b")

# Address glued to adjacent column text; the TLD ends where its case changes
UNANCHORED_EMAIL_RE = re.compile(r"(" + GLUED_ADDRESS_PATTERN + r")")

LEADING_ADDRESS_RE = re.compile(r"^(" + GLUED_ADDRESS_PATTERN + r")")

STRICT_EMAIL_RE = re.compile(r"[\w.-]+@[\w.-]+\.[a-zA-Z]{2,}")


@dataclass(frozen=True)
class EmailFound:
    """A row contained an email-shaped address."""

    email: str

    def __bool__(self) -> bool:
        return True


@dataclass(frozen=True)
class EmailNotFound:
    """A row had no text or no usable address."""

    def __bool__(self) -> bool:
        return False


EmailMatch = EmailFound | EmailNotFound

NOT_FOUND = EmailNotFound()


def _trim_candidate(candidate: str) -> str | None:
    """
    Reduce a regex match to its leading ``local@domain.tld`` part.

    Args:
        candidate: Raw matched substring.

    Returns:
        The trimmed address, or None if it fails strict validation.
    """
    candidate = candidate.strip()

    leading = LEADING_ADDRESS_RE.match(candidate)
    if leading:
        rest = candidate[leading.end():]
        # Cut only where the next column's text runs on, not inside the domain
        if not rest or rest[0].isalnum():
            candidate = leading.group(1)

    if STRICT_EMAIL_RE.fullmatch(candidate):
        return candidate

    return None


def extract_emails(text: str | None) -> list[str]:
    """
    Extract every valid address from row text, in document order.

    Args:
        text: Flattened text content of a row.

    Returns:
        List of addresses (possibly empty).
    """
    if not text:
        return []

    matches = BOUNDED_EMAIL_RE.findall(text)
    if not matches:
        matches = UNANCHORED_EMAIL_RE.findall(text)

    emails = []
    for match in matches:
        email = _trim_candidate(match)
        if email:
            emails.append(email)

    return emails


def extract_email(text: str | None) -> EmailMatch:
    """
    Extract the first valid address from row text.

    Never raises for rows without an address; those yield ``EmailNotFound``.

    Args:
        text: Flattened text content of a row.

    Returns:
        ``EmailFound`` with the address, or ``EmailNotFound``.
    """
    emails = extract_emails(text)
    if emails:
        return EmailFound(emails[0])
    return NOT_FOUND
