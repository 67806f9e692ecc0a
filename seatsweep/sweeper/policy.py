"""Domain allow-list deciding which members are kept."""

import os
from dataclasses import dataclass


DEFAULT_PROTECTED_DOMAINS = ("hinedigitals.store",)


def get_protected_domains() -> tuple[str, ...]:
    """Get the protected domains from environment (comma separated)."""
    raw = os.getenv("PROTECTED_DOMAINS", "")
    domains = tuple(d.strip().lower() for d in raw.split(",") if d.strip())
    return domains or DEFAULT_PROTECTED_DOMAINS


def split_address(email: str) -> tuple[str, str] | None:
    """
    Split an address into local part and domain at the last ``@``.

    Returns:
        ``(local, domain)`` with the domain lowercased, or None if the
        string is not address-shaped.
    """
    local, sep, domain = email.strip().rpartition("@")
    if not sep or not local or not domain:
        return None
    return local, domain.lower().rstrip(".")


@dataclass(frozen=True)
class DomainPolicy:
    """
    Retention rule for workspace members.

    A member is protected when the domain of their address equals one of
    the protected domains or is a subdomain of one. Everything else is a
    removal target.
    """

    protected_domains: tuple[str, ...] = DEFAULT_PROTECTED_DOMAINS

    def __post_init__(self):
        normalized = tuple(d.strip().lower() for d in self.protected_domains if d and d.strip())
        object.__setattr__(self, "protected_domains", normalized)

    @classmethod
    def from_env(cls) -> "DomainPolicy":
        return cls(protected_domains=get_protected_domains())

    @classmethod
    def for_domains(cls, domains: list[str] | tuple[str, ...]) -> "DomainPolicy":
        cleaned = tuple(d.strip().lower() for d in domains if d and d.strip())
        return cls(protected_domains=cleaned or DEFAULT_PROTECTED_DOMAINS)

    def is_protected(self, email: str) -> bool:
        """
        Check whether an address belongs to a protected domain.

        Args:
            email: Address extracted from a member row.

        Returns:
            True if the member must be kept.
        """
        parts = split_address(email)
        if parts is None:
            return False

        _, domain = parts
        for protected in self.protected_domains:
            if domain == protected or domain.endswith("." + protected):
                return True
        return False

    def is_violation(self, email: str) -> bool:
        """Check whether an address should be removed."""
        return not self.is_protected(email)

    def describe(self) -> str:
        return ", ".join(self.protected_domains)
