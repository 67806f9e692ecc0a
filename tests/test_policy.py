"""Tests for the domain allow-list."""

from seatsweep.sweeper import DomainPolicy, get_protected_domains


class TestDomainPolicy:
    """Tests for protected-domain checks."""

    def test_protected_domain(self):
        """Test an address on the protected domain is kept."""
        policy = DomainPolicy()

        assert policy.is_protected("a@hinedigitals.store") is True

    def test_other_domain(self):
        """Test an address on another domain is a violation."""
        policy = DomainPolicy()

        assert policy.is_protected("a@other.com") is False
        assert policy.is_violation("a@other.com") is True

    def test_subdomain_is_protected(self):
        """Test subdomains of a protected domain are kept."""
        assert DomainPolicy().is_protected("ops@eu.hinedigitals.store") is True

    def test_lookalike_domains_are_not_protected(self):
        """Test domains that merely contain the protected domain are removed."""
        policy = DomainPolicy()

        assert policy.is_protected("a@evilhinedigitals.store.com") is False
        assert policy.is_protected("a@evilhinedigitals.store") is False
        assert policy.is_protected("hinedigitals.store@gmail.com") is False

    def test_case_insensitive(self):
        """Test domain comparison ignores case."""
        assert DomainPolicy().is_protected("Admin@HineDigitals.Store") is True

    def test_constructor_normalizes_domains(self):
        """Test domains passed directly are lowercased and stripped."""
        policy = DomainPolicy(protected_domains=("HineDigitals.store", " Corp.IO ", ""))

        assert policy.protected_domains == ("hinedigitals.store", "corp.io")
        assert policy.is_protected("a@hinedigitals.store")
        assert policy.is_protected("b@team.corp.io")

    def test_not_an_address(self):
        """Test strings without an @ are never protected."""
        assert DomainPolicy().is_protected("hinedigitals.store") is False

    def test_multiple_domains(self):
        """Test every domain in the allow-list is honored."""
        policy = DomainPolicy.for_domains(["Example.com ", "corp.io"])

        assert policy.protected_domains == ("example.com", "corp.io")
        assert policy.is_protected("a@example.com")
        assert policy.is_protected("b@corp.io")
        assert not policy.is_protected("c@other.io")

    def test_for_domains_falls_back_to_default(self):
        """Test an empty allow-list keeps the default domain."""
        assert DomainPolicy.for_domains(["", " "]).protected_domains == ("hinedigitals.store",)


class TestPolicyFromEnv:
    """Tests for environment configuration."""

    def test_default(self, monkeypatch):
        """Test the default protected domain."""
        monkeypatch.delenv("PROTECTED_DOMAINS", raising=False)

        assert get_protected_domains() == ("hinedigitals.store",)

    def test_comma_separated(self, monkeypatch):
        """Test a comma-separated list is parsed."""
        monkeypatch.setenv("PROTECTED_DOMAINS", "a.com, B.org,,")

        policy = DomainPolicy.from_env()

        assert policy.protected_domains == ("a.com", "b.org")
        assert policy.describe() == "a.com, b.org"
