"""Tests for the command line interface."""

import json

import pytest
from click.testing import CliRunner

from seatsweep import main
from seatsweep.main import cli
from seatsweep.sweeper import SweepResult, SweepStatus


@pytest.fixture
def auth_dir(monkeypatch, tmp_path):
    """Private auth directory and no configured accounts."""
    for var in ["CHATGPT_USERS", "CHATGPT_EMAIL", "CHATGPT_PASSWORD", "CHATGPT_USER_ID",
                "CHATGPT_USER1_EMAIL", "CHATGPT_USER1_PASSWORD", "PROTECTED_DOMAINS"]:
        monkeypatch.delenv(var, raising=False)
    path = tmp_path / "auth"
    monkeypatch.setenv("AUTH_DIR", str(path))
    return path


@pytest.fixture
def saved_session(auth_dir):
    auth_dir.mkdir(parents=True)
    path = auth_dir / "admin.json"
    path.write_text("{}")
    return path


class TestAuthCommand:
    """Tests for logging accounts in."""

    def test_no_accounts(self, auth_dir):
        """Test logging in without configured accounts fails."""
        result = CliRunner().invoke(cli, ["auth"])

        assert result.exit_code == 1
        assert "No user accounts found" in result.output

    def test_all_logins_succeed(self, monkeypatch, auth_dir):
        """Test successful logins report where each session was saved."""
        monkeypatch.setenv("CHATGPT_USER1_EMAIL", "one@x.com")
        monkeypatch.setenv("CHATGPT_USER1_PASSWORD", "p1")
        captured = {}

        def fake_run_logins(accounts, **kwargs):
            captured["accounts"] = accounts
            captured["timeout"] = kwargs["timeout"]
            return [(account, None) for account in accounts]

        monkeypatch.setattr(main, "run_logins", fake_run_logins)

        result = CliRunner().invoke(cli, ["auth", "--timeout", "90"])

        assert result.exit_code == 0
        assert [a.id for a in captured["accounts"]] == ["user1"]
        assert captured["timeout"] == 90
        assert "saved to" in result.output

    def test_failed_login_exits_nonzero(self, monkeypatch, auth_dir):
        """Test a failed login makes the command fail."""
        monkeypatch.setenv("CHATGPT_USER1_EMAIL", "one@x.com")
        monkeypatch.setenv("CHATGPT_USER1_PASSWORD", "p1")
        monkeypatch.setattr(
            main,
            "run_logins",
            lambda accounts, **kwargs: [(accounts[0], "Login did not finish within 120.0s")],
        )

        result = CliRunner().invoke(cli, ["auth"])

        assert result.exit_code == 1
        assert "did not finish" in result.output


class TestAccountsCommand:
    """Tests for listing accounts."""

    def test_nothing_configured(self, auth_dir):
        """Test a warning when there is nothing to list."""
        result = CliRunner().invoke(cli, ["accounts"])

        assert result.exit_code == 0
        assert "No accounts configured" in result.output

    def test_lists_configured_and_orphaned(self, monkeypatch, auth_dir):
        """Test configured accounts and leftover session files are listed."""
        monkeypatch.setenv("CHATGPT_USER1_EMAIL", "one@x.com")
        monkeypatch.setenv("CHATGPT_USER1_PASSWORD", "p1")
        auth_dir.mkdir(parents=True)
        (auth_dir / "old.json").write_text("{}")

        result = CliRunner().invoke(cli, ["accounts"])

        assert result.exit_code == 0
        assert "user1" in result.output
        assert "old" in result.output


class TestSweepCommand:
    """Tests for the sweep command."""

    def test_no_sessions(self, auth_dir):
        """Test sweeping without saved sessions fails."""
        result = CliRunner().invoke(cli, ["sweep"])

        assert result.exit_code == 1
        assert "No saved sessions" in result.output

    def test_dry_run_by_default(self, monkeypatch, saved_session):
        """Test the default run previews and leaves out the summary lines."""
        captured = {}

        def fake_run_sessions(sessions, options, **kwargs):
            captured["options"] = options
            return [(sessions[0], SweepResult(dry_run=True, iterations=1, pending_emails=["spam@evil.com"]))]

        monkeypatch.setattr(main, "run_sessions", fake_run_sessions)

        result = CliRunner().invoke(cli, ["sweep"])

        assert result.exit_code == 0
        assert captured["options"].dry_run is True
        assert "DRY RUN" in result.output
        assert "spam@evil.com" in result.output
        assert "SWEEP RESULT" not in result.output
        assert "no anomalies data" not in result.output

    def test_execute_with_report(self, monkeypatch, saved_session, tmp_path):
        """Test an executed sweep writes the JSON report."""
        captured = {}

        def fake_run_sessions(sessions, options, **kwargs):
            captured["options"] = options
            captured["timeout"] = kwargs["session_timeout"]
            return [(sessions[0], SweepResult(deleted_emails=["spam@evil.com"], iterations=2))]

        monkeypatch.setattr(main, "run_sessions", fake_run_sessions)
        report = tmp_path / "report.json"

        result = CliRunner().invoke(
            cli,
            ["sweep", "--execute", "--confirm", "--domain", "corp.com", "--max-iterations", "10",
             "--timeout", "30", "--report", str(report)],
        )

        assert result.exit_code == 0
        assert "admin | dirty | spam@evil.com | success" in result.output
        options = captured["options"]
        assert options.dry_run is False
        assert options.policy.protected_domains == ("corp.com",)
        assert options.budget.max_iterations == 10
        assert captured["timeout"] == 30

        data = json.loads(report.read_text())
        assert data[0]["account"] == "admin"
        assert data[0]["deleted_emails"] == ["spam@evil.com"]

    def test_failure_exits_nonzero(self, monkeypatch, saved_session):
        """Test a failed session makes the command fail."""
        monkeypatch.setattr(
            main,
            "run_sessions",
            lambda sessions, options, **kwargs: [(sessions[0], SweepResult.failure("boom"))],
        )

        result = CliRunner().invoke(cli, ["sweep", "--execute", "--confirm"])

        assert result.exit_code == 1
        assert "| failure" in result.output

    def test_execute_cancelled(self, monkeypatch, saved_session):
        """Test declining the prompt runs nothing."""
        monkeypatch.setattr(main, "run_sessions", lambda *a, **k: pytest.fail("should not run"))

        result = CliRunner().invoke(cli, ["sweep", "--execute"], input="n\n")

        assert result.exit_code == 0
        assert "Cancelled" in result.output

    def test_unknown_user(self, saved_session):
        """Test selecting an account without a session fails."""
        result = CliRunner().invoke(cli, ["sweep", "--user", "nobody"])

        assert result.exit_code == 1


class TestClearCommand:
    """Tests for deleting saved sessions."""

    def test_clear(self, saved_session):
        """Test confirmed deletion removes the files."""
        result = CliRunner().invoke(cli, ["clear"], input="y\n")

        assert result.exit_code == 0
        assert not saved_session.exists()

    def test_clear_nothing(self, auth_dir):
        """Test clearing with no sessions."""
        result = CliRunner().invoke(cli, ["clear"])

        assert result.exit_code == 0
        assert "No saved sessions" in result.output


def test_result_status_values():
    """Test the status names written to reports."""
    assert [s.value for s in SweepStatus] == ["completed", "iteration_limit", "deadline", "failed"]
