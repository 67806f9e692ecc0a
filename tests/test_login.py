"""Tests for the interactive login flow."""

from unittest.mock import MagicMock

import pytest
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from seatsweep.auth import UserAccount, authenticate_user


@pytest.fixture
def account(tmp_path):
    return UserAccount(
        id="admin",
        email="admin@x.com",
        password="secret",
        auth_file=tmp_path / "auth" / "admin.json",
    )


@pytest.fixture
def page():
    return MagicMock()


class TestAuthenticateUser:
    """Tests for logging in and saving the session."""

    def test_saves_storage_state(self, page, account):
        """Test a completed login writes the session file."""
        path = authenticate_user(page, account, "https://chatgpt.com")

        assert path == account.auth_file
        assert account.auth_file.parent.is_dir()
        page.context.storage_state.assert_called_once_with(path=str(account.auth_file))

    def test_fills_credentials(self, page, account):
        """Test the email and password are entered."""
        authenticate_user(page, account, "https://chatgpt.com")

        page.goto.assert_called_once_with("https://chatgpt.com", wait_until="networkidle")
        page.get_by_test_id.assert_called_once_with("login-button")
        page.get_by_role.return_value.fill.assert_called_once_with("admin@x.com")
        page.locator.return_value.first.fill.assert_called_once_with("secret")

    def test_password_page_selector_fallback(self, page, account):
        """Test the password input is waited on when the URL never changes."""
        page.wait_for_url.side_effect = [PlaywrightTimeoutError("Timeout 10000ms exceeded"), None]

        authenticate_user(page, account, "https://chatgpt.com")

        selectors = [c.args[0] for c in page.wait_for_selector.call_args_list]
        assert selectors[0] == 'input[type="password"]'

    def test_saves_when_chat_not_detected(self, page, account):
        """Test the session is saved even if the chat input never shows."""
        page.wait_for_url.side_effect = [None, PlaywrightTimeoutError("Timeout 120000ms exceeded")]
        page.wait_for_selector.side_effect = PlaywrightTimeoutError("Timeout 10000ms exceeded")

        authenticate_user(page, account, "https://chatgpt.com")

        page.context.storage_state.assert_called_once_with(path=str(account.auth_file))

    def test_failed_step_raises(self, page, account):
        """Test a missing code input aborts without saving."""
        page.get_by_role.return_value.wait_for.side_effect = PlaywrightTimeoutError("Timeout")

        with pytest.raises(PlaywrightTimeoutError):
            authenticate_user(page, account, "https://chatgpt.com")

        page.context.storage_state.assert_not_called()
