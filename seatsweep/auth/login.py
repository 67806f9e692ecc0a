"""Interactive console login that saves the session for later sweeps.

Login requires a one-time code sent by email, so a headed browser window is
opened per account and the operator types the code into it. Once the chat
interface loads, the context's storage state is written to the account's
session file.
"""

import logging
import re
from pathlib import Path

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Page
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from seatsweep.admin.navigation import get_base_url
from seatsweep.browser import browser_session

from .accounts import UserAccount

logger = logging.getLogger(__name__)


STEP_TIMEOUT = 10000
OTP_TIMEOUT = 120000

PASSWORD_URL_RE = re.compile(r".*password.*")
CHAT_URL_RE = re.compile(r".*chat.*")
PASSWORD_SELECTOR = 'input[type="password"], input[name="current-password"]'


def _set_window_title(page: Page, title: str) -> None:
    """Label the window so parallel logins can be told apart."""
    try:
        page.evaluate("(title) => { document.title = title; }", title)
    except PlaywrightError as e:
        logger.debug("Could not set window title: %s", e)


def _wait_for_password_page(page: Page) -> None:
    try:
        page.wait_for_url(PASSWORD_URL_RE, timeout=STEP_TIMEOUT)
    except PlaywrightTimeoutError:
        page.wait_for_selector('input[type="password"]', timeout=STEP_TIMEOUT)


def _wait_for_login_complete(page: Page, account: UserAccount) -> bool:
    """Wait for the operator to finish the OTP step."""
    try:
        page.wait_for_url(CHAT_URL_RE, timeout=OTP_TIMEOUT)
    except PlaywrightTimeoutError:
        logger.info("Still waiting for login to complete for %s...", account.email)

    try:
        page.wait_for_selector("textarea", timeout=STEP_TIMEOUT)
        return True
    except PlaywrightTimeoutError:
        return False


def authenticate_user(page: Page, account: UserAccount, base_url: str | None = None) -> Path:
    """
    Log an account in and save its storage state.

    Args:
        page: Fresh page in a logged-out context.
        account: Account to authenticate.
        base_url: Console base URL. Read from environment if not provided.

    Returns:
        Path of the saved session file.
    """
    base_url = (base_url or get_base_url()).rstrip("/")
    username = account.email.split("@")[0]

    logger.info("Authenticating %s (%s), session file %s", account.id, account.email, account.auth_file)

    page.set_viewport_size({"width": 1920, "height": 1080})
    page.goto(base_url, wait_until="networkidle")
    _set_window_title(page, f"Login - {account.id} ({username})")

    page.get_by_test_id("login-button").click()

    page.get_by_role("textbox", name="Email address").fill(account.email)
    page.get_by_role("button", name="Continue", exact=True).click()

    _wait_for_password_page(page)
    password_input = page.locator(PASSWORD_SELECTOR).first
    password_input.wait_for(state="visible")
    password_input.fill(account.password)
    page.get_by_role("button", name="Continue", exact=True).click()

    code_input = page.get_by_role("textbox", name="Code")
    code_input.wait_for(state="visible")
    code_input.click()

    logger.warning(
        "OTP code required for %s (%s): enter it in the window titled '%s' and click Continue",
        account.id.upper(),
        account.email,
        f"Login - {account.id} ({username})",
    )

    if _wait_for_login_complete(page, account):
        logger.info("Login successful for %s, saving storage state", account.email)
    else:
        logger.warning("Chat interface not detected for %s, saving state anyway", account.email)

    account.auth_file.parent.mkdir(parents=True, exist_ok=True)
    page.context.storage_state(path=str(account.auth_file))
    logger.info("Session saved to %s", account.auth_file)

    return account.auth_file


def login_account(account: UserAccount, base_url: str | None = None) -> Path:
    """Open a headed browser and run the login flow for one account."""
    with browser_session(headless=False) as page:
        return authenticate_user(page, account, base_url=base_url)
