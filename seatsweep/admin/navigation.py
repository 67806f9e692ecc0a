"""Navigation to the admin console's members page."""

import logging
import os

from playwright.sync_api import Page
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from seatsweep.errors import AdminViewError

logger = logging.getLogger(__name__)


DEFAULT_BASE_URL = "https://chatgpt.com"
WORKSPACE_RADIO_XPATH = "//button[@role='radio'][contains(., 'Workspace')]"
MEMBERS_HEADING = "Members"
VIEW_TIMEOUT = 10000


def get_base_url() -> str:
    """Get the console base URL from environment."""
    return os.getenv("CHATGPT_BASE_URL", DEFAULT_BASE_URL).rstrip("/")


def wait_for_members_view(page: Page, timeout_ms: int = VIEW_TIMEOUT) -> None:
    """
    Wait for the "Members" heading.

    Raises:
        AdminViewError: If the heading never becomes visible.
    """
    heading = page.get_by_role("heading", name=MEMBERS_HEADING)
    try:
        heading.wait_for(state="visible", timeout=timeout_ms)
    except PlaywrightTimeoutError as e:
        raise AdminViewError(f"Members heading not visible at {page.url}") from e


def open_members_page(page: Page, base_url: str | None = None) -> None:
    """
    Open the members page of the workspace admin console.

    The page may be in any prior navigation state. Selecting the workspace
    on the admin landing page is required before the members list loads.

    Args:
        page: Page bound to an authenticated session.
        base_url: Console base URL. Read from environment if not provided.

    Raises:
        AdminViewError: If the workspace selector or members view never
            appears (expired session, missing admin rights, markup change).
    """
    base_url = (base_url or get_base_url()).rstrip("/")

    logger.info("Opening %s/admin", base_url)
    page.goto(f"{base_url}/admin", wait_until="networkidle")

    workspace = page.locator(WORKSPACE_RADIO_XPATH)
    try:
        workspace.wait_for(state="visible", timeout=VIEW_TIMEOUT)
    except PlaywrightTimeoutError as e:
        raise AdminViewError(
            f"Workspace selector not found at {page.url}; is the session still logged in?"
        ) from e
    workspace.click()

    page.goto(f"{base_url}/admin/members", wait_until="networkidle")
    wait_for_members_view(page)
    logger.info("Members page ready")
