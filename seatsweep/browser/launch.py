"""Utilities for launching Chromium with the console's desktop profile.

The helpers return both the page and the objects required for shutdown so
callers can ensure resources are released, or use ``browser_session`` to
have that done for them.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator, Optional, Tuple

from playwright.sync_api import Browser, BrowserContext, Page, Playwright, sync_playwright


USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

VIEWPORT = {"width": 1920, "height": 1080}

LAUNCH_ARGS = (
    "--disable-blink-features=AutomationControlled",
    "--disable-automation",
    "--disable-infobars",
    "--disable-dev-shm-usage",
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-web-security",
    "--disable-features=IsolateOrigins,site-per-process",
    "--disable-site-isolation-trials",
    "--disable-background-timer-throttling",
    "--disable-backgrounding-occluded-windows",
    "--disable-renderer-backgrounding",
    "--disable-plugins-discovery",
    "--start-maximized",
)

IGNORED_DEFAULT_ARGS = (
    "--enable-automation",
    "--enable-blink-features=IdleDetection",
)


def get_headless() -> bool:
    """Whether to run headless, from environment. Headed by default."""
    return os.getenv("HEADLESS", "").strip().lower() in ("1", "true", "yes", "on")


def build_launch_options(headless: bool = False) -> dict[str, Any]:
    """Keyword arguments for ``chromium.launch``."""
    return {
        "headless": headless,
        "args": list(LAUNCH_ARGS),
        "ignore_default_args": list(IGNORED_DEFAULT_ARGS),
    }


def build_context_options(storage_state: Optional[Path] = None) -> dict[str, Any]:
    """
    Keyword arguments for ``browser.new_context``.

    Parameters
    ----------
    storage_state:
        Saved session file (cookies, localStorage) to start from. When
        omitted the context starts logged out.
    """
    options: dict[str, Any] = {
        "user_agent": USER_AGENT,
        "viewport": dict(VIEWPORT),
        "device_scale_factor": 1,
        "is_mobile": False,
        "has_touch": False,
        "locale": "en-US",
        "timezone_id": "America/New_York",
        "permissions": ["geolocation"],
        "geolocation": {"longitude": -74.006, "latitude": 40.7128},
        "color_scheme": "light",
        "extra_http_headers": {"Accept-Language": "en-US,en;q=0.9"},
    }
    if storage_state is not None:
        options["storage_state"] = str(storage_state)
    return options


def launch_browser(
    storage_state: Optional[Path] = None,
    *,
    headless: bool = False,
) -> Tuple[Playwright, Browser, BrowserContext, Page]:
    """Launch Chromium and open one page in a fresh context.

    Parameters
    ----------
    storage_state:
        Optional session file to load into the context.
    headless:
        Whether to launch Chromium in headless mode. Default keeps the UI
        visible, which the interactive login needs.
    """

    playwright = sync_playwright().start()
    try:
        browser = playwright.chromium.launch(**build_launch_options(headless))
        context = browser.new_context(**build_context_options(storage_state))
        page = context.new_page()
    except Exception:
        playwright.stop()
        raise

    return playwright, browser, context, page


def shutdown(
    playwright: Optional[Playwright],
    browser: Optional[Browser],
    context: Optional[BrowserContext] = None,
) -> None:
    """Gracefully dispose of Playwright resources used by ``launch_browser``."""

    try:
        if context:
            context.close()
        if browser:
            browser.close()
    finally:
        if playwright:
            playwright.stop()


@contextmanager
def browser_session(
    storage_state: Optional[Path] = None,
    *,
    headless: bool = False,
) -> Generator[Page, None, None]:
    """Yield a page whose browser is shut down on exit."""
    playwright, browser, context, page = launch_browser(storage_state, headless=headless)
    try:
        yield page
    finally:
        shutdown(playwright, browser, context)
