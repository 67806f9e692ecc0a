"""Members table of the admin console.

The sweep loop talks to the table only through ``MembersTable``. The
Playwright implementation owns every selector tied to the console markup.
"""

import logging
from dataclasses import dataclass
from typing import Any, Protocol

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Locator, Page
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from seatsweep.errors import RemovalError, TableScanError

from .navigation import wait_for_members_view

logger = logging.getLogger(__name__)


ROW_SELECTOR = "table tr, tbody tr"
TABLE_SELECTOR = "table"
ROW_MENU_BUTTON_SELECTOR = 'button[aria-haspopup="menu"], button[aria-expanded]'
REMOVE_MEMBER_LABEL = "Remove member"
CONFIRM_DELETE_LABEL = "Delete"

# Timeouts in milliseconds
TABLE_READY_TIMEOUT = 30000
TABLE_RELOAD_TIMEOUT = 10000
ROW_TEXT_TIMEOUT = 2000
MENU_STEP_TIMEOUT = 5000
ROW_DETACH_TIMEOUT = 10000
ROW_HIDE_TIMEOUT = 5000


@dataclass
class MemberRow:
    """
    One rendered table row.

    ``handle`` is only valid for the document state it was read from; rows
    must be listed again after a removal or reload.
    """

    index: int
    text: str | None
    handle: Any = None


class MembersTable(Protocol):
    """Operations the sweep loop needs from a members table."""

    def wait_ready(self, timeout_ms: int = TABLE_READY_TIMEOUT) -> None:
        """Block until rows are visible; raise ``TableScanError`` otherwise."""

    def list_rows(self) -> list[MemberRow]:
        """List the currently rendered rows in document order."""

    def open_row_menu(self, row: MemberRow) -> None:
        """Open the row-level action menu."""

    def choose_remove_member(self) -> None:
        """Select the remove action in the open menu."""

    def confirm_removal(self) -> None:
        """Confirm the removal dialog."""

    def wait_row_gone(self, row: MemberRow, email: str) -> None:
        """Wait for the row to leave the rendered table."""

    def table_text(self) -> str:
        """Flattened text of the whole table."""

    def reload(self) -> None:
        """Reload the page and wait for the members view."""

    def dismiss_menus(self) -> None:
        """Close any open menu or dialog."""

    def pause(self, ms: int) -> None:
        """Sleep for UI settling."""


class PlaywrightMembersTable:
    """``MembersTable`` backed by a live Playwright page."""

    def __init__(self, page: Page):
        self.page = page

    def _rows(self) -> Locator:
        return self.page.locator(ROW_SELECTOR)

    def wait_ready(self, timeout_ms: int = TABLE_READY_TIMEOUT) -> None:
        try:
            self.page.wait_for_selector(ROW_SELECTOR, state="visible", timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise TableScanError(f"Members table not visible after {timeout_ms} ms") from e

    def list_rows(self) -> list[MemberRow]:
        rows = []
        for index, locator in enumerate(self._rows().all()):
            rows.append(MemberRow(index=index, text=self._read_text(locator), handle=locator))
        return rows

    def _read_text(self, locator: Locator) -> str | None:
        """Read a row's text; rows removed mid-scan read as None."""
        try:
            locator.wait_for(state="visible", timeout=ROW_TEXT_TIMEOUT)
        except PlaywrightError:
            pass

        try:
            return locator.text_content(timeout=ROW_TEXT_TIMEOUT)
        except PlaywrightError as e:
            logger.debug("Could not read row text: %s", e)
            return None

    def open_row_menu(self, row: MemberRow) -> None:
        button = row.handle.locator(ROW_MENU_BUTTON_SELECTOR).last
        self._step("open menu", button, click=True)

    def choose_remove_member(self) -> None:
        item = self.page.get_by_role("menuitem", name=REMOVE_MEMBER_LABEL)
        self._step("remove member", item, click=True)

    def confirm_removal(self) -> None:
        button = self.page.get_by_role("button", name=CONFIRM_DELETE_LABEL)
        self._step("confirm delete", button, click=True)

    def _step(self, step: str, locator: Locator, click: bool = False) -> None:
        try:
            locator.wait_for(state="visible", timeout=MENU_STEP_TIMEOUT)
            if click:
                locator.click()
        except PlaywrightError as e:
            raise RemovalError(step, str(e)) from e

    def wait_row_gone(self, row: MemberRow, email: str) -> None:
        # Row positions shift after a removal, so track the row by its address
        target = self._rows().filter(has_text=email)
        try:
            target.first.wait_for(state="detached", timeout=ROW_DETACH_TIMEOUT)
        except PlaywrightTimeoutError:
            try:
                target.first.wait_for(state="hidden", timeout=ROW_HIDE_TIMEOUT)
            except PlaywrightTimeoutError:
                logger.debug("Row for %s still rendered after removal", email)

    def table_text(self) -> str:
        return " ".join(self.page.locator(TABLE_SELECTOR).all_text_contents())

    def reload(self) -> None:
        self.page.reload(wait_until="networkidle")
        wait_for_members_view(self.page)

    def dismiss_menus(self) -> None:
        try:
            self.page.keyboard.press("Escape")
        except PlaywrightError as e:
            logger.debug("Escape failed: %s", e)

    def pause(self, ms: int) -> None:
        self.page.wait_for_timeout(ms)
