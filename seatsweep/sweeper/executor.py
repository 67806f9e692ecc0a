"""Remove workspace members whose address falls outside the allow-list.

The sweep is a bounded retry loop over a live, mutating table. Each
iteration rescans the table, removes at most one violating member, and
checks that the member is gone. Step failures are logged and the loop
moves on to the next scan; only a table that never renders ends the run
early.
"""

import logging
import time
from typing import Callable

from playwright.sync_api import Error as PlaywrightError

from seatsweep.admin.members_table import TABLE_RELOAD_TIMEOUT, MemberRow, MembersTable
from seatsweep.errors import SeatsweepError, TableScanError

from .budget import SweepBudget
from .extractor import extract_email
from .policy import DomainPolicy
from .result import SweepResult, SweepStatus

logger = logging.getLogger(__name__)


SETTLE_MS = 500
STALE_TEXT_WAIT_MS = 2000
FAILURE_BACKOFF_MS = 1000

# Failures a single iteration recovers from
RECOVERABLE_ERRORS = (PlaywrightError, SeatsweepError)


def find_violating_row(
    table: MembersTable,
    policy: DomainPolicy,
) -> tuple[MemberRow, str] | None:
    """
    Find the first row, in document order, whose member must be removed.

    Rows without readable text or without an address are skipped.

    Args:
        table: Members table to scan.
        policy: Retention policy.

    Returns:
        ``(row, email)`` for the first violating row, or None.
    """
    for row in table.list_rows():
        match = extract_email(row.text)
        if not match:
            continue
        if policy.is_violation(match.email):
            return row, match.email
    return None


def preview_violations(table: MembersTable, policy: DomainPolicy) -> SweepResult:
    """
    List every member a sweep would remove, without removing anything.

    Raises:
        TableScanError: If the table never renders.
    """
    result = SweepResult(dry_run=True, iterations=1)
    table.wait_ready()

    for row in table.list_rows():
        match = extract_email(row.text)
        if match and policy.is_violation(match.email):
            if match.email not in result.pending_emails:
                result.pending_emails.append(match.email)

    logger.info("Dry run: %d member(s) would be removed", len(result.pending_emails))
    return result


def remove_member(table: MembersTable, row: MemberRow) -> None:
    """Run the menu -> "Remove member" -> "Delete" interaction for a row."""
    table.open_row_menu(row)
    table.choose_remove_member()
    table.confirm_removal()


def verify_removal(table: MembersTable, row: MemberRow, email: str) -> bool:
    """
    Check that a removed member is gone from the table.

    A reload resynchronizes the page when the address is still rendered.

    Returns:
        True if the address is no longer in the table, False if removal
        could not be confirmed.
    """
    try:
        table.wait_row_gone(row, email)
        if email not in table.table_text():
            return True

        logger.warning("%s still appears in the table, reloading", email)
        table.pause(STALE_TEXT_WAIT_MS)
        table.reload()
        table.wait_ready(TABLE_RELOAD_TIMEOUT)
        if email not in table.table_text():
            return True
        logger.warning("%s still listed after reload", email)
    except RECOVERABLE_ERRORS as e:
        logger.warning("Could not verify removal of %s: %s", email, e)
        table.reload()
        table.wait_ready(TABLE_RELOAD_TIMEOUT)

    return False


def sweep_members(
    table: MembersTable,
    policy: DomainPolicy,
    budget: SweepBudget | None = None,
    progress_callback: Callable[[SweepResult], None] | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> SweepResult:
    """
    Remove members outside the allow-list, one per iteration.

    Removals that cannot be re-verified are still counted as deleted and
    are also listed in ``unconfirmed_emails``.

    Args:
        table: Members table to operate on.
        policy: Retention policy.
        budget: Iteration ceiling, deadline and reload cadence.
        progress_callback: Called with the running result after each iteration.
        clock: Monotonic clock used for the deadline.

    Returns:
        The sweep result.

    Raises:
        TableScanError: If the table never renders. ``result`` on the
            exception holds the progress made so far.
    """
    budget = budget or SweepBudget()
    timer = budget.start_clock(clock)
    result = SweepResult()
    status = SweepStatus.ITERATION_LIMIT

    while result.iterations < budget.max_iterations:
        if timer.expired():
            status = SweepStatus.DEADLINE
            break

        result.iterations += 1

        try:
            table.wait_ready()
        except TableScanError as e:
            result.status = SweepStatus.FAILED
            e.result = result
            raise

        found = find_violating_row(table, policy)
        if found is None:
            status = SweepStatus.COMPLETED
            logger.info("No more members to remove. Total removed: %d", result.deleted_count)
            break

        row, email = found
        logger.info("Found member %s, removing", email)

        try:
            remove_member(table, row)
            # Reported before verification so a terminated worker keeps it
            result.record_deletion(email, confirmed=False)
            if progress_callback:
                progress_callback(result)
            if verify_removal(table, row, email):
                result.confirm_deletion(email)
            logger.info("Removed %s. Total removed: %d", email, result.deleted_count)

            table.pause(SETTLE_MS)

            if budget.reload_every > 0 and result.deleted_count % budget.reload_every == 0:
                logger.info("Reloading after %d removals", result.deleted_count)
                table.reload()
                table.wait_ready(TABLE_RELOAD_TIMEOUT)
                table.pause(SETTLE_MS)
        except RECOVERABLE_ERRORS as e:
            logger.warning("Error removing %s: %s", email, e)
            result.record_error(email, e)
            table.pause(FAILURE_BACKOFF_MS)
            table.dismiss_menus()

        if progress_callback:
            progress_callback(result)

    if status == SweepStatus.ITERATION_LIMIT:
        logger.warning("Reached maximum iterations (%d), stopping", budget.max_iterations)
    elif status == SweepStatus.DEADLINE:
        logger.warning("Sweep deadline of %ss reached, stopping", budget.deadline_seconds)

    result.status = status
    return result
