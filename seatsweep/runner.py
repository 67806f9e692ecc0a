"""Run sweeps and logins for several accounts in parallel.

Each account gets its own worker process owning its own browser. Workers
share nothing; the parent only starts them, enforces the per-session
wall-clock timeout, and collects results.
"""

import logging
import multiprocessing
import time
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Callable

from seatsweep.admin import PlaywrightMembersTable, open_members_page
from seatsweep.auth import SavedSession, UserAccount, login_account
from seatsweep.browser import browser_session
from seatsweep.errors import AdminViewError, TableScanError
from seatsweep.sweeper import DomainPolicy, SweepBudget, SweepResult, preview_violations, sweep_members
from seatsweep.ui.cli import add_account_log_file, setup_logging

logger = logging.getLogger(__name__)


DEFAULT_SESSION_TIMEOUT = 60.0
DEFAULT_LOGIN_TIMEOUT = 120.0
# Time kept back from the session timeout for browser startup and navigation
SESSION_DEADLINE_MARGIN = 15.0
POLL_INTERVAL = 0.5

# Message kinds on the results queue
RESULT = "result"
PROGRESS = "progress"


@dataclass(frozen=True)
class SweepOptions:
    """Settings shared by every sweep worker."""

    policy: DomainPolicy
    budget: SweepBudget
    dry_run: bool = True
    headless: bool = False
    base_url: str | None = None
    verbose: bool = False
    log_dir: Path | None = None


def run_session(
    session: SavedSession,
    options: SweepOptions,
    progress_callback: Callable[[SweepResult], None] | None = None,
) -> SweepResult:
    """
    Sweep one account using its saved session.

    Args:
        session: Saved session to load into the browser.
        options: Policy, budget and browser settings.
        progress_callback: Called with the running result as members are removed.

    Returns:
        The sweep result. Admin view or table failures produce a failed
        result rather than an exception.
    """
    logger.info("Starting sweep for %s (%s)", session.account_email, session.auth_file)

    with browser_session(session.auth_file, headless=options.headless) as page:
        try:
            open_members_page(page, options.base_url)
            table = PlaywrightMembersTable(page)
            if options.dry_run:
                return preview_violations(table, options.policy)
            return sweep_members(
                table,
                options.policy,
                options.budget,
                progress_callback=progress_callback,
            )
        except AdminViewError as e:
            logger.error("Admin view unavailable for %s: %s", session.account_email, e)
            return SweepResult.failure(e)
        except TableScanError as e:
            logger.error("Members table never rendered for %s: %s", session.account_email, e)
            return SweepResult.failure(e, partial=e.result)


def session_budget(budget: SweepBudget, session_timeout: float | None) -> SweepBudget:
    """
    Fit the loop deadline inside the session timeout.

    An explicit deadline is kept. Otherwise the loop gets the session timeout
    minus ``SESSION_DEADLINE_MARGIN`` (at least half the timeout), so it stops
    and reports before the worker is terminated.
    """
    if budget.deadline_seconds is not None or session_timeout is None:
        return budget
    deadline = max(session_timeout - SESSION_DEADLINE_MARGIN, session_timeout / 2)
    return replace(budget, deadline_seconds=deadline)


def _init_worker_logging(verbose: bool, log_dir: Path | None, account_id: str) -> None:
    setup_logging(verbose)
    if log_dir is not None:
        add_account_log_file(log_dir, account_id)


def _progress_reporter(index: int, results: Any) -> Callable[[SweepResult], None]:
    """Send the running result of job ``index`` to the parent."""

    def report(result: SweepResult) -> None:
        results.put((PROGRESS, index, result))

    return report


def _sweep_worker(index: int, session: SavedSession, options: SweepOptions, results: Any) -> None:
    _init_worker_logging(options.verbose, options.log_dir, session.account_id)
    try:
        result = run_session(session, options, progress_callback=_progress_reporter(index, results))
    except Exception as e:
        logger.exception("Sweep for %s crashed", session.account_email)
        result = SweepResult.failure(e)
    results.put((RESULT, index, result))


def _login_worker(index: int, account: UserAccount, verbose: bool, results: Any) -> None:
    _init_worker_logging(verbose, None, account.id)
    try:
        login_account(account)
        results.put((RESULT, index, None))
    except Exception as e:
        logger.exception("Login for %s failed", account.email)
        results.put((RESULT, index, str(e)))


def run_parallel(
    jobs: list[tuple[str, Callable[..., None], tuple]],
    workers: int,
    timeout: float | None,
    progress_callback: Callable[[int, int], None] | None = None,
) -> tuple[dict[int, Any], dict[int, Any]]:
    """
    Run jobs in separate processes, at most ``workers`` at a time.

    Each job is ``(name, target, args)``; the target is called as
    ``target(index, *args, results_queue)``. It puts ``(RESULT, index,
    value)`` on the queue when done and may put ``(PROGRESS, index, value)``
    before that. Queue writes are synchronous, so whatever a job reported
    before being terminated is still delivered.

    Args:
        jobs: Jobs to run.
        workers: Maximum concurrent processes.
        timeout: Per-job wall-clock limit in seconds, or None.
        progress_callback: Called with (finished, total) as jobs end.

    Returns:
        ``(results, progress)``: final values by job index, and the last
        progress value of each job that reported one. A job terminated at
        its timeout has no entry in ``results``.
    """
    results_queue = multiprocessing.SimpleQueue()
    pending = list(enumerate(jobs))
    running: dict[int, tuple[multiprocessing.Process, float]] = {}
    values: dict[int, Any] = {}
    progress: dict[int, Any] = {}
    finished = 0
    total = len(jobs)
    workers = max(1, workers)

    def drain() -> None:
        while not results_queue.empty():
            kind, index, value = results_queue.get()
            if kind == RESULT:
                values[index] = value
            else:
                progress[index] = value

    while pending or running:
        while pending and len(running) < workers:
            index, (name, target, args) = pending.pop(0)
            process = multiprocessing.Process(
                target=target,
                args=(index, *args, results_queue),
                name=name,
            )
            process.start()
            logger.debug("Started %s (pid %s)", name, process.pid)
            running[index] = (process, time.monotonic())

        drain()

        for index, (process, started) in list(running.items()):
            if process.is_alive():
                if timeout is not None and time.monotonic() - started > timeout:
                    logger.warning("%s exceeded %ss, terminating", process.name, timeout)
                    process.terminate()
                    process.join(timeout=10)
                else:
                    continue
            else:
                process.join()

            del running[index]
            finished += 1
            if progress_callback:
                progress_callback(finished, total)

        if running:
            time.sleep(POLL_INTERVAL)

    drain()
    return values, progress


def run_sessions(
    sessions: list[SavedSession],
    options: SweepOptions,
    workers: int = 4,
    session_timeout: float | None = DEFAULT_SESSION_TIMEOUT,
    progress_callback: Callable[[int, int], None] | None = None,
) -> list[tuple[SavedSession, SweepResult]]:
    """
    Sweep several accounts in parallel.

    Returns:
        ``(session, result)`` pairs in input order. Sessions that timed out
        or died without reporting get a failed result that keeps every
        removal they reported before stopping.
    """
    options = replace(options, budget=session_budget(options.budget, session_timeout))
    jobs = [
        (f"sweep-{session.account_id}", _sweep_worker, (session, options))
        for session in sessions
    ]
    values, progress = run_parallel(jobs, workers, session_timeout, progress_callback)

    outcomes = []
    for index, session in enumerate(sessions):
        result = values.get(index)
        if result is None:
            result = SweepResult.failure(
                f"Session did not finish within {session_timeout}s",
                partial=progress.get(index),
            )
            if result.deleted_emails:
                logger.warning(
                    "%s was stopped after removing %d member(s)",
                    session.account_email,
                    result.deleted_count,
                )
        outcomes.append((session, result))
    return outcomes


def run_logins(
    accounts: list[UserAccount],
    workers: int = 4,
    timeout: float | None = DEFAULT_LOGIN_TIMEOUT,
    verbose: bool = False,
    progress_callback: Callable[[int, int], None] | None = None,
) -> list[tuple[UserAccount, str | None]]:
    """
    Log several accounts in at once, one browser window each.

    Returns:
        ``(account, error)`` pairs in input order; error is None on success.
    """
    jobs = [
        (f"login-{account.id}", _login_worker, (account, verbose))
        for account in accounts
    ]
    values, _ = run_parallel(jobs, workers, timeout, progress_callback)

    outcomes = []
    for index, account in enumerate(accounts):
        if index in values:
            outcomes.append((account, values[index]))
        else:
            outcomes.append((account, f"Login did not finish within {timeout}s"))
    return outcomes
