"""CLI entrypoint for seatsweep."""

import json
import os
import sys
from pathlib import Path

import click
from dotenv import load_dotenv

from seatsweep import __version__
from seatsweep.auth import (
    delete_auth_files,
    discover_sessions,
    get_auth_dir,
    get_user_accounts,
    list_auth_files,
    select_accounts,
)
from seatsweep.browser import get_headless
from seatsweep.errors import AccountConfigError
from seatsweep.runner import (
    DEFAULT_LOGIN_TIMEOUT,
    DEFAULT_SESSION_TIMEOUT,
    SweepOptions,
    run_logins,
    run_sessions,
)
from seatsweep.sweeper import DomainPolicy, SweepBudget
from seatsweep.ui.cli import (
    confirm_action,
    create_progress,
    print_accounts,
    print_error,
    print_header,
    print_info,
    print_pending_members,
    print_success,
    print_summary_lines,
    print_sweep_results,
    print_warning,
    setup_logging,
)

# Load environment variables
load_dotenv()


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool):
    """seatsweep - remove workspace members outside the allowed email domains."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    setup_logging(verbose)


@cli.command()
@click.option("--user", "user_id", default=None, help="Only this account id")
@click.option("--workers", default=4, help="Accounts to log in at once")
@click.option("--timeout", default=DEFAULT_LOGIN_TIMEOUT, help="Seconds allowed per login")
@click.pass_context
def auth(ctx: click.Context, user_id: str | None, workers: int, timeout: float):
    """Log accounts in and save their sessions."""
    print_header("Account Login")

    try:
        accounts = select_accounts(user_id)
    except AccountConfigError as e:
        print_error(str(e))
        sys.exit(1)

    print_info(f"Authenticating {len(accounts)} account(s): {', '.join(a.id for a in accounts)}")
    print_info("Enter each one-time code in the browser window titled with the account id.")

    with create_progress() as progress:
        task = progress.add_task("Logging in...", total=len(accounts))

        def update_progress(current: int, total: int):
            progress.update(task, completed=current)

        outcomes = run_logins(
            accounts,
            workers=workers,
            timeout=timeout,
            verbose=ctx.obj["verbose"],
            progress_callback=update_progress,
        )

    failed = 0
    for account, error in outcomes:
        if error:
            failed += 1
            print_error(f"{account.id} ({account.email}): {error}")
        else:
            print_success(f"{account.id} ({account.email}) saved to {account.auth_file}")

    if failed:
        sys.exit(1)


@cli.command()
def accounts():
    """List configured accounts and saved sessions."""
    print_header("Accounts")

    configured = get_user_accounts()
    rows = []
    known_files = set()

    for account in configured:
        known_files.add(account.auth_file.resolve())
        rows.append({
            "id": account.id,
            "email": account.email,
            "auth_file": account.auth_file,
            "saved": account.auth_file.exists(),
        })

    # Session files saved for accounts no longer configured
    for path in list_auth_files():
        if path.resolve() not in known_files:
            rows.append({"id": path.stem, "email": "", "auth_file": path, "saved": True})

    if not rows:
        print_warning(f"No accounts configured and no sessions in {get_auth_dir()}")
        return

    print_accounts(rows)


@cli.command()
@click.option("--user", "user_id", default=None, help="Only this account id")
@click.option("--execute", is_flag=True, help="Actually remove members")
@click.option("--confirm", is_flag=True, help="Skip confirmation prompt")
@click.option("--domain", "domains", multiple=True, help="Protected email domain (repeatable)")
@click.option("--max-iterations", default=None, type=int, help="Loop iteration ceiling")
@click.option("--reload-every", default=None, type=int, help="Reload after this many removals")
@click.option("--deadline", default=None, type=float, help="Seconds the removal loop may run")
@click.option("--workers", default=4, help="Accounts to sweep at once")
@click.option("--timeout", default=DEFAULT_SESSION_TIMEOUT, help="Seconds allowed per account")
@click.option("--headless/--headed", default=None, help="Run the browser headless (default from HEADLESS)")
@click.option("--report", "report_path", default=None, help="Write results as JSON to this file")
@click.option("--log-dir", default=None, help="Also write per-account log files here")
@click.pass_context
def sweep(
    ctx: click.Context,
    user_id: str | None,
    execute: bool,
    confirm: bool,
    domains: tuple[str, ...],
    max_iterations: int | None,
    reload_every: int | None,
    deadline: float | None,
    workers: int,
    timeout: float,
    headless: bool | None,
    report_path: str | None,
    log_dir: str | None,
):
    """Remove members whose email is outside the protected domains."""
    print_header("Member Sweep")

    emails = {account.id: account.email for account in get_user_accounts()}
    sessions = discover_sessions(emails=emails)

    user_id = user_id or os.getenv("CHATGPT_USER_ID")
    if user_id:
        sessions = [s for s in sessions if s.account_id == user_id]

    if not sessions:
        print_error(f"No saved sessions found in {get_auth_dir()}. Run 'seatsweep auth' first.")
        sys.exit(1)

    policy = DomainPolicy.for_domains(domains) if domains else DomainPolicy.from_env()

    budget = SweepBudget.from_env()
    budget = SweepBudget(
        max_iterations=max_iterations if max_iterations is not None else budget.max_iterations,
        deadline_seconds=deadline if deadline is not None else budget.deadline_seconds,
        reload_every=reload_every if reload_every is not None else budget.reload_every,
    )

    print_info(f"Protected domains: {policy.describe()}")
    print_info(f"Accounts: {', '.join(s.account_email for s in sessions)}")

    dry_run = not execute
    if dry_run:
        print_warning("DRY RUN - No members will be removed")
        print_info("Use --execute to actually remove members")
    elif not confirm:
        if not confirm_action(f"Remove non-matching members from {len(sessions)} account(s)?"):
            print_info("Cancelled")
            return

    options = SweepOptions(
        policy=policy,
        budget=budget,
        dry_run=dry_run,
        headless=get_headless() if headless is None else headless,
        verbose=ctx.obj["verbose"],
        log_dir=Path(log_dir) if log_dir else None,
    )

    with create_progress() as progress:
        task = progress.add_task("Sweeping...", total=len(sessions))

        def update_progress(current: int, total: int):
            progress.update(task, completed=current)

        outcomes = run_sessions(
            sessions,
            options,
            workers=workers,
            session_timeout=timeout,
            progress_callback=update_progress,
        )

    results = [(session.account_email, result) for session, result in outcomes]

    if dry_run:
        for account_email, result in results:
            print_pending_members(account_email, result)

    print_sweep_results(results)
    if not dry_run:
        print_summary_lines(results)

    for account_email, result in results:
        for error in result.errors[:5]:
            label = error["email"] or "session"
            print_error(f"{account_email} - {label}: {error['error']}")

    if report_path:
        report = [
            {"account": session.account_email, "auth_file": str(session.auth_file), **result.to_dict()}
            for session, result in outcomes
        ]
        with open(report_path, "w") as f:
            json.dump(report, f, indent=2, default=str)
        print_success(f"Report written to {report_path}")

    if any(not result.succeeded for _, result in results):
        sys.exit(1)


@cli.command()
@click.option("--user", "user_id", default=None, help="Only this account id")
def clear(user_id: str | None):
    """Delete saved sessions."""
    print_header("Clear Sessions")

    paths = list_auth_files()
    if user_id:
        paths = [p for p in paths if p.stem == user_id]

    if not paths:
        print_info("No saved sessions")
        return

    if not confirm_action(f"Delete {len(paths)} saved session(s)?"):
        print_info("Cancelled")
        return

    deleted = delete_auth_files(paths)
    print_success(f"Deleted {deleted} session file(s)")


if __name__ == "__main__":
    cli()
