"""Rich-based CLI output formatting and logging setup."""

import logging
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table
from rich.text import Text

from seatsweep.sweeper.result import SweepResult, SweepStatus, format_summary_line


console = Console()

LOG_FORMAT = "%(message)s"
FILE_LOG_FORMAT = "[%(asctime)s][%(account)s] %(levelname)s %(name)s: %(message)s"


def setup_logging(verbose: bool = False) -> None:
    """Route all log records through a RichHandler on the shared console."""
    level = logging.DEBUG if verbose else logging.INFO
    root = logging.getLogger()
    root.setLevel(level)

    for handler in list(root.handlers):
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)

    handler = RichHandler(console=console, show_path=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="[%X]"))
    root.addHandler(handler)


class _AccountFilter(logging.Filter):
    def __init__(self, account: str):
        super().__init__()
        self.account = account

    def filter(self, record: logging.LogRecord) -> bool:
        record.account = self.account
        return True


def add_account_log_file(log_dir: Path, account_id: str) -> Path:
    """
    Also write log records to ``{log_dir}/worker_{account_id}.log``.

    Returns:
        Path of the log file.
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    path = log_dir / f"worker_{account_id}.log"

    handler = logging.FileHandler(path, encoding="utf-8")
    handler.addFilter(_AccountFilter(account_id))
    handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, datefmt="%H:%M:%S"))
    logging.getLogger().addHandler(handler)
    return path


def print_header(title: str) -> None:
    """Print a styled header."""
    console.print()
    console.print(Panel(title, style="bold blue"))
    console.print()


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]✓[/green] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]✗[/red] {message}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]![/yellow] {message}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]ℹ[/blue] {message}")


def print_accounts(accounts: list[dict[str, Any]]) -> None:
    """Print configured accounts and the state of their session files."""
    table = Table(title="Accounts")
    table.add_column("ID", style="cyan")
    table.add_column("Email", max_width=40)
    table.add_column("Session File", style="dim")
    table.add_column("Saved", justify="center")

    for account in accounts:
        saved = account.get("saved", False)
        table.add_row(
            account.get("id", ""),
            account.get("email", "") or "[dim]-[/dim]",
            str(account.get("auth_file", "")),
            "[green]✓[/green]" if saved else "[red]✗[/red]",
        )

    console.print(table)


def print_pending_members(account_email: str, result: SweepResult, limit: int = 50) -> None:
    """Print the members a dry run would remove."""
    pending = result.pending_emails
    if not pending:
        print_success(f"{account_email}: nothing to remove")
        return

    table = Table(title=f"Would remove ({account_email})")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Email", style="yellow")

    for index, email in enumerate(pending[:limit], start=1):
        table.add_row(str(index), email)

    console.print(table)
    if len(pending) > limit:
        console.print(f"[dim]... and {len(pending) - limit} more.[/dim]")


def print_sweep_results(results: list[tuple[str, SweepResult]]) -> None:
    """Print a table of per-account sweep outcomes."""
    table = Table(title="Sweep Results")
    table.add_column("Account", style="cyan", max_width=40)
    table.add_column("Status")
    table.add_column("Removed", justify="right", style="green")
    table.add_column("Unconfirmed", justify="right", style="yellow")
    table.add_column("Iterations", justify="right", style="dim")
    table.add_column("Errors", justify="right")

    for account_email, result in results:
        if result.status == SweepStatus.FAILED:
            status_style = "red"
        elif result.status == SweepStatus.COMPLETED:
            status_style = "green"
        else:
            status_style = "yellow"

        table.add_row(
            account_email,
            Text(result.status.value, style=status_style),
            str(result.deleted_count),
            str(len(result.unconfirmed_emails)),
            str(result.iterations),
            str(len(result.errors)),
        )

    console.print(table)


def print_summary_lines(results: list[tuple[str, SweepResult]]) -> None:
    """Print the machine-readable summary line for each account."""
    console.print()
    console.print("=" * 80, style="dim")
    console.print("SWEEP RESULT:", style="bold")
    for account_email, result in results:
        console.print(format_summary_line(account_email, result), markup=False, highlight=False, soft_wrap=True)
    console.print("=" * 80, style="dim")
    console.print()


def create_progress() -> Progress:
    """Create a progress bar for long operations."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        console=console,
    )


def confirm_action(message: str) -> bool:
    """Ask for user confirmation."""
    response = console.input(f"{message} [y/N]: ")
    return response.lower() in ("y", "yes")
