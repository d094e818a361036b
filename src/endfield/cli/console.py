"""Rich console wrapper shared by all CLI commands."""

from collections.abc import Callable
from functools import wraps

import typer
from rich.console import Console, ConsoleRenderable
from rich.panel import Panel
from rich.status import Status

from endfield.errors import EndfieldError


class CLIConsole:
    """Rich console wrapper for consistent CLI output."""

    def __init__(self) -> None:
        """Initialize the CLI console."""
        self.console = Console()

    def print(self, msg: ConsoleRenderable | str | None = None) -> None:
        self.console.print(msg)

    def status(self, status: str) -> Status:
        return self.console.status(status)

    def info(self, msg: str) -> None:
        self.console.print(f"[cyan]ℹ[/cyan]  {msg}")

    def ok(self, msg: str) -> None:
        self.console.print(f"[green]✅[/green] {msg}")

    def error(self, msg: str) -> None:
        self.console.print(f"[red]❌[/red] {msg}")

    def warn(self, msg: str) -> None:
        self.console.print(f"[yellow]⚠️[/yellow]  {msg}")

    def confirm_action(
        self,
        action: str,
        details: str | None = None,
        force: bool = False,
    ) -> bool:
        """Prompt user to confirm a destructive action.

        Args:
            action: Description of the action (e.g., "Delete 3 paths")
            details: Additional details about what will be affected
            force: If True, skip the confirmation prompt

        Returns:
            True if the user confirmed, False otherwise
        """
        if force:
            return True

        warning_lines = [f"[bold red]⚠️  {action}[/bold red]"]
        if details:
            warning_lines.append(f"\n{details}")

        self.console.print(
            Panel(
                "\n".join(warning_lines),
                title="Confirmation Required",
                border_style="red",
            )
        )

        try:
            response = self.console.input(
                "\n[bold]Are you sure you want to proceed?[/bold] \\[y/N]: "
            )
            return response.strip().lower() in ("y", "yes")
        except (KeyboardInterrupt, EOFError):
            self.console.print("\n[dim]Cancelled.[/dim]")
            return False

    def handle_error(
        self, message: str, details: str | None = None, exit_code: int = 1
    ) -> None:
        """Print an error with optional details panel and exit.

        Args:
            message: Error message to display
            details: Optional additional details
            exit_code: Exit code to use
        """
        self.error(f"[bold red]{message}[/bold red]")
        if details:
            self.console.print(Panel(details, title="Details", border_style="red"))
        raise typer.Exit(exit_code)


def with_error_handling(func: Callable[..., None]) -> Callable[..., None]:
    """Decorator to wrap command functions with standard error handling.

    Args:
        func: The command function to wrap

    Returns:
        Wrapped function that reports EndfieldError as a panel and exits 1
    """

    @wraps(func)
    def wrapper(*args: object, **kwargs: object) -> None:
        try:
            func(*args, **kwargs)
        except EndfieldError as e:
            console.handle_error(e.message, e.details)
        except KeyboardInterrupt:
            console.print("\n[dim]Operation cancelled by user.[/dim]")
            raise typer.Exit(130) from None

    return wrapper


# Shared console instance for consistent output
console = CLIConsole()
