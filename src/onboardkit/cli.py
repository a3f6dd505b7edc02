"""Main onboardkit CLI application."""

import typer
from rich.console import Console

from onboardkit import __version__
from onboardkit.commands import credentials, ledger, slugs, sweep


console = Console()

app = typer.Typer(
    name="onboardkit",
    help="Operator tools for tenant onboarding and reconciliation.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Register commands
app.command(name="sweep")(sweep.sweep)
app.command(name="check-slug")(slugs.check_slug)
app.command(name="allocate")(slugs.allocate)
app.command(name="mark-failed")(ledger.mark_failed)
app.command(name="rotate-owner-password")(credentials.rotate_owner_password)
app.command(name="update-owner-email")(credentials.update_owner_email)
app.command(name="set-owner-password")(credentials.set_owner_password)
app.command(name="reset-owner-password")(credentials.reset_owner_password)
app.command(name="diagnose-credentials")(credentials.diagnose_credentials)


@app.callback(invoke_without_command=True)
def version_callback(
    version: bool = typer.Option(
        False, "--version", "-v", help="Show version and exit."
    ),
) -> None:
    """Onboardkit CLI - Tenant onboarding operator tools."""
    if version:
        console.print(f"[bold cyan]onboardkit[/bold cyan] version {__version__}")
        raise typer.Exit()


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
