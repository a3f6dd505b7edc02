"""Commands: onboardkit check-slug / allocate."""

import typer

from onboardkit.commands import console, run_operation
from onboardkit.core.utils import normalize_slug


def check_slug(
    value: str = typer.Argument(..., help="Slug or display name to check"),
) -> None:
    """Check whether a slug is free in the registry and the ledger.

    Display names are normalized first.
    """
    from onboardkit.modules.slugs.services import AvailabilityReason, SlugService

    slug = normalize_slug(value)
    result = run_operation(lambda ctx: SlugService.from_context(ctx).availability(slug))

    if result.available:
        console.print(f"[green]✓[/green] [bold]{slug}[/bold] is available")
        return

    if result.reason == AvailabilityReason.CHECK_FAILED:
        console.print(
            f"[red]✗[/red] [bold]{slug}[/bold] could not be checked "
            f"({', '.join(result.failed_checks)} unavailable)"
        )
        raise typer.Exit(1)

    console.print(f"[yellow]✗[/yellow] [bold]{slug}[/bold] is taken ({result.reason})")
    if result.suggestion:
        console.print(f"  Suggestion: [cyan]{result.suggestion}[/cyan]")
    raise typer.Exit(1)


def allocate(
    name: str = typer.Argument(..., help="Restaurant display name"),
) -> None:
    """Allocate a free slug for a display name."""
    from onboardkit.modules.slugs.services import SlugService

    slug = run_operation(lambda ctx: SlugService.from_context(ctx).allocator.allocate(name))
    console.print(slug)
