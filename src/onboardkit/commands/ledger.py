"""Command: onboardkit mark-failed - Close out a stuck onboarding attempt."""

from uuid import UUID

import typer

from onboardkit.commands import console, run_operation


def mark_failed(
    record_id: str = typer.Argument(..., help="Provisioning record ID"),
    reason: str = typer.Option(
        "Marked failed by operator", "--reason", "-r", help="Reason stored on the record"
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation prompt"),
) -> None:
    """Mark one pending provisioning record as failed.

    The record keeps its slug claim; only its status changes.
    """
    from onboardkit.modules.provisioning.services import ProvisioningLedger

    try:
        parsed_id = UUID(record_id)
    except ValueError:
        console.print(f"[red]Error:[/red] '{record_id}' is not a valid record ID.")
        raise typer.Exit(1) from None

    if not force:
        confirm = typer.confirm(f"Mark provisioning record {parsed_id} as failed?")
        if not confirm:
            console.print("[yellow]Cancelled.[/yellow]")
            raise typer.Exit(0)

    record = run_operation(
        lambda ctx: ProvisioningLedger.from_context(ctx).mark_failed(parsed_id, reason)
    )
    console.print(
        f"[green]✓[/green] Record {record.id} ({record.candidate_slug}) marked failed"
    )
