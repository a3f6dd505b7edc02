"""Commands: owner credential management and the reversible mutation probe."""

from uuid import UUID

import typer

from onboardkit.commands import console, run_operation


def _parse_tenant_id(tenant_id: str) -> UUID:
    try:
        return UUID(tenant_id)
    except ValueError:
        console.print(f"[red]Error:[/red] '{tenant_id}' is not a valid tenant ID.")
        raise typer.Exit(1) from None


def rotate_owner_password(
    tenant_id: str = typer.Argument(..., help="Tenant ID"),
) -> None:
    """Generate a temporary owner password and email it to the owner.

    When the email cannot be delivered the password is printed once, and
    the command exits with code 1.
    """
    from onboardkit.modules.credentials.services import CredentialIssuer

    parsed_id = _parse_tenant_id(tenant_id)
    result = run_operation(
        lambda ctx: CredentialIssuer.from_context(ctx).rotate_owner_password(parsed_id)
    )

    if result.delivery.delivered:
        console.print(f"[green]✓[/green] New credentials emailed to {result.owner_email}")
        return

    console.print(f"[yellow]![/yellow] Password changed for owner {result.owner_id}")
    console.print(
        "[red]Credentials email was not delivered:[/red] "
        f"{result.delivery.channel_response or result.delivery.error}"
    )
    console.print(f"Temporary password (shown once): [bold]{result.temporary_password}[/bold]")
    raise typer.Exit(1)


def update_owner_email(
    tenant_id: str = typer.Argument(..., help="Tenant ID"),
    email: str = typer.Argument(..., help="New owner login email"),
) -> None:
    """Change the owner's login email, profile email and tenant contact email."""
    from onboardkit.modules.credentials.services import CredentialIssuer

    parsed_id = _parse_tenant_id(tenant_id)
    result = run_operation(
        lambda ctx: CredentialIssuer.from_context(ctx).update_owner_email(parsed_id, email)
    )
    console.print(f"[green]✓[/green] Owner {result.owner_id} now signs in as {result.owner_email}")


def set_owner_password(
    tenant_id: str = typer.Argument(..., help="Tenant ID"),
    password: str = typer.Option(
        ...,
        "--password",
        prompt=True,
        hide_input=True,
        confirmation_prompt=True,
        help="New owner password",
    ),
) -> None:
    """Set an operator-chosen password on the owner identity."""
    from onboardkit.modules.credentials.services import CredentialIssuer

    parsed_id = _parse_tenant_id(tenant_id)
    result = run_operation(
        lambda ctx: CredentialIssuer.from_context(ctx).update_owner_password(parsed_id, password)
    )
    console.print(f"[green]✓[/green] Password updated for owner {result.owner_id}")


def reset_owner_password(
    tenant_id: str = typer.Argument(..., help="Tenant ID"),
) -> None:
    """Generate a password recovery link for the owner."""
    from onboardkit.modules.credentials.services import CredentialIssuer

    parsed_id = _parse_tenant_id(tenant_id)
    result = run_operation(
        lambda ctx: CredentialIssuer.from_context(ctx).send_password_reset(parsed_id)
    )
    console.print(f"[green]✓[/green] Recovery link for {result.owner_email}:")
    console.print(result.recovery_link, soft_wrap=True)


def diagnose_credentials(
    tenant_id: str = typer.Argument(..., help="Tenant ID"),
) -> None:
    """Check that the tenant owner's identity can be written and restored.

    Exit codes: 0 passed, 1 failed, 2 revert failed (manual repair needed).
    """
    from onboardkit.modules.credentials.schemas import ProbeOutcome
    from onboardkit.modules.credentials.services import CredentialIssuer

    parsed_id = _parse_tenant_id(tenant_id)
    report = run_operation(
        lambda ctx: CredentialIssuer.from_context(ctx).probe_owner_mutation(parsed_id)
    )

    for step in report.completed_steps:
        console.print(f"[green]✓[/green] {step}")
    if report.failed_step:
        console.print(f"[red]✗[/red] {report.failed_step}: {report.error}")

    if report.outcome == ProbeOutcome.PASSED:
        console.print(
            f"\n[green]Passed[/green] (owner {report.owner_id} via {report.owner_source})"
        )
        return
    if report.outcome == ProbeOutcome.REVERT_FAILED:
        console.print(
            "\n[bold red]CRITICAL:[/bold red] the owner email was not restored. "
            f"Repair identity {report.owner_id} manually."
        )
        raise typer.Exit(2)
    console.print("\n[red]Failed[/red]")
    raise typer.Exit(1)
