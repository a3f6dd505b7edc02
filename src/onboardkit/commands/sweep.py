"""Command: onboardkit sweep - Run the reconciliation sweep."""

import typer
from rich.table import Table

from onboardkit.commands import console, run_operation
from onboardkit.modules.reconciliation.schemas import ReconciliationReport


def _print_report(report: ReconciliationReport) -> None:
    summary = report.summary

    table = Table(title="Reconciliation Summary", show_header=True)
    table.add_column("Finding", style="cyan", no_wrap=True)
    table.add_column("Count", justify="right")
    rows = [
        ("Tenants with placeholder email", summary.admin_email_tenants),
        ("Orphaned tenants", summary.orphaned_tenants),
        ("Broken identity links", summary.broken_identity_links),
        ("  matching a tenant email", summary.broken_links_matching_tenant_email),
        ("Stale pending records", summary.stale_pending_records),
    ]
    for label, count in rows:
        table.add_row(label, "[red]failed[/red]" if count is None else str(count))

    console.print()
    console.print(table)

    if report.orphaned_tenants:
        orphans = Table(title="Orphaned Tenants", show_header=True)
        orphans.add_column("Slug", style="cyan", no_wrap=True)
        orphans.add_column("Name")
        orphans.add_column("Email")
        orphans.add_column("Status", no_wrap=True)
        for tenant in report.orphaned_tenants:
            orphans.add_row(tenant.slug, tenant.name, tenant.email or "", tenant.status)
        console.print(orphans)

    if report.broken_identity_links:
        links = Table(title="Broken Identity Links", show_header=True)
        links.add_column("Email", style="cyan")
        links.add_column("Role")
        links.add_column("Tenant email", no_wrap=True)
        for link in report.broken_identity_links:
            links.add_row(
                link.email,
                link.role or "",
                "[yellow]yes[/yellow]" if link.matches_tenant_email else "no",
            )
        console.print(links)

    if report.stale_pending_records:
        stale = Table(title="Stale Pending Records", show_header=True)
        stale.add_column("Record", no_wrap=True)
        stale.add_column("Slug", style="cyan")
        stale.add_column("Created", no_wrap=True)
        for record in report.stale_pending_records:
            stale.add_row(str(record.id), record.candidate_slug, record.created_at.isoformat())
        console.print(stale)
        console.print(
            "[dim]Close stuck records with 'onboardkit mark-failed <record-id>'.[/dim]"
        )

    for error in report.section_errors:
        console.print(f"[red]Section {error.section} failed:[/red] {error.error}")
    console.print()


def sweep(
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON"),
    fail_on_findings: bool = typer.Option(
        False,
        "--fail-on-findings",
        help="Exit with code 1 when orphans, broken links or section errors are found",
    ),
) -> None:
    """Report orphaned tenants, broken identity links and stale records.

    Read-only: nothing is repaired.
    """
    from onboardkit.modules.reconciliation.services import ReconciliationSweep

    report = run_operation(
        lambda ctx: ReconciliationSweep.from_context(ctx).run(include_timestamp=True)
    )

    if as_json:
        console.print_json(data=report.to_json_dict())
    else:
        _print_report(report)

    summary = report.summary
    has_findings = bool(
        summary.orphaned_tenants or summary.broken_identity_links or summary.section_errors
    )
    if fail_on_findings and has_findings:
        raise typer.Exit(1)
