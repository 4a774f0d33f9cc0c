"""Main CLI application for auditgate."""

import json
from collections import Counter
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from ..config import get_settings
from ..logging import get_logger, set_log_level
from ..models.issues import AUDIT_DOMAINS, EFFORT_LEVELS, SEVERITY_LEVELS, IssueRecord
from ..models.validations import ValidationReport
from ..orchestrator.loader import ExportLoadError, load_export
from ..orchestrator.review import ReviewSession, write_export
from ..orchestrator.validators import IssueRecordValidator

app = typer.Typer(
    name="auditgate",
    help="Validate, review and export LLM audit findings",
    add_completion=False
)

console = Console()
logger = get_logger(__name__)

SEVERITY_COLORS = {
    'Critical': 'red',
    'Serious': 'yellow',
    'Moderate': 'blue',
    'Minor': 'green',
}

EXIT_REJECTED = 1
EXIT_LOAD_ERROR = 2


@app.command()
def validate(
    export_file: Path = typer.Argument(..., help="Exported issue JSON or chat transcript"),
    domain: Optional[str] = typer.Option(
        None, "--domain", "-d", help="Audit domain: accessibility, security, architecture"
    ),
    strict: Optional[bool] = typer.Option(
        None, "--strict/--no-strict", help="Reject keys outside the issue schema"
    ),
    source_root: Optional[Path] = typer.Option(
        None, "--source-root", "-s", help="Codebase root used to resolve file:line locations"
    ),
    output_format: str = typer.Option(
        "table", "--format", "-f", help="Output format: table, json"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose logging"
    ),
) -> None:
    """Validate every issue record in an export."""
    if output_format not in ("table", "json"):
        console.print(f"[red]Unknown output format: {escape(output_format)}[/red]")
        raise typer.Exit(EXIT_LOAD_ERROR)

    if verbose:
        set_log_level("DEBUG")

    report = _load_and_validate(export_file, domain, strict, source_root)

    if output_format == "json":
        typer.echo(json.dumps(report.to_dict(), indent=2))
    else:
        _display_report(report)

    if not report.is_valid:
        raise typer.Exit(EXIT_REJECTED)


@app.command()
def review(
    export_file: Path = typer.Argument(..., help="Exported issue JSON or chat transcript"),
    output: Path = typer.Option(
        ..., "--output", "-o", help="File for the approved issue list"
    ),
    domain: Optional[str] = typer.Option(
        None, "--domain", "-d", help="Audit domain: accessibility, security, architecture"
    ),
    approve_all: bool = typer.Option(
        False, "--approve-all", help="Approve every valid record without prompting"
    ),
    sort: str = typer.Option(
        "original", "--sort", help="Export order: original, severity"
    ),
) -> None:
    """Approve or reject each valid finding, then write the final list."""
    if sort not in ("original", "severity"):
        console.print(f"[red]Unknown sort order: {escape(sort)}[/red]")
        raise typer.Exit(EXIT_LOAD_ERROR)

    report = _load_and_validate(export_file, domain, None, None)
    validator = IssueRecordValidator(domain=report.domain)

    if report.rejected:
        console.print(
            f"[yellow]{report.rejected_count} record(s) failed validation and are excluded[/yellow]"
        )
        for verdict in report.rejected:
            label = verdict.issue or f"#{verdict.index}"
            console.print(f"  ❌ {escape(label)}: {escape('; '.join(verdict.reasons))}")
        console.print()

    session = ReviewSession(report.valid_records, validator=validator)

    if approve_all:
        session.approve_all()
    else:
        _interactive_review(session)

    try:
        records = session.export(order=sort, include_pending=False)
        count = write_export(output, records)
    except (OSError, ValueError) as e:
        console.print(f"[red]Export failed: {escape(str(e))}[/red]")
        logger.error("Export failed", error=str(e), output=str(output))
        raise typer.Exit(EXIT_LOAD_ERROR)

    console.print(
        f"[green]Exported {count} approved issue(s) to {output}[/green] "
        f"({len(session.rejected)} rejected)"
    )


@app.command()
def summary(
    export_file: Path = typer.Argument(..., help="Exported issue JSON or chat transcript"),
    domain: Optional[str] = typer.Option(
        None, "--domain", "-d", help="Audit domain: accessibility, security, architecture"
    ),
) -> None:
    """Show severity and effort counts for the valid records."""
    report = _load_and_validate(export_file, domain, None, None)
    records = report.valid_records

    table = Table(title=f"Summary ({len(records)} valid, {report.rejected_count} rejected)")
    table.add_column("Severity", style="cyan")
    for effort in EFFORT_LEVELS:
        table.add_column(effort, justify="right")
    table.add_column("Total", justify="right", style="bold")

    cells = Counter((record.severity, record.fix.effort) for record in records)
    for severity in SEVERITY_LEVELS:
        color = SEVERITY_COLORS[severity]
        row = [cells.get((severity, effort), 0) for effort in EFFORT_LEVELS]
        table.add_row(
            f"[{color}]{severity}[/{color}]",
            *[str(value) for value in row],
            str(sum(row)),
        )

    console.print(table)


def _load_and_validate(
    export_file: Path,
    domain: Optional[str],
    strict: Optional[bool],
    source_root: Optional[Path],
) -> ValidationReport:
    """Load an export and validate it, applying settings as defaults."""
    settings = get_settings()
    domain = domain or settings.audit_domain
    if strict is None:
        strict = settings.strict_fields
    if source_root is None:
        source_root = settings.source_root

    if domain is not None and domain not in AUDIT_DOMAINS:
        console.print(
            f"[red]Unknown audit domain: {domain} "
            f"(expected one of {', '.join(AUDIT_DOMAINS)})[/red]"
        )
        raise typer.Exit(EXIT_LOAD_ERROR)

    try:
        candidates = load_export(export_file)
    except ExportLoadError as e:
        console.print(f"[red]Could not load {export_file}: {escape(str(e))}[/red]")
        logger.error("Export load failed", error=str(e), path=str(export_file))
        raise typer.Exit(EXIT_LOAD_ERROR)

    validator = IssueRecordValidator(domain=domain, strict=strict, source_root=source_root)
    return validator.validate(candidates, source=str(export_file))


def _interactive_review(session: ReviewSession) -> None:
    """Prompt for a decision on each pending record."""
    total = len(session)
    for position, record in enumerate(session.records, start=1):
        _display_record(record, position, total)

        while True:
            choice = Prompt.ask(
                "Decision (a=approve, r=reject, s=severity, e=effort, q=quit)",
                choices=["a", "r", "s", "e", "q"],
                default="a",
            )

            if choice == "a":
                session.approve(record.issue)
                break
            if choice == "r":
                reason = Prompt.ask("Reason (optional)", default="")
                session.reject(record.issue, reason or None)
                break
            if choice == "s":
                severity = Prompt.ask(
                    "New severity", choices=list(SEVERITY_LEVELS), default=record.severity
                )
                record = session.amend(record.issue, severity=severity)
                _display_record(record, position, total)
                continue
            if choice == "e":
                effort = Prompt.ask(
                    "New effort", choices=list(EFFORT_LEVELS), default=record.fix.effort
                )
                record = session.amend(record.issue, effort=effort)
                _display_record(record, position, total)
                continue

            console.print(
                f"[yellow]Stopping review; {len(session.pending)} record(s) left undecided[/yellow]"
            )
            return


def _display_record(record: IssueRecord, position: int, total: int) -> None:
    """Render one record for review."""
    color = SEVERITY_COLORS[record.severity]
    lines: List[str] = [
        f"[bold]{escape(record.issue)}[/bold]  [{color}]{record.severity}[/{color}]  effort: {record.fix.effort}",
        f"📍 {escape(record.location)}",
    ]
    if record.wcag:
        lines.append(f"WCAG: {', '.join(record.wcag)}")
    lines.append("")
    lines.append(escape(record.description))
    lines.append("")
    lines.append(f"[red]- {escape(record.fix.before)}[/red]")
    lines.append(f"[green]+ {escape(record.fix.after)}[/green]")
    if record.commands:
        lines.append("")
        lines.extend(f"$ {escape(command)}" for command in record.commands)

    console.print(Panel("\n".join(lines), title=f"{position}/{total}", expand=False))


def _display_report(report: ValidationReport) -> None:
    """Display validation verdicts in a table."""
    table = Table(title="Issue Record Validation")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Issue", style="cyan")
    table.add_column("Status")
    table.add_column("Reasons", style="white")

    for verdict in report.verdicts:
        status = "[green]valid[/green]" if verdict.is_valid else "[red]rejected[/red]"
        table.add_row(
            str(verdict.index),
            escape(verdict.issue or "-"),
            status,
            escape("\n".join(verdict.reasons)),
        )

    console.print(table)
    console.print(
        f"{report.valid_count} valid, {report.rejected_count} rejected"
    )


if __name__ == "__main__":
    app()
