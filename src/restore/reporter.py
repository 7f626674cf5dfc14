"""Reclamation plan and result formatting."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..models.deletion_operation import DeletionOperation
from ..models.deletion_record import DeletionRecord, DeletionStatus
from ..models.reclamation_plan import ReclamationPlan
from ..models.resource_kind import DISCOVERY_ORDER, ResourceKind

INDENT = "   "


class ReclamationReporter:
    """Format and display reclamation plans, progress and results."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize reclamation reporter.

        Args:
            console: Rich console instance (creates new one if not provided)
        """
        self.console = console or Console()

    def info(self, message: str, level: int = 0) -> None:
        self.console.print(f"{INDENT * level}[blue]ℹ️  {escape(message)}[/blue]")

    def success(self, message: str, level: int = 0) -> None:
        self.console.print(f"{INDENT * level}[green]✅ {escape(message)}[/green]")

    def warning(self, message: str, level: int = 0) -> None:
        self.console.print(f"{INDENT * level}[yellow]⚠️  {escape(message)}[/yellow]")

    def error(self, message: str, level: int = 0) -> None:
        self.console.print(f"{INDENT * level}[red]❌ {escape(message)}[/red]")

    def item(self, message: str, level: int = 1) -> None:
        self.console.print(f"{INDENT * level}- {escape(message)}", highlight=False)

    def phase(self, kind: ResourceKind) -> None:
        self.info(f"Deleting {kind.spec.plural.lower()}...")

    def display_plan(self, plan: ReclamationPlan) -> None:
        """Display the per-kind counts and itemized listing of a plan."""
        self.console.print()
        self.info(f"=== SEARCH RESULTS FOR SIGNATURE: {plan.signature} ===")
        self.console.print()

        if plan.is_empty:
            self.success(f"No resources found with signature: {plan.signature}")
            return

        for kind in DISCOVERY_ORDER:
            refs = plan.of_kind(kind)
            if not refs:
                continue
            spec = kind.spec
            self.console.print(f"[yellow]{spec.icon} {spec.plural} ({len(refs)}):[/yellow]")
            for ref in refs:
                self.console.print(f"{INDENT}- {escape(ref.display_name)}", highlight=False)
            self.console.print()

        self.warning(f"Total resources found: {plan.total}")
        self.console.print()

    def display_summary(self, operation: DeletionOperation, records: list[DeletionRecord]) -> None:
        """Display counts and any failed resources after execution."""
        table = Table(title="Reclamation Summary", show_header=True, header_style="bold magenta")
        table.add_column("Outcome", style="cyan", width=15)
        table.add_column("Count", justify="right", style="yellow", width=10)
        table.add_row("✅ Deleted", f"[green]{operation.succeeded_count}[/green]")
        if operation.failed_count > 0:
            table.add_row("❌ Failed", f"[red]{operation.failed_count}[/red]")
        table.add_row("━" * 15, "━" * 10, style="dim")
        table.add_row("[bold]Total", f"[bold]{operation.total_resources}")

        self.console.print()
        self.console.print(table)

        failed = [r for r in records if r.status == DeletionStatus.FAILED]
        if failed:
            self.console.print()
            self.console.print(
                Panel(
                    "\n".join(escape(f"{r.resource_kind} {r.resource_name}: {r.error_message}") for r in failed),
                    title="[bold red]Failed deletions[/bold red]",
                    border_style="red",
                )
            )
            self.info("Rerun the cleanup to retry the remaining resources.")

    def build_summary(
        self,
        plan: ReclamationPlan,
        operation: Optional[DeletionOperation] = None,
        records: Optional[list[DeletionRecord]] = None,
    ) -> dict:
        """Build the machine-readable summary of a run."""
        summary: dict = {"plan": plan.to_dict()}

        if operation is not None:
            summary["operation"] = {
                "operation_id": operation.operation_id,
                "signature": operation.signature,
                "cloud": operation.cloud,
                "mode": operation.mode.value,
                "status": operation.status.value,
                "total_resources": operation.total_resources,
                "succeeded_count": operation.succeeded_count,
                "failed_count": operation.failed_count,
                "duration_seconds": operation.duration_seconds,
            }
        if records is not None:
            summary["records"] = [r.to_dict() for r in records]

        return summary

    def export_json(
        self,
        filepath: Union[str, Path],
        plan: ReclamationPlan,
        operation: Optional[DeletionOperation] = None,
        records: Optional[list[DeletionRecord]] = None,
    ) -> None:
        """Write the run summary as JSON.

        Args:
            filepath: Output file path
            plan: Discovered plan
            operation: Executed operation (omitted for dry runs and cancellations)
            records: Per-resource outcomes
        """
        with open(filepath, "w") as f:
            json.dump(self.build_summary(plan, operation, records), f, indent=2)
