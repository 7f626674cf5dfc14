"""Main CLI entry point using Typer."""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from ..cloud.client import create_connection
from ..cloud.credentials import CredentialValidationError, validate_credentials
from ..cloud.resource_client import CloudOperationError, CloudResourceClient
from ..models.reclamation_plan import ReclamationPlan
from ..models.signature import InvalidSignatureError, SignatureNotFoundError, resolve_signature
from ..restore.reporter import ReclamationReporter
from ..utils.logging import setup_logging
from .config import Config

logger = logging.getLogger(__name__)

# Create Typer app
app = typer.Typer(
    name="ocp-reclaim",
    help="OpenShift Cluster Reclaimer - find and delete orphaned OpenStack resources by cluster signature",
    add_completion=False,
)

# Create Rich console for output
console = Console()

# Global config
config: Optional[Config] = None

CONFIRMATION_WORD = "yes"


@app.callback()
def main(
    cloud: Optional[str] = typer.Option(None, "--cloud", help="clouds.yaml profile (default: $OS_CLOUD)"),
    config_file: Optional[str] = typer.Option(
        None,
        "--config",
        help="Config file (default: $OCP_RECLAIM_CONFIG or ~/.ocp-reclaim/config.yaml)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress log output except errors"),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colored output"),
):
    """OpenShift Cluster Reclaimer - orphaned OpenStack resource cleanup."""
    global config

    # Load configuration
    try:
        config = Config.load(config_file)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"✗ Error loading configuration: {e}", style="bold red")
        raise typer.Exit(code=1)

    # Override with CLI options
    if cloud:
        config.cloud = cloud

    # Setup logging
    log_level = "ERROR" if quiet else ("DEBUG" if verbose else config.log_level)
    setup_logging(level=log_level, verbose=verbose)

    # Disable colors if requested
    if no_color:
        console.no_color = True


@app.command()
def version():
    """Show version information."""
    from openstack import version as sdk_version

    from .. import __version__

    console.print(f"ocp-reclaim version {__version__}")
    console.print(f"Python {sys.version.split()[0]}")
    console.print(f"openstacksdk {sdk_version.__version__}")


def _print_signature_usage() -> None:
    reporter = ReclamationReporter(console)
    reporter.info("Usage options:")
    reporter.info("  1. Direct:       ocp-reclaim cleanup <signature>")
    reporter.info("     Example:      ocp-reclaim cleanup ff9fw")
    reporter.info("  2. Environment:  SIGNATURE=<signature> ocp-reclaim cleanup")
    reporter.info("     Example:      SIGNATURE=ff9fw ocp-reclaim cleanup")
    reporter.info(f"  3. Auto-detect:  Ensure {config.metadata_path} exists with a valid infraID")
    reporter.info("     Then run:     ocp-reclaim cleanup")


def _connect(reporter: ReclamationReporter) -> tuple[CloudResourceClient, str]:
    """Validate credentials and build a resource client.

    Raises:
        CredentialValidationError: If the cloud cannot be used
    """
    reporter.info("Checking prerequisites...")
    identity = validate_credentials(config.cloud)
    reporter.success("Prerequisites check passed")
    logger.debug(f"Authenticated to cloud {identity['cloud']} (project {identity['project_id']})")

    client = CloudResourceClient(
        create_connection(identity["cloud"]),
        delete_timeout=config.instance_delete_timeout,
    )
    return client, identity["cloud"]


def _read_confirmation() -> str:
    try:
        return typer.prompt(
            f"Are you sure you want to delete all these resources? Type '{CONFIRMATION_WORD}' to confirm",
            default="",
            show_default=False,
        )
    except typer.Abort:
        return ""


def _export_summary(reporter: ReclamationReporter, path: Optional[Path], plan: ReclamationPlan, *args) -> None:
    if path is None:
        return
    reporter.export_json(path, plan, *args)
    console.print(f"✓ Wrote summary to: [cyan]{path}[/cyan]")


@app.command("cleanup")
def cleanup(
    signature: Optional[str] = typer.Argument(
        None,
        envvar="SIGNATURE",
        help="Cluster signature, 5 lowercase alphanumerics (default: derived from metadata.json)",
        show_default=False,
    ),
    metadata: Optional[Path] = typer.Option(
        None,
        "--metadata",
        "-m",
        help="Installer metadata.json used when no signature is given (default: openshift-install/metadata.json)",
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be deleted without prompting or deleting"),
    summary_json: Optional[Path] = typer.Option(
        None, "--summary-json", help="Write a machine-readable JSON summary to this file"
    ),
):
    """Delete the OpenStack resources of a cluster by signature.

    Searches for instances, images, server groups, security groups, networks,
    subnets, ports and volumes named openshift-cluster-<signature>-*, floating
    IPs described with openshift-cluster-<signature>, and routers whose name
    contains the signature. Deletion requires typing 'yes'.

    Examples:
        # Explicit signature
        ocp-reclaim cleanup ff9fw

        # Derive the signature from openshift-install/metadata.json
        ocp-reclaim cleanup

        # Preview only
        ocp-reclaim cleanup ff9fw --dry-run --summary-json plan.json
    """
    from ..restore.audit import AuditStorage
    from ..restore.discovery import ResourceDiscovery
    from ..restore.reclaimer import ResourceReclaimer

    reporter = ReclamationReporter(console)

    console.print("=" * 76)
    console.print("OpenShift Cluster Cleanup by Signature")
    console.print("=" * 76)
    console.print()

    try:
        # Resolve and validate the signature before touching the cloud
        if signature is not None:
            reporter.info(f"Using provided signature: {signature}")
        else:
            reporter.info("No signature provided, checking for metadata.json...")

        resolved = resolve_signature(signature, metadata or config.metadata_path)

        if signature is None:
            reporter.success(f"Found signature from metadata.json: {resolved}")

        client, cloud_name = _connect(reporter)

        # Discovery
        reporter.info(f"Searching for resources with signature: {resolved}")
        discovery = ResourceDiscovery(
            client,
            on_search=lambda kind: reporter.info(f"Searching for {kind.spec.plural.lower()}..."),
        )
        plan = discovery.discover(resolved)
        reporter.display_plan(plan)

        if plan.is_empty:
            _export_summary(reporter, summary_json, plan)
            raise typer.Exit(code=0)

        reclaimer = ResourceReclaimer(
            client,
            reporter,
            router_max_attempts=config.router_max_attempts,
            router_retry_delay=config.router_retry_delay,
            cloud=cloud_name,
        )

        if dry_run:
            operation = reclaimer.preview(plan)
            reporter.info("DRY RUN: no resources were deleted. Rerun without --dry-run to delete them.")
            _export_summary(reporter, summary_json, plan, operation)
            raise typer.Exit(code=0)

        # Confirmation
        reporter.warning("WARNING: This will permanently delete all listed resources!")
        reporter.warning("This action cannot be undone!")
        console.print()

        if _read_confirmation() != CONFIRMATION_WORD:
            reporter.info("Deletion cancelled by user.")
            _export_summary(reporter, summary_json, plan)
            raise typer.Exit(code=0)

        reclaimer.audit_storage = AuditStorage(config.audit_dir)
        operation, records = reclaimer.execute(plan, confirmed=True)
        reporter.display_summary(operation, records)
        _export_summary(reporter, summary_json, plan, operation, records)

    except typer.Exit:
        # Re-raise Typer exit codes (for early returns like empty plans)
        raise
    except InvalidSignatureError as e:
        reporter.error(str(e))
        console.print("Usage: ocp-reclaim cleanup <signature>")
        raise typer.Exit(code=1)
    except SignatureNotFoundError as e:
        reporter.error("No signature provided and could not extract one from metadata.json")
        logger.debug(f"Signature lookup failed: {e}")
        reporter.info(str(e))
        console.print()
        _print_signature_usage()
        raise typer.Exit(code=1)
    except CredentialValidationError as e:
        reporter.error(str(e))
        if e.remediation:
            reporter.info(e.remediation)
        raise typer.Exit(code=1)
    except Exception as e:
        console.print(f"✗ Error during cleanup: {e}", style="bold red")
        logger.exception("Error in cleanup command")
        raise typer.Exit(code=2)


@app.command("history")
def history(
    signature: Optional[str] = typer.Option(None, "--signature", "-s", help="Only show runs for this signature"),
    since: Optional[str] = typer.Option(None, "--since", help="Only show runs on or after this date (YYYY-MM-DD)"),
):
    """Show past reclamation runs from the audit log."""
    from ..restore.audit import AuditStorage

    try:
        since_dt = datetime.strptime(since, "%Y-%m-%d") if since else None
    except ValueError:
        console.print(f"✗ Invalid date: {since}. Use YYYY-MM-DD", style="bold red")
        raise typer.Exit(code=1)

    try:
        operations = AuditStorage(config.audit_dir).query_operations(since=since_dt, signature=signature)

        if not operations:
            console.print("No reclamation runs recorded", style="yellow")
            return

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Timestamp", style="cyan")
        table.add_column("Signature")
        table.add_column("Cloud")
        table.add_column("Status")
        table.add_column("Deleted", justify="right", style="green")
        table.add_column("Failed", justify="right", style="red")
        table.add_column("Operation ID", style="dim")

        for audit_data in operations:
            op = audit_data["operation"]
            table.add_row(
                op["timestamp"],
                op.get("signature") or "",
                op.get("cloud") or "",
                op["status"],
                str(op["succeeded_count"]),
                str(op["failed_count"]),
                op["operation_id"],
            )

        console.print()
        console.print(table)
        console.print()
        console.print(f"Total runs: {len(operations)}")

    except Exception as e:
        console.print(f"✗ Error reading audit log: {e}", style="bold red")
        logger.exception("Error in history command")
        raise typer.Exit(code=2)


# Floating IP commands
fip_app = typer.Typer(help="Floating IP hygiene for the cluster's API and Ingress addresses")


def _fip_auditor(reporter: ReclamationReporter, cluster_name: Optional[str], base_domain: Optional[str]):
    from ..restore.floating_ips import FloatingIPAuditor

    client, _ = _connect(reporter)
    return FloatingIPAuditor(
        client,
        cluster_name=cluster_name or config.cluster_name,
        base_domain=base_domain or config.base_domain,
    )


@fip_app.command("show")
def fip_show(
    cluster_name: Optional[str] = typer.Option(None, "--cluster-name", "-c", help="Cluster name"),
    base_domain: Optional[str] = typer.Option(None, "--base-domain", "-d", help="Base domain"),
):
    """Show floating IP usage summary."""
    reporter = ReclamationReporter(console)

    try:
        auditor = _fip_auditor(reporter, cluster_name, base_domain)
        usages = auditor.usage()

        reporter.info(f"OpenShift Floating IP Usage for {auditor.fqdn}:")
        console.print()

        for usage in usages:
            reporter.info(f"{usage.role} Floating IPs:")
            for fip in usage.addresses:
                fixed_ip = fip.get("fixed_ip_address")
                target = f" -> {fixed_ip}" if fixed_ip else " [UNUSED]"
                console.print(f"  {fip.display_name} ({fip.get('status')}){target}", highlight=False, markup=False)
            console.print()

        reporter.info("Summary:")
        for usage in usages:
            console.print(f"  - {usage.role} floating IPs: {usage.total} total, {len(usage.unused)} unused")
        console.print(f"  - Total unused: {sum(len(u.unused) for u in usages)}")

    except CredentialValidationError as e:
        reporter.error(str(e))
        if e.remediation:
            reporter.info(e.remediation)
        raise typer.Exit(code=1)
    except CloudOperationError as e:
        reporter.error(str(e))
        raise typer.Exit(code=1)
    except Exception as e:
        console.print(f"✗ Error during fip show: {e}", style="bold red")
        logger.exception("Error in fip show command")
        raise typer.Exit(code=2)


@fip_app.command("list")
def fip_list(
    cluster_name: Optional[str] = typer.Option(None, "--cluster-name", "-c", help="Cluster name"),
    base_domain: Optional[str] = typer.Option(None, "--base-domain", "-d", help="Base domain"),
):
    """List unused floating IPs."""
    reporter = ReclamationReporter(console)

    try:
        auditor = _fip_auditor(reporter, cluster_name, base_domain)
        for fip in auditor.find_unused():
            console.print(
                f"{fip.display_name} ({fip.resource_id}): {fip.description} [{fip.get('status')}]",
                highlight=False,
                markup=False,
            )

    except CredentialValidationError as e:
        reporter.error(str(e))
        if e.remediation:
            reporter.info(e.remediation)
        raise typer.Exit(code=1)
    except CloudOperationError as e:
        reporter.error(str(e))
        raise typer.Exit(code=1)
    except Exception as e:
        console.print(f"✗ Error during fip list: {e}", style="bold red")
        logger.exception("Error in fip list command")
        raise typer.Exit(code=2)


@fip_app.command("cleanup")
def fip_cleanup(
    cluster_name: Optional[str] = typer.Option(None, "--cluster-name", "-c", help="Cluster name"),
    base_domain: Optional[str] = typer.Option(None, "--base-domain", "-d", help="Base domain"),
    delete: bool = typer.Option(False, "--delete", help="Actually delete floating IPs (default: dry run)"),
):
    """Clean up unused floating IPs (dry run unless --delete is given)."""
    reporter = ReclamationReporter(console)

    try:
        auditor = _fip_auditor(reporter, cluster_name, base_domain)

        reporter.info("Finding unused OpenShift floating IPs...")
        unused = auditor.find_unused()

        if not unused:
            reporter.success(f"No unused floating IPs found for {auditor.fqdn}")
            return

        reporter.info("Found unused floating IPs:")
        for fip in unused:
            console.print(
                f"  - {fip.display_name} ({fip.resource_id}): {fip.description} [{fip.get('status')}]",
                highlight=False,
                markup=False,
            )
        reporter.warning(f"Found {len(unused)} unused floating IP(s) to delete")

        if not delete:
            reporter.info("DRY RUN: Use --delete to actually remove these floating IPs")
            return

        console.print()
        if not typer.confirm(f"Are you sure you want to delete these {len(unused)} floating IP(s)?", default=False):
            reporter.info("Deletion cancelled")
            return

        results = auditor.release(unused)
        for address, error in results.items():
            if error is None:
                reporter.success(f"Deleted: {address}")
            else:
                reporter.error(f"Failed to delete: {address}")

        reporter.success("Cleanup completed!")

    except typer.Abort:
        reporter.info("Deletion cancelled")
    except CredentialValidationError as e:
        reporter.error(str(e))
        if e.remediation:
            reporter.info(e.remediation)
        raise typer.Exit(code=1)
    except CloudOperationError as e:
        reporter.error(str(e))
        raise typer.Exit(code=1)
    except Exception as e:
        console.print(f"✗ Error during fip cleanup: {e}", style="bold red")
        logger.exception("Error in fip cleanup command")
        raise typer.Exit(code=2)


app.add_typer(fip_app, name="fip")


def cli_main():
    """Entry point for console script."""
    app()


if __name__ == "__main__":
    cli_main()
