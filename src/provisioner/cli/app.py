"""Command-line interface: ``dns`` (stage A) and ``install`` (stage B)."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from provisioner.cli.container import apply_overrides, ServiceContainer
from provisioner.config import get_settings, LogFormat, Settings
from provisioner.domain.exceptions import ProvisioningError
from provisioner.domain.models.cloud import CloudIdentity
from provisioner.domain.services.credentials import resolve_identity
from provisioner.domain.services.workflow_service import DnsStageOutcome, InstallOutcome
from provisioner.infrastructure.observability.logging import setup_logging


app = typer.Typer(
    help="Provision an OpenShift cluster on AWS: Route 53 delegation first, then installation.",
    no_args_is_help=True,
)


def build_container(
    settings: Settings, *, assume_yes: bool = False, pull_secret_file: Path | None = None
) -> ServiceContainer:
    try:
        return ServiceContainer(
            settings, assume_yes=assume_yes, pull_secret_file=pull_secret_file
        )
    except ValueError as exc:
        typer.secho(f"ERROR: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc


def _identity(settings: Settings) -> CloudIdentity:
    secret = settings.aws.secret_access_key
    return resolve_identity(
        settings.aws.access_key_id,
        secret.get_secret_value() if secret is not None else None,
        settings.aws.region,
        output_format=settings.aws.output_format,
        profile=settings.aws.profile,
    )


def _fail(exc: ProvisioningError) -> typer.Exit:
    typer.secho(f"ERROR: {exc}", fg=typer.colors.RED, err=True)
    return typer.Exit(code=exc.exit_code)


@app.callback()
def main_callback(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING, ERROR"),
    log_format: Optional[LogFormat] = typer.Option(None, "--log-format"),
) -> None:
    settings = get_settings()
    setup_logging(
        log_level or settings.observability.log_level,
        (log_format or settings.observability.log_format).value,
    )


# ------------------------------------------------------------------------------
# Stage A
# ------------------------------------------------------------------------------

@app.command()
def dns(
    region: Optional[str] = typer.Option(None, "--region"),
    base_domain: Optional[str] = typer.Option(None, "--base-domain"),
    nameservers_file: Optional[Path] = typer.Option(None, "--nameservers-file"),
    target_user: Optional[str] = typer.Option(None, "--target-user"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Assume the registrar has been updated"),
) -> None:
    """Configure credentials, create or discover the hosted zone, and check delegation."""
    settings = apply_overrides(
        get_settings(),
        aws__region=region,
        cluster__base_domain=base_domain,
        workflow__nameservers_file=nameservers_file,
        host__target_user=target_user,
    )
    try:
        identity = _identity(settings)
        container = build_container(settings, assume_yes=yes)
        outcome = container.workflow.run_dns_stage(identity, settings.cluster.base_domain)
    except ProvisioningError as exc:
        raise _fail(exc) from exc
    _print_dns_summary(outcome)


def _print_dns_summary(outcome: DnsStageOutcome) -> None:
    zone = outcome.provisioning.zone
    typer.echo("")
    typer.echo(f"Hosted zone  : {zone.domain} ({zone.zone_id})")
    typer.echo(f"Created      : {'yes' if outcome.provisioning.created else 'no, reused existing'}")
    typer.echo(f"Nameservers  : saved to {outcome.nameservers_file}")
    for nameserver in zone.nameservers:
        typer.echo(f"  {nameserver}")
    typer.echo("Propagation  :")
    for result in outcome.propagation:
        status = "answered" if result.answered else (result.error or "no answer yet")
        typer.echo(f"  {result.nameserver}: {status}")
    typer.echo("Hosted zones in account:")
    for listed in outcome.zones:
        typer.echo(f"  {listed.zone_id}  {listed.domain}{'  (private)' if listed.private else ''}")
    typer.echo("")
    typer.echo("DNS setup complete. Run the install command next.")


# ------------------------------------------------------------------------------
# Stage B
# ------------------------------------------------------------------------------

@app.command()
def install(
    region: Optional[str] = typer.Option(None, "--region"),
    base_domain: Optional[str] = typer.Option(None, "--base-domain"),
    cluster_name: Optional[str] = typer.Option(None, "--cluster-name"),
    version: Optional[str] = typer.Option(None, "--version", help="Pinned openshift-install version"),
    install_dir: Optional[Path] = typer.Option(None, "--install-dir"),
    bin_dir: Optional[Path] = typer.Option(None, "--bin-dir"),
    target_user: Optional[str] = typer.Option(None, "--target-user"),
    pull_secret_file: Optional[Path] = typer.Option(
        None, "--pull-secret-file", exists=True, dir_okay=False, readable=True,
        help="Read the pull secret from a file instead of standard input",
    ),
) -> None:
    """Acquire tools, prepare key and manifest, run the installer, and hand over access."""
    settings = apply_overrides(
        get_settings(),
        aws__region=region,
        cluster__base_domain=base_domain,
        cluster__name=cluster_name,
        cluster__install_dir=install_dir,
        tools__version=version,
        tools__bin_dir=bin_dir,
        host__target_user=target_user,
    )
    try:
        identity = _identity(settings)
        container = build_container(settings, pull_secret_file=pull_secret_file)
        outcome = container.workflow.run_install(
            identity,
            cluster_name=settings.cluster.name,
            base_domain=settings.cluster.base_domain,
            install_dir=settings.install_dir,
        )
    except ProvisioningError as exc:
        raise _fail(exc) from exc
    _print_install_summary(outcome)


def _print_install_summary(outcome: InstallOutcome) -> None:
    access = outcome.access
    typer.echo("")
    typer.echo("=" * 60)
    typer.echo("OpenShift cluster installation complete")
    typer.echo("=" * 60)
    typer.echo(f"Console URL : {access.console_url}")
    typer.echo(f"API URL     : {access.api_url}")
    typer.echo(f"Username    : {access.admin_username}")
    typer.echo(f"Password    : {access.admin_password}")
    typer.echo(f"Kubeconfig  : {access.kubeconfig_path}")
    typer.echo(f"Manifest    : {outcome.manifest.backup_path} (backup)")
    typer.echo(f"SSH key     : {outcome.keypair.private_key_path}")
