"""Command-line interface for route53-ddns deployment."""

import asyncio
import logging
import sys
from dataclasses import replace

import click

from .config import DEFAULT_CONFIG_FILE, DeployConfig
from .deploy import DeployResult, Deployment
from .exceptions import AccessDeniedError, DDNSDeployError
from .infra.aws import AwsClients
from .infra.lambda_builder import write_package


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s" if not verbose else "%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    # botocore is very chatty at DEBUG
    logging.getLogger("botocore").setLevel(logging.WARNING)


def _load_config(config_file: str, region: str | None) -> DeployConfig:
    try:
        config = DeployConfig.load(config_file)
    except FileNotFoundError:
        click.echo(f"✗ Config file not found: {config_file}", err=True)
        sys.exit(1)
    except DDNSDeployError as e:
        click.echo(f"✗ Problems with config {config_file}: {e}", err=True)
        sys.exit(1)

    if region:
        # Re-validates the override
        try:
            config = replace(config, region=region)
        except DDNSDeployError as e:
            click.echo(f"✗ {e}", err=True)
            sys.exit(1)
    return config


def _report(result: DeployResult, applied: bool) -> None:
    if result.up_to_date:
        click.echo("✓ Configuration looks up-to-date.")
    elif applied:
        click.echo("✓ Applied changes:")
        for name in result.applied:
            click.echo(f"  {name}")
    else:
        click.echo("Configuration changes found:")
        for name in result.changes:
            click.echo(f"  {name}")
        click.echo("Apply with: route53-ddns deploy --apply")

    if result.url:
        click.echo(f"Dynamic DNS webhook:\n{result.url}")


def _run(config: DeployConfig, endpoint_url: str | None, apply: bool) -> None:
    async def _deploy() -> DeployResult:
        async with AwsClients(region=config.region, endpoint_url=endpoint_url) as clients:
            return await Deployment(config, clients).run(apply=apply)

    try:
        result = asyncio.run(_deploy())
    except AccessDeniedError as e:
        click.echo(f"✗ {e}", err=True)
        sys.exit(1)
    except Exception as e:
        click.echo(f"✗ Deployment failed: {e}", err=True)
        sys.exit(1)

    _report(result, applied=apply)


config_option = click.option(
    "--config",
    "-c",
    "config_file",
    default=DEFAULT_CONFIG_FILE,
    show_default=True,
    type=click.Path(dir_okay=False),
    help="JSON or YAML configuration file",
)
region_option = click.option(
    "--region",
    help="AWS region (overrides the region in the config file)",
)
endpoint_option = click.option(
    "--endpoint-url",
    help="AWS endpoint URL (e.g., http://localhost:4566 for LocalStack)",
)


@click.group()
@click.version_option(package_name="route53-ddns")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Route53 dynamic DNS webhook deployment CLI."""
    _configure_logging(verbose)


@cli.command()
@config_option
@region_option
@endpoint_option
def plan(config_file: str, region: str | None, endpoint_url: str | None) -> None:
    """Show which resources would change, without changing anything."""
    config = _load_config(config_file, region)
    _run(config, endpoint_url, apply=False)


@cli.command()
@config_option
@region_option
@endpoint_option
@click.option(
    "--apply",
    is_flag=True,
    help="Apply the changes (default is a dry run)",
)
def deploy(config_file: str, region: str | None, endpoint_url: str | None, apply: bool) -> None:
    """Create or update the webhook's AWS resources."""
    config = _load_config(config_file, region)
    _run(config, endpoint_url, apply=apply)


@cli.command()
@config_option
@click.option(
    "--output",
    "-o",
    default="dist/function.zip",
    show_default=True,
    type=click.Path(dir_okay=False),
    help="Output zip file",
)
def package(config_file: str, output: str) -> None:
    """Build the function deployment package."""
    config = _load_config(config_file, None)
    try:
        built = write_package(config.code_path, output)
    except DDNSDeployError as e:
        click.echo(f"✗ {e}", err=True)
        sys.exit(1)

    click.echo(f"✓ Wrote {output} ({built.size_bytes / 1024:.1f} KB)")
    click.echo(f"  Code SHA256: {built.sha256}")


if __name__ == "__main__":
    cli()
