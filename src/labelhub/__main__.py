"""CLI interface for labelhub.

This module provides a command-line interface for managing the labelhub
service, including initialization, server management, and status checks.
"""
import asyncio
import logging
import sys
from pathlib import Path

import click
import uvicorn

from .core.config.settings import LabelhubConfig, find_config_file, init_config


def configure_logging(config: LabelhubConfig) -> None:
    """Configure the root logger from the loaded configuration."""
    logging.basicConfig(
        level=config.log_level.upper(),
        filename=config.log_file,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@click.group()
@click.version_option(package_name="labelhub")
def cli():
    """labelhub - assignment lifecycle, review and scoring for annotation work."""
    pass


@cli.command()
@click.option(
    "--config-path",
    "-c",
    type=click.Path(dir_okay=False),
    default="labelhub.yaml",
    help="Path to configuration file",
)
@click.option("--force", "-f", is_flag=True, help="Force overwrite existing config")
def init(config_path: str, force: bool):
    """Initialize labelhub configuration.

    Creates a default configuration file with recommended settings.
    """
    config_file = Path(config_path)

    if config_file.exists() and not force:
        click.echo(f"Configuration file already exists: {config_path}")
        click.echo("Use --force to overwrite")
        return

    try:
        config = LabelhubConfig.create_default_config(config_file)

        click.echo(f"✓ Created configuration file: {config_path}")
        click.echo("\nDefault configuration:")
        click.echo(f"  API Server: {config.api_host}:{config.api_port}")
        click.echo(f"  Database: {config.get_database_url()}")
        click.echo(
            f"  Scoring: critical weight >= {config.critical_error_weight}, "
            f"penalty {config.penalty_per_weight} per weight"
        )
        click.echo(f"\nEdit {config_path} to customize settings.")

    except Exception as e:
        click.echo(f"Error creating configuration: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to configuration file",
)
@click.option("--host", help="Override API host")
@click.option("--port", type=int, help="Override API port")
def start(config: str, host: str, port: int):
    """Start the labelhub API server."""
    try:
        app_config = init_config(config) if config else init_config()

        if host:
            app_config.api_host = host
        if port:
            app_config.api_port = port

        configure_logging(app_config)

        click.echo("🚀 Starting labelhub...")
        click.echo(f"   API: http://{app_config.api_host}:{app_config.api_port}")
        click.echo("\nPress Ctrl+C to stop\n")

        uvicorn.run(
            "labelhub.api.app:app",
            host=app_config.api_host,
            port=app_config.api_port,
            log_level=app_config.log_level.lower(),
        )

    except KeyboardInterrupt:
        click.echo("\n\nStopping labelhub...")
    except Exception as e:
        click.echo(f"Error starting server: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to configuration file",
)
def status(config: str):
    """Check labelhub system status.

    Displays configuration and assignment counts per status.
    """
    try:
        app_config = init_config(config) if config else init_config()

        click.echo("labelhub Status")
        click.echo("=" * 50)
        click.echo(f"Configuration: {config or find_config_file() or 'defaults'}")
        click.echo(f"Database URL: {app_config.get_database_url()}")
        click.echo(f"API Server: {app_config.api_host}:{app_config.api_port}")
        click.echo(f"Log Level: {app_config.log_level}")

        from .core.storage.database import init_db
        from .core.storage.repositories import AssignmentRepository

        db = init_db(app_config.get_database_url())

        async def get_counts():
            await db.create_tables()
            async with db.session() as session:
                counts = await AssignmentRepository(session).count_by_status()
            await db.close()
            return counts

        counts = asyncio.run(get_counts())
        click.echo("\n✓ Database connection successful")

        total = sum(counts.values())
        click.echo(f"\nAssignments: {total} total")
        for status_name, count in sorted(counts.items()):
            click.echo(f"   {status_name}: {count}")

    except Exception as e:
        click.echo(f"Error checking status: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to configuration file",
)
@click.option("--limit", "-n", type=int, default=20, help="Number of review logs to show")
@click.option("--verdict", type=click.Choice(["approved", "rejected"]), help="Filter by verdict")
def logs(config: str, limit: int, verdict: str):
    """View recent review decisions."""
    try:
        app_config = init_config(config) if config else init_config()

        from .core.storage.database import init_db
        from .core.storage.repositories import ReviewLogRepository

        db = init_db(app_config.get_database_url())

        async def get_recent_logs():
            await db.create_tables()
            async with db.session() as session:
                recent = await ReviewLogRepository(session).list_recent(limit, verdict)
            await db.close()
            return recent

        recent = asyncio.run(get_recent_logs())

        if not recent:
            click.echo("No review logs found")
            return

        click.echo(f"\nRecent Reviews (showing {len(recent)}):")
        click.echo("=" * 80)

        for log in recent:
            icon = {"approved": "✅", "rejected": "❌"}.get(log.verdict, "❓")
            click.echo(
                f"\n{icon} Review #{log.id} - assignment {log.assignment_id} [{log.verdict.upper()}]"
            )
            click.echo(f"   Reviewer: {log.reviewer_id}")
            click.echo(f"   Created: {log.created_at.strftime('%Y-%m-%d %H:%M:%S')}")
            if log.error_category:
                click.echo(f"   Error: {log.error_category} (penalty {log.score_penalty})")
            if log.comment:
                click.echo(f"   Comment: {log.comment[:100]}")
            if log.is_audited:
                click.echo(f"   Audit: {log.audit_result}")

    except Exception as e:
        click.echo(f"Error retrieving logs: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    cli()
