#!/usr/bin/env python3
"""
Main CLI entry point for the chatter backend.
"""

import os
import sys
from pathlib import Path

import click
import uvicorn
from alembic import command
from alembic.config import Config

from chatter import __version__
from chatter.config import settings
from chatter.logging import configure_logging, get_logger

logger = get_logger(__name__)


def get_alembic_config() -> Config:
    """Locate alembic.ini in the working directory or the project root."""
    candidates = [
        Path.cwd() / "alembic.ini",
        Path(__file__).resolve().parent.parent.parent / "alembic.ini",
    ]
    for alembic_ini in candidates:
        if alembic_ini.exists():
            return Config(str(alembic_ini))

    searched = ", ".join(str(path) for path in candidates)
    raise FileNotFoundError(f"alembic.ini not found (looked in {searched})")


@click.group()
@click.version_option(version=__version__, prog_name="chatter")
def cli() -> None:
    """Chatter CLI - run the server and manage the database."""
    pass


@cli.command()
@click.option("--host", default=settings.api_host, help="Host to bind to")
@click.option("--port", default=settings.api_port, type=int, help="Port to bind to")
@click.option(
    "--reload",
    is_flag=True,
    default=False,
    help="Enable auto-reload for development (or set CHATTER_API_RELOAD)",
)
@click.option("--workers", default=1, type=int, help="Number of worker processes (default: 1)")
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["debug", "info", "warning", "error"]),
    help="Log level (default: info)",
)
def serve(host: str, port: int, reload: bool, workers: int, log_level: str) -> None:
    """Start the chatter API server."""
    reload = reload or settings.api_reload
    configure_logging(debug=(log_level == "debug"))

    logger.info(
        "Starting chatter API server",
        host=host,
        port=port,
        reload=reload,
        workers=workers,
        log_level=log_level,
    )

    # Worker and reload processes re-import the app and read settings from the environment
    if log_level == "debug":
        os.environ["CHATTER_DEBUG"] = "true"
        os.environ["CHATTER_LOG_LEVEL"] = "debug"
    else:
        os.environ.setdefault("CHATTER_DEBUG", "false")
        os.environ.setdefault("CHATTER_LOG_LEVEL", log_level)

    if workers > 1 and settings.pubsub_backend == "memory":
        logger.warning(
            "In-memory pub/sub does not reach across workers; set CHATTER_PUBSUB_BACKEND=redis"
        )

    try:
        uvicorn.run(
            "chatter.api.app:app",
            host=host,
            port=port,
            reload=reload,
            workers=(workers if not reload else 1),
            log_level=log_level,
            access_log=True,
        )
    except KeyboardInterrupt:
        logger.info("Server shutdown requested by user")
    except Exception as e:
        logger.error("Server startup failed", error=str(e))
        sys.exit(1)


@cli.group()
def migrate() -> None:
    """Apply or inspect database migrations."""
    configure_logging(debug=settings.debug)


@migrate.command()
@click.argument("revision", default="head")
def upgrade(revision: str) -> None:
    """Upgrade database to a revision (default: head)."""
    try:
        config = get_alembic_config()
        logger.info("Upgrading database", revision=revision)
        command.upgrade(config, revision)
        logger.info("Database upgrade completed successfully")
    except Exception as e:
        logger.error("Database upgrade failed", error=str(e))
        sys.exit(1)


@migrate.command()
@click.argument("revision", default="-1")
def downgrade(revision: str) -> None:
    """Downgrade database to a revision (default: -1)."""
    try:
        config = get_alembic_config()
        logger.info("Downgrading database", revision=revision)
        command.downgrade(config, revision)
        logger.info("Database downgrade completed successfully")
    except Exception as e:
        logger.error("Database downgrade failed", error=str(e))
        sys.exit(1)


@migrate.command()
def current() -> None:
    """Show the current database revision."""
    try:
        command.current(get_alembic_config(), verbose=True)
    except Exception as e:
        logger.error("Failed to read current revision", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    cli()
