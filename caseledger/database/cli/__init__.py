#!/usr/bin/env python3
"""
caseledger Integrity CLI
------------------------

Command-line interface for the record store and its integrity engine.

This module provides the main CLI group and shared context setup
for all commands.

Command Structure:
    - Setup & Initialization (init, reset)
    - Integrity (scan, repair, validate, rules)
    - Health (health)

Usage:
    # Get general help
    caseledger --help

    # Scan a guild and print the report as JSON
    caseledger scan 1234 --json

    # Preview repairs without writing
    caseledger repair 1234 --dry-run
"""
import click
from pathlib import Path

from caseledger.core.paths import CONFIG_PATH, DB_PATH, LOG_DIR
from caseledger.database import CaseLedgerDB, load_integrity_config


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    default=str(DB_PATH),
    help="Path to database file",
)
@click.option(
    "--log-dir",
    type=click.Path(),
    default=str(LOG_DIR),
    help="Path to log directory",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(),
    default=str(CONFIG_PATH),
    help="Path to integrity configuration (YAML)",
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Show detailed errors and tracebacks",
)
@click.pass_context
def cli(ctx, db_path, log_dir, config_path, verbose):
    """caseledger record integrity CLI"""
    ctx.ensure_object(dict)
    ctx.obj["db_path"] = Path(db_path)
    ctx.obj["log_dir"] = Path(log_dir)
    ctx.obj["config_path"] = Path(config_path)
    ctx.obj["verbose"] = verbose


def get_db(ctx) -> CaseLedgerDB:
    """
    Get or create database instance from context.

    Raises:
        ConfigError: If the integrity configuration is invalid
        DatabaseError: If the database cannot be opened
    """
    if "db" not in ctx.obj:
        config = load_integrity_config(ctx.obj["config_path"])
        ctx.obj["db"] = CaseLedgerDB(
            db_path=ctx.obj["db_path"],
            log_dir=ctx.obj["log_dir"],
            config=config,
        )
        ctx.obj["logger"] = ctx.obj["db"].logger
    return ctx.obj["db"]


# Import and register command modules
# These imports must come after CLI group definition
from .setup import init, reset  # noqa: E402
from .integrity import scan, repair, validate, rules, health  # noqa: E402

cli.add_command(init)
cli.add_command(reset)
cli.add_command(scan)
cli.add_command(repair)
cli.add_command(validate)
cli.add_command(rules)
cli.add_command(health)


if __name__ == "__main__":
    cli(obj={})
