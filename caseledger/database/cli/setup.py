"""
Setup & Initialization Commands
--------------------------------

Database initialization commands.

Commands:
    - init: Create the database schema
    - reset: Delete and recreate the database (dangerous!)
"""
import click

from caseledger.core.logging_manager import handle_cli_error
from caseledger.core.exceptions import ConfigError, DatabaseError
from . import get_db


@click.command()
@click.pass_context
def init(ctx):
    """Initialize the database schema."""
    try:
        db = get_db(ctx)
        click.echo("🗄️  Initializing database schema...")
        db.initialize_schema()
        click.echo(f"✅ Database ready: {db.db_path}")

    except (DatabaseError, ConfigError) as e:
        handle_cli_error(ctx, e, "init")


@click.command()
@click.confirmation_option(prompt="⚠️  This will DELETE the database! Are you sure?")
@click.pass_context
def reset(ctx):
    """Reset database (DANGEROUS - deletes all data!)."""
    try:
        db_path = ctx.obj["db_path"]

        click.echo("🗑️  Resetting database...")

        if db_path.exists():
            db_path.unlink()
            click.echo(f"  Deleted: {db_path}")

        click.echo("🔄 Reinitializing...")
        db = get_db(ctx)
        db.initialize_schema()

        click.echo("✅ Database reset complete!")

    except (DatabaseError, ConfigError) as e:
        handle_cli_error(ctx, e, "reset")
