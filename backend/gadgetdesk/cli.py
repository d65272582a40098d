# Overview: Flask CLI command groups for bootstrap and user management.

# backend/gadgetdesk/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Use: flask --app gadgetdesk <group> <command> [options]
#
# System bootstrap:
# - flask --app gadgetdesk system init-db
#   Create all tables that do not exist yet (use `flask db upgrade` in production).
# - flask --app gadgetdesk system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Users:
# - flask --app gadgetdesk users create --username rina --email rina@toko.local --full-name "Rina" --password "Password123!"
#   Create a staff login (prompts for the password if omitted).
# - flask --app gadgetdesk users list
#   List users with active status.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import User
from .services.auth_service import create_user, PasswordValidationError
from .validation import ConflictError


@click.group('system')
def system_group():
    """Database bootstrap commands."""


@system_group.command('init-db')
@with_appcontext
def init_db_command():
    """Create missing tables."""
    db.create_all()
    click.echo("Database tables created.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Confirm dropping all data.')
@with_appcontext
def reset_db_command(yes: bool):
    """Drop and recreate all tables."""
    if not yes:
        raise click.UsageError("Refusing to reset without --yes")
    db.drop_all()
    db.create_all()
    click.echo("Database reset.")


@click.group('users')
def users_group():
    """Staff account commands."""


@users_group.command('create')
@click.option('--username', prompt=True)
@click.option('--email', prompt=True)
@click.option('--full-name', default=None, help='Name printed as the salesperson on sales.')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@with_appcontext
def create_user_command(username: str, email: str, full_name: str | None, password: str):
    """Create a staff user."""
    try:
        user = create_user(username=username, email=email, password=password, full_name=full_name)
    except (PasswordValidationError, ConflictError) as e:
        raise click.ClickException(str(e))
    click.echo(f"Created user {user.username} (id={user.id})")


@users_group.command('list')
@with_appcontext
def list_users_command():
    """List users."""
    users = db.session.query(User).order_by(User.username.asc()).all()
    if not users:
        click.echo("No users.")
        return
    for user in users:
        status = "active" if user.is_active else "inactive"
        click.echo(f"{user.id:>4}  {user.username:<20} {user.full_name or '-':<24} {user.email:<32} {status}")


def register_commands(app):
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
