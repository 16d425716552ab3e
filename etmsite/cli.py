"""Flask CLI commands for database setup and administrator management."""

import logging
import os

import click
from flask import current_app
from flask.cli import with_appcontext

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def _extension():
    return current_app.extensions['etmsite']


@click.command('init-db')
@with_appcontext
def init_db_command():
    """Create the tables and the upload directory."""
    ext = _extension()
    ext.db.create_all()
    os.makedirs(ext.settings.upload_dir, exist_ok=True)

    tables = ext.db.existing_tables()
    click.echo(f"Tables: {', '.join(tables)}")
    click.echo(f"Upload directory: {ext.settings.upload_dir}")


@click.command('create-admin')
@click.option('--login', required=True, help='Administrator login.')
@click.password_option(help='Administrator password (prompted when omitted).')
@with_appcontext
def create_admin_command(login, password):
    """Create an administrator, or reset the password of an existing one."""
    login = login.strip()
    if not login:
        raise click.BadParameter('login must not be blank', param_hint='--login')
    if len(password) < MIN_PASSWORD_LENGTH:
        raise click.BadParameter(
            f'password must be at least {MIN_PASSWORD_LENGTH} characters', param_hint='--password'
        )

    ext = _extension()
    if ext.credentials.set_password(login, password):
        ext.log.log_security_event('Admin password reset from CLI', {'login': login})
        click.echo(f"Password updated for '{login}'")
        return

    admin_id = ext.credentials.create_admin(login, password)
    ext.log.log_security_event('Admin created from CLI', {'login': login}, user_id=admin_id)
    click.echo(f"Created admin '{login}' (id {admin_id})")


@click.command('purge-tokens')
@with_appcontext
def purge_tokens_command():
    """Delete expired auth tokens."""
    removed = _extension().auth.purge_expired()
    logger.info(f"Purged {removed} expired tokens")
    click.echo(f"Removed {removed} expired tokens")


def init_app(app):
    """Register the etmsite commands on the app's CLI"""
    app.cli.add_command(init_db_command)
    app.cli.add_command(create_admin_command)
    app.cli.add_command(purge_tokens_command)
