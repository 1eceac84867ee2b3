# /healthapp/commands.py
# Comandos de consola: `flask create-user` y `flask purge-sessions`.

import click

from security import current_sessions
from security.accounts import taken_identities, register_user
from security.models import Role


def register_commands(app):
    @app.cli.command("create-user")
    @click.argument("username")
    @click.argument("email")
    @click.option("--role", type=click.Choice([r.value for r in Role]), default=Role.USER.value,
                  show_default=True)
    @click.password_option(confirmation_prompt=True)
    def create_user(username, email, role, password):
        """Crea un usuario (por ejemplo el primer admin)."""
        taken = taken_identities(username, email.lower())
        if not taken.ok:
            raise click.ClickException("Database unavailable.")
        if taken.value["username"] or taken.value["email"]:
            raise click.ClickException(f"User '{username}' or email '{email}' already exists.")
        if len(password) < 8:
            raise click.ClickException("Password must be at least 8 characters.")

        created = register_user(username, email, password, role=Role(role))
        if not created.ok:
            raise click.ClickException(f"Could not create user ({created.error.value}).")
        click.echo(f"Created user: {username} (role: {role})")

    @app.cli.command("purge-sessions")
    def purge_sessions():
        """Borra las sesiones vencidas."""
        removed = current_sessions().purge_expired()
        click.echo(f"Removed {removed} expired session(s).")
