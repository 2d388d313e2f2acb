"""CLI commands for registering users with the identity collaborator."""

from __future__ import annotations

import click

from orderdesk.domain.model.user import User
from orderdesk.infrastructure.bootstrap import user_directory
from orderdesk.infrastructure.persistence.json_store import JsonStore


@click.command("add")
@click.option("--name", required=True, help="User display name.")
@click.pass_obj
def user_add(store: JsonStore, name: str) -> None:
    """Register a user who can place orders."""
    if not name.strip():
        raise click.BadParameter("Name cannot be blank.", param_hint="--name")

    user = User(id=None, name=name.strip())
    user_directory(store).register(user)
    click.echo(f"User #{user.id} '{user.name}' registered")
