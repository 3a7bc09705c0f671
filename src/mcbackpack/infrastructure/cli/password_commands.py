"""CLI commands for backpack password management.

Hashes are passed through as given; hashing is the caller's concern.
"""

from __future__ import annotations

import click

from mcbackpack.domain.exceptions import DomainException
from mcbackpack.infrastructure.cli.runtime import run_with_store
from mcbackpack.infrastructure.config import StorageConfig


@click.command("set")
@click.option("--uuid", required=True, help="Backpack identifier.")
@click.option("--hash", "pwd_hash", required=True, help="Password hash to store.")
@click.pass_obj
def password_set(config: StorageConfig, uuid: str, pwd_hash: str) -> None:
    """Lock a backpack with a password hash."""
    try:
        run_with_store(config, lambda store: store.set_pwd(uuid, pwd_hash))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Backpack {uuid} locked.")


@click.command("check")
@click.option("--uuid", required=True, help="Backpack identifier.")
@click.option("--hash", "input_hash", required=True, help="Hash to verify.")
@click.pass_obj
def password_check(config: StorageConfig, uuid: str, input_hash: str) -> None:
    """Verify a password hash. Exits with status 2 on mismatch."""
    try:
        ok = run_with_store(config, lambda store: store.check_pwd(uuid, input_hash))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not ok:
        click.echo("Password does not match.")
        click.get_current_context().exit(2)
    click.echo("Password matches.")


@click.command("change")
@click.option("--uuid", required=True, help="Backpack identifier.")
@click.option("--hash", "new_hash", required=True, help="New password hash.")
@click.pass_obj
def password_change(config: StorageConfig, uuid: str, new_hash: str) -> None:
    """Replace a backpack's password hash."""
    try:
        run_with_store(config, lambda store: store.change_pwd(uuid, new_hash))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Backpack {uuid} password changed.")


@click.command("delete")
@click.option("--uuid", required=True, help="Backpack identifier.")
@click.option("--hash", "input_hash", required=True, help="Current password hash.")
@click.pass_obj
def password_delete(config: StorageConfig, uuid: str, input_hash: str) -> None:
    """Remove password protection from a backpack."""
    try:
        removed = run_with_store(config, lambda store: store.delete_pwd(uuid, input_hash))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not removed:
        raise click.ClickException("Password does not match; backpack is still locked.")
    click.echo(f"Backpack {uuid} unlocked.")
