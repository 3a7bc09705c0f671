import dataclasses
import logging
from pathlib import Path

import click

from mcbackpack.domain.exceptions import DomainException
from mcbackpack.infrastructure.cli.backpack_commands import (
    backpack_create,
    backpack_list,
    backpack_save,
    backpack_show,
    backpack_texture,
)
from mcbackpack.infrastructure.cli.password_commands import (
    password_change,
    password_check,
    password_delete,
    password_set,
)
from mcbackpack.infrastructure.config import BACKENDS, StorageConfig


@click.group()
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding backpack data.",
)
@click.option(
    "--backend",
    type=click.Choice(BACKENDS, case_sensitive=False),
    default=None,
    help="Storage backend.",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, data_dir: Path | None, backend: str | None, verbose: bool) -> None:
    """MCBackpack — backpack storage administration"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    overrides: dict = {}
    if data_dir is not None:
        overrides["data_dir"] = data_dir
    if backend is not None:
        overrides["backend"] = backend.lower()

    try:
        config = dataclasses.replace(StorageConfig.from_env(), **overrides)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    ctx.obj = config


@cli.group()
def backpack() -> None:
    """Manage backpacks."""


@cli.group()
def password() -> None:
    """Manage backpack passwords."""


# Register subcommands
backpack.add_command(backpack_create)
backpack.add_command(backpack_list)
backpack.add_command(backpack_save)
backpack.add_command(backpack_show)
backpack.add_command(backpack_texture)
password.add_command(password_change)
password.add_command(password_check)
password.add_command(password_delete)
password.add_command(password_set)
