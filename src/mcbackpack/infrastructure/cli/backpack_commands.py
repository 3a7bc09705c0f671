"""CLI commands for backpack records."""

from __future__ import annotations

import click

from mcbackpack.application.dto import BackpackSummaryDTO
from mcbackpack.application.backpack_store import BackpackStore
from mcbackpack.domain.exceptions import DomainException, EntityNotFoundError
from mcbackpack.domain.model.backpack import BackpackData
from mcbackpack.infrastructure.cli.runtime import run_with_store
from mcbackpack.infrastructure.config import StorageConfig


def _display_backpack(dto: BackpackSummaryDTO) -> None:
    """Shared formatting for displaying a backpack."""
    click.echo(f"Backpack {dto.uuid}")
    click.echo(f"Size:     {dto.size}")
    click.echo(f"Locked:   {'yes' if dto.locked else 'no'}")
    click.echo(f"Texture:  {dto.texture}")
    if dto.content_length is None:
        click.echo("Content:  (never saved)")
    else:
        click.echo(f"Content:  {dto.content_length} chars")


@click.command("create")
@click.option("--uuid", required=True, help="Backpack identifier.")
@click.option("--texture", required=True, help="Base64 texture string.")
@click.option("--size", required=True, type=int, help="Number of slots.")
@click.pass_obj
def backpack_create(config: StorageConfig, uuid: str, texture: str, size: int) -> None:
    """Create a new backpack."""
    try:
        run_with_store(config, lambda store: store.create(uuid, texture, size))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Backpack {uuid} created ({size} slots)")


@click.command("show")
@click.option("--uuid", required=True, help="Backpack identifier.")
@click.pass_obj
def backpack_show(config: StorageConfig, uuid: str) -> None:
    """Show details of a backpack."""
    try:
        backpack = run_with_store(config, lambda store: store.open(uuid))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_backpack(BackpackSummaryDTO.from_domain(backpack))


async def _open_all(store: BackpackStore) -> list[BackpackData]:
    """Open every listed backpack through the store, skipping ones that vanish."""
    backpacks: list[BackpackData] = []
    for uuid in await store.list_ids():
        try:
            backpacks.append(await store.open(uuid))
        except EntityNotFoundError:
            continue
    return backpacks


@click.command("list")
@click.pass_obj
def backpack_list(config: StorageConfig) -> None:
    """List all stored backpacks."""
    try:
        backpacks = run_with_store(config, _open_all)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    summaries = [BackpackSummaryDTO.from_domain(b) for b in backpacks]
    if not summaries:
        click.echo("No backpacks found.")
        return

    click.echo(f"{'UUID':<38} {'Size':>5} {'Locked':>7} {'Content':>10}")
    click.echo("-" * 63)
    for s in summaries:
        content = "-" if s.content_length is None else str(s.content_length)
        locked = "yes" if s.locked else "no"
        click.echo(f"{s.uuid:<38} {s.size:>5} {locked:>7} {content:>10}")


@click.command("save")
@click.option("--uuid", required=True, help="Backpack identifier.")
@click.option("--content", required=True, help="Serialized (Base64) inventory content.")
@click.pass_obj
def backpack_save(config: StorageConfig, uuid: str, content: str) -> None:
    """Replace the stored contents of a backpack."""
    try:
        run_with_store(config, lambda store: store.save(uuid, content))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Backpack {uuid} saved.")


@click.command("texture")
@click.option("--uuid", required=True, help="Backpack identifier.")
@click.option("--texture", required=True, help="New Base64 texture string.")
@click.pass_obj
def backpack_texture(config: StorageConfig, uuid: str, texture: str) -> None:
    """Change the texture of a backpack."""
    try:
        run_with_store(config, lambda store: store.set_texture(uuid, texture))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Backpack {uuid} texture updated.")
