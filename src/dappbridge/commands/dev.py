"""
Dev - state manipulation for local development nodes (Hardhat / Anvil).

These commands use the hardhat_* and evm_* RPC extensions and fail with an
RPC error against public networks.
"""

from __future__ import annotations

import click

from ..utils import to_quantity
from .output import get_facade, reporting_errors


@click.group()
def dev() -> None:
    """Development node utilities (impersonation, mining, time travel)."""


@dev.command()
@click.argument("address")
@click.pass_context
def impersonate(ctx: click.Context, address: str) -> None:
    """Send transactions as ADDRESS without its key."""
    with reporting_errors():
        get_facade(ctx).impersonate(address)
    click.echo(f"Impersonating {address}")


@dev.command("stop-impersonating")
@click.argument("address")
@click.pass_context
def stop_impersonating(ctx: click.Context, address: str) -> None:
    """Stop impersonating ADDRESS."""
    with reporting_errors():
        get_facade(ctx).stop_impersonating(address)
    click.echo(f"Stopped impersonating {address}")


@dev.command("set-balance")
@click.argument("address")
@click.argument("wei")
@click.pass_context
def set_balance(ctx: click.Context, address: str, wei: str) -> None:
    """Force the balance of ADDRESS (decimal wei or 0x-quantity)."""
    with reporting_errors():
        balance = wei if wei.startswith("0x") else to_quantity(int(wei))
        get_facade(ctx).set_balance(address, balance)
    click.echo(f"Balance of {address} set to {balance}")


@dev.command("set-code")
@click.argument("address")
@click.argument("bytecode")
@click.pass_context
def set_code(ctx: click.Context, address: str, bytecode: str) -> None:
    """Replace the runtime bytecode at ADDRESS."""
    with reporting_errors():
        get_facade(ctx).set_code(address, bytecode)
    click.echo(f"Code set at {address}")


@dev.command("set-storage")
@click.argument("address")
@click.argument("slot")
@click.argument("value")
@click.pass_context
def set_storage(ctx: click.Context, address: str, slot: str, value: str) -> None:
    """Write a 32-byte VALUE into storage SLOT of ADDRESS."""
    with reporting_errors():
        get_facade(ctx).set_storage_at(address, slot, value)
    click.echo(f"Storage {slot} of {address} set")


@dev.command()
@click.argument("blocks", type=click.IntRange(min=1), default=1)
@click.pass_context
def mine(ctx: click.Context, blocks: int) -> None:
    """Mine BLOCKS blocks (default 1)."""
    with reporting_errors():
        get_facade(ctx).mine_blocks(blocks)
    click.echo(f"Mined {blocks} block(s)")


@dev.command("mine-up-to")
@click.argument("block_number", type=click.IntRange(min=0))
@click.pass_context
def mine_up_to(ctx: click.Context, block_number: int) -> None:
    """Mine until the chain head reaches BLOCK_NUMBER."""
    with reporting_errors():
        mined = get_facade(ctx).mine_up_to(block_number)
    click.echo(f"Mined {mined} block(s), head is now {block_number}")


@dev.command("increase-time")
@click.argument("seconds", type=click.IntRange(min=0))
@click.pass_context
def increase_time(ctx: click.Context, seconds: int) -> None:
    """Advance the clock by SECONDS and mine one block."""
    with reporting_errors():
        get_facade(ctx).increase_time(seconds)
    click.echo(f"Time advanced by {seconds}s")


@dev.command("set-next-timestamp")
@click.argument("timestamp", type=click.IntRange(min=0))
@click.pass_context
def set_next_timestamp(ctx: click.Context, timestamp: int) -> None:
    """Fix the timestamp of the next mined block."""
    with reporting_errors():
        get_facade(ctx).set_next_block_timestamp(timestamp)
    click.echo(f"Next block timestamp: {timestamp}")


@dev.command()
@click.pass_context
def snapshot(ctx: click.Context) -> None:
    """Snapshot chain state and print the snapshot id."""
    with reporting_errors():
        snapshot_id = get_facade(ctx).create_snapshot()
    click.echo(f"Snapshot: {snapshot_id}")


@dev.command()
@click.argument("snapshot_id")
@click.pass_context
def revert(ctx: click.Context, snapshot_id: str) -> None:
    """Revert chain state to SNAPSHOT_ID."""
    with reporting_errors():
        reverted = get_facade(ctx).revert_snapshot(snapshot_id)
    if reverted:
        click.secho(f"Reverted to snapshot {snapshot_id}", fg="green")
    else:
        click.secho(f"Snapshot {snapshot_id} was not reverted", fg="yellow")
        ctx.exit(1)
