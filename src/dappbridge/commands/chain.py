"""
Chain queries - network, accounts, blocks, transactions and storage.
"""

from __future__ import annotations

from typing import Optional

import click

from .output import (
    describe_quantity,
    echo_json,
    get_facade,
    parse_json_option,
    reporting_errors,
)


@click.command()
@click.pass_context
def network(ctx: click.Context) -> None:
    """Show chain id, latest block number and gas price."""
    with reporting_errors():
        info = get_facade(ctx).get_network_info()

    click.echo("Network Info:")
    click.echo(f"  Chain ID:     {describe_quantity(info.chain_id)}")
    click.echo(f"  Block Number: {describe_quantity(info.block_number)}")
    click.echo(f"  Gas Price:    {describe_quantity(info.gas_price)} wei")


@click.command()
@click.argument("address")
@click.pass_context
def account(ctx: click.Context, address: str) -> None:
    """Show balance, nonce and account type."""
    with reporting_errors():
        info = get_facade(ctx).get_account_info(address)

    click.echo("Account Info:")
    click.echo(f"  Balance: {describe_quantity(info.balance)} wei")
    click.echo(f"  Nonce:   {describe_quantity(info.nonce)}")
    click.echo(f"  Code:    {'Contract' if info.is_contract else 'EOA'}")


@click.command()
@click.argument("address")
@click.option("--block", default="latest", show_default=True, help="Block number or tag")
@click.pass_context
def balance(ctx: click.Context, address: str, block: str) -> None:
    """Show the ETH balance of an address."""
    with reporting_errors():
        value = get_facade(ctx).rpc.get_balance(address, block)
    click.echo(f"Balance: {describe_quantity(value)} wei")


@click.command()
@click.argument("tx_hash")
@click.option("--wait", is_flag=True, help="Poll until the receipt is available")
@click.option("--timeout", default=120.0, show_default=True, help="Receipt wait timeout (s)")
@click.pass_context
def tx(ctx: click.Context, tx_hash: str, wait: bool, timeout: float) -> None:
    """Show a transaction and its receipt."""
    facade = get_facade(ctx)
    with reporting_errors():
        if wait:
            facade.wait_for_receipt(tx_hash, timeout=timeout)
        details = facade.get_transaction_details(tx_hash)

    click.echo("Transaction Details:")
    echo_json(details.to_dict())


@click.command("block")
@click.argument("block", required=False, default="latest")
@click.option("--full", is_flag=True, help="Include full transaction bodies")
@click.pass_context
def block_info(ctx: click.Context, block: str, full: bool) -> None:
    """Show a block by number or tag (default: latest)."""
    with reporting_errors():
        data = get_facade(ctx).get_block_info(block, full_transactions=full)

    if data is None:
        click.secho(f"Block {block} not found.", fg="yellow")
        return
    click.echo(f"Block {block}:")
    echo_json(data)


@click.command()
@click.pass_context
def accounts(ctx: click.Context) -> None:
    """List accounts managed by the node."""
    with reporting_errors():
        addresses = get_facade(ctx).get_accounts()

    click.echo("Available Accounts:")
    for index, address in enumerate(addresses):
        click.echo(f"  {index}: {address}")


@click.command()
@click.argument("address")
@click.pass_context
def code(ctx: click.Context, address: str) -> None:
    """Print the bytecode deployed at an address."""
    with reporting_errors():
        click.echo(get_facade(ctx).get_contract_code(address))


@click.command()
@click.argument("address")
@click.argument("slot")
@click.option("--block", default="latest", show_default=True, help="Block number or tag")
@click.pass_context
def storage(ctx: click.Context, address: str, slot: str, block: str) -> None:
    """Read a raw storage slot."""
    with reporting_errors():
        click.echo(get_facade(ctx).get_storage_value(address, slot, block))


@click.command("estimate-gas")
@click.option("--tx", "tx_json", required=True, help="Transaction object as JSON")
@click.pass_context
def estimate_gas(ctx: click.Context, tx_json: str) -> None:
    """Estimate gas for a prospective transaction."""
    tx_fields = parse_json_option(tx_json, dict, "--tx")
    with reporting_errors():
        gas = get_facade(ctx).estimate_gas(tx_fields)
    click.echo(f"Estimated Gas: {describe_quantity(gas)}")


@click.command("send")
@click.option("--tx", "tx_json", default=None, help="Unsigned transaction object as JSON")
@click.option("--raw", "raw_tx", default=None, help="Signed raw transaction (0x-hex)")
@click.option("--wait", is_flag=True, help="Wait for the receipt")
@click.pass_context
def send(ctx: click.Context, tx_json: Optional[str], raw_tx: Optional[str], wait: bool) -> None:
    """Submit a transaction (node-signed with --tx, pre-signed with --raw)."""
    if (tx_json is None) == (raw_tx is None):
        raise click.UsageError("Provide exactly one of --tx or --raw.")

    facade = get_facade(ctx)
    with reporting_errors():
        if raw_tx is not None:
            tx_hash = facade.send_raw_transaction(raw_tx)
        else:
            tx_hash = facade.send_transaction(parse_json_option(tx_json, dict, "--tx"))
        click.echo(f"TX: {tx_hash}")
        if wait:
            receipt = facade.wait_for_receipt(tx_hash)
            status = receipt.get("status")
            if status == "0x1":
                click.secho("SUCCESS: Transaction confirmed!", fg="green")
            else:
                click.secho(f"FAILED: Transaction status {status}", fg="red")
                ctx.exit(1)
