"""
Contract commands - read calls, calldata encoding/decoding and ERC-20 queries.

Catalogs are given as repeated --sig options, e.g.::

    dappbridge call --contract 0x... --sig "function balanceOf(address) view returns (uint256)" \\
        --function balanceOf --args '["0x..."]'

or as a JSON ABI file with --abi.
"""

from __future__ import annotations

from typing import Any, Optional

import click

from .output import echo_json, get_facade, load_catalog, parse_json_option, reporting_errors

_catalog_options = [
    click.option("--sig", "signatures", multiple=True, help="Function signature (repeatable)"),
    click.option(
        "--abi",
        "abi_path",
        type=click.Path(exists=True, dir_okay=False),
        default=None,
        help="JSON ABI file or compiler artifact",
    ),
    click.option("--function", "func_name", required=True, help="Function name or signature"),
]


def catalog_options(func: Any) -> Any:
    for option in reversed(_catalog_options):
        func = option(func)
    return func


def _echo_values(values: tuple[Any, ...]) -> None:
    if len(values) == 1:
        echo_json(values[0])
    else:
        echo_json(list(values))


@click.command()
@click.option("--contract", required=True, help="Target contract address")
@catalog_options
@click.option("--args", "args_json", default="[]", help="Function args as JSON array")
@click.pass_context
def call(
    ctx: click.Context,
    contract: str,
    signatures: tuple[str, ...],
    abi_path: Optional[str],
    func_name: str,
    args_json: str,
) -> None:
    """Call a read-only contract function and print the decoded result."""
    catalog = load_catalog(signatures, abi_path)
    args = parse_json_option(args_json, list, "--args")
    with reporting_errors():
        values = get_facade(ctx).call_function(contract, catalog, func_name, args)
    _echo_values(values)


@click.command()
@catalog_options
@click.option("--args", "args_json", default="[]", help="Function args as JSON array")
@click.pass_context
def encode(
    ctx: click.Context,
    signatures: tuple[str, ...],
    abi_path: Optional[str],
    func_name: str,
    args_json: str,
) -> None:
    """Print calldata for a function call (no network access)."""
    catalog = load_catalog(signatures, abi_path)
    args = parse_json_option(args_json, list, "--args")
    with reporting_errors():
        click.echo(get_facade(ctx).encode_call(catalog, func_name, args))


@click.command()
@catalog_options
@click.option("--data", required=True, help="0x-hex return data")
@click.pass_context
def decode(
    ctx: click.Context,
    signatures: tuple[str, ...],
    abi_path: Optional[str],
    func_name: str,
    data: str,
) -> None:
    """Decode return data for a function (no network access)."""
    catalog = load_catalog(signatures, abi_path)
    with reporting_errors():
        values = get_facade(ctx).decode_result(catalog, func_name, data)
    _echo_values(values)


@click.command()
@click.argument("token_address")
@click.pass_context
def token(ctx: click.Context, token_address: str) -> None:
    """Show ERC-20 name, symbol, decimals and total supply."""
    with reporting_errors():
        metadata = get_facade(ctx).get_token_metadata(token_address)

    click.echo("Token Metadata:")
    click.echo(f"  Name:         {metadata.name if metadata.name is not None else '(unavailable)'}")
    click.echo(f"  Symbol:       {metadata.symbol if metadata.symbol is not None else '(unavailable)'}")
    click.echo(f"  Decimals:     {metadata.decimals}")
    supply = metadata.total_supply
    click.echo(f"  Total Supply: {supply if supply is not None else '(unavailable)'}")
    for field, message in metadata.errors.items():
        click.secho(f"  ! {field}: {message}", fg="yellow")


@click.command("token-balance")
@click.argument("token_address")
@click.argument("account")
@click.pass_context
def token_balance(ctx: click.Context, token_address: str, account: str) -> None:
    """Show the raw ERC-20 balance of an account."""
    with reporting_errors():
        raw = get_facade(ctx).get_token_balance(token_address, account)
    click.echo(f"Balance: {raw}")
