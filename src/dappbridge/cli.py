"""
dappbridge CLI

Command-line interface over the chain facade: JSON-RPC queries, contract
calls through a signature catalog, and development node utilities.

Commands:
  network        - Chain id, block number, gas price
  account        - Balance, nonce and account type
  balance        - ETH balance
  tx             - Transaction and receipt
  block          - Block by number or tag
  accounts       - Node-managed accounts
  code / storage - Raw contract code and storage slots
  estimate-gas   - Gas estimate for a transaction
  send           - Submit a transaction
  call           - Read-only contract call
  encode/decode  - Calldata / return data without network access
  token          - ERC-20 metadata
  token-balance  - ERC-20 balance
  dev            - Development node utilities
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import click

from .config import DEFAULT_RPC_URL, BridgeConfig, load_env, parse_timeout
from .facade import ChainFacade
from .log import configure_logging


# ============ Constants ============

VERSION = "0.1.0"


# ============ Banner ============


def _print_banner() -> None:
    border = click.style("  ◆ ═══════════════════════════════════════ ◆", fg="cyan")
    click.echo()
    click.echo(border)
    click.echo()
    click.echo(
        click.style("        D A P P B R I D G E", fg="bright_white", bold=True)
        + click.style(f"      v{VERSION}", dim=True)
    )
    click.secho("        ─── JSON-RPC & Contract Bridge ───", fg="cyan")
    click.echo()
    click.echo(border)
    click.echo()


# ============ Main CLI Group ============


@click.group(invoke_without_command=True)
@click.version_option(version=VERSION, prog_name="dappbridge")
@click.option(
    "--rpc-url",
    envvar="RPC_URL",
    default=DEFAULT_RPC_URL,
    show_default=True,
    help="JSON-RPC endpoint",
)
@click.option(
    "--timeout",
    envvar="RPC_TIMEOUT",
    default=None,
    help="HTTP timeout in seconds per request (0 disables)",
)
@click.option("-v", "--verbose", count=True, help="Log requests (-v info, -vv debug)")
@click.pass_context
def cli(ctx: click.Context, rpc_url: str, timeout: Optional[str], verbose: int) -> None:
    """dappbridge - Ethereum JSON-RPC and contract interaction."""
    if verbose:
        configure_logging(logging.DEBUG if verbose > 1 else logging.INFO)

    if ctx.obj is None:
        try:
            parsed_timeout = parse_timeout(timeout)
        except ValueError as exc:
            raise click.BadParameter(str(exc), param_hint="--timeout") from exc
        ctx.obj = ChainFacade.from_config(BridgeConfig(rpc_url=rpc_url, timeout=parsed_timeout))

    if ctx.invoked_subcommand is None:
        _print_banner()
        click.echo(f"Connected to: {rpc_url}")
        click.echo()
        click.echo(ctx.get_help())


# ============ Commands ============

from .commands.chain import (  # noqa: E402
    account,
    accounts,
    balance,
    block_info,
    code,
    estimate_gas,
    network,
    send,
    storage,
    tx,
)
from .commands.contract import call, decode, encode, token, token_balance  # noqa: E402
from .commands.dev import dev  # noqa: E402

for _command in (
    network,
    account,
    balance,
    tx,
    block_info,
    accounts,
    code,
    storage,
    estimate_gas,
    send,
    call,
    encode,
    decode,
    token,
    token_balance,
    dev,
):
    cli.add_command(_command)


# ============ Entry Points ============


def main() -> None:
    """dappbridge CLI entry point."""
    # Ensure UTF-8 output on Windows (for Unicode box-drawing / symbols)
    if sys.platform == "win32":
        try:
            sys.stdout.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
            sys.stderr.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
        except (AttributeError, OSError):
            pass
    load_env()
    cli()


if __name__ == "__main__":
    main()
