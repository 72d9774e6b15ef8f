"""Shared helpers for CLI commands: facade lookup, JSON output, error exits."""

from __future__ import annotations

import json
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Optional

import click

from ..contract.catalog import Catalog, as_catalog
from ..errors import BridgeError
from ..facade import ChainFacade
from ..utils import from_quantity, is_quantity
from ..wire.values import to_json_value


def get_facade(ctx: click.Context) -> ChainFacade:
    return ctx.find_object(ChainFacade)


@contextmanager
def reporting_errors() -> Iterator[None]:
    """Turn library failures into a red message and the error's exit code."""
    try:
        yield
    except BridgeError as exc:
        click.secho(f"ERROR: {exc}", fg="red", err=True)
        sys.exit(exc.exit_code)
    except (ValueError, TimeoutError) as exc:
        click.secho(f"ERROR: {exc}", fg="red", err=True)
        sys.exit(1)


def echo_json(value: Any) -> None:
    click.echo(json.dumps(to_json_value(value), indent=2))


def describe_quantity(value: Optional[str]) -> str:
    """Render a hex quantity with its decimal value, e.g. ``0x7a69 (31337)``."""
    if is_quantity(value):
        return f"{value} ({from_quantity(value)})"
    return str(value)


def parse_json_option(raw: str, expected: type, label: str) -> Any:
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise click.BadParameter(f"invalid JSON: {exc}", param_hint=label) from exc
    if not isinstance(value, expected):
        raise click.BadParameter(
            f"must be a JSON {expected.__name__}", param_hint=label
        )
    return value


def load_catalog(signatures: tuple[str, ...], abi_path: Optional[str]) -> Catalog:
    """
    Build a catalog from --sig options and/or an --abi JSON file.

    The ABI file may be a plain ABI array or a compiler artifact with an
    "abi" key (Foundry / Hardhat output).
    """
    items: list[Any] = list(signatures)
    if abi_path:
        try:
            with Path(abi_path).open("r", encoding="utf-8") as f:
                artifact = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise click.BadParameter(f"invalid JSON in {abi_path}: {exc}", param_hint="--abi") from exc
        if isinstance(artifact, dict):
            if "abi" not in artifact:
                raise click.BadParameter(
                    f"{abi_path} has no \"abi\" key", param_hint="--abi"
                )
            abi = artifact["abi"]
        else:
            abi = artifact
        if not isinstance(abi, list):
            raise click.BadParameter("ABI must be a JSON array", param_hint="--abi")
        items.extend(abi)
    if not items:
        raise click.UsageError("Provide at least one --sig or an --abi file.")
    with reporting_errors():
        return as_catalog(items)
