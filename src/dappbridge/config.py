"""
Configuration for dappbridge.

The only state the interaction layer needs is the node endpoint (plus an
optional HTTP timeout applied to each request).  Values come from the process
environment, optionally seeded from ~/.dappbridge/.env.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Default config directory
DAPPBRIDGE_DIR = Path.home() / ".dappbridge"
DAPPBRIDGE_ENV = DAPPBRIDGE_DIR / ".env"

DEFAULT_RPC_URL = "http://127.0.0.1:8545"
DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class BridgeConfig:
    rpc_url: str = DEFAULT_RPC_URL
    timeout: Optional[float] = DEFAULT_TIMEOUT


def load_env(env_path: Optional[Path] = None) -> bool:
    """
    Load variables from the .env file into the environment.

    Variables already present in the environment win.

    Returns:
        True if a file was found and loaded
    """
    env_path = env_path or DAPPBRIDGE_ENV
    if not env_path.exists():
        return False
    return load_dotenv(env_path, override=False)


def parse_timeout(value: Optional[str]) -> Optional[float]:
    """Parse RPC_TIMEOUT; empty, "0" and "none" disable the timeout."""
    if value is None or value.strip() == "":
        return DEFAULT_TIMEOUT
    if value.strip().lower() in ("0", "none", "off"):
        return None
    timeout = float(value)
    if timeout < 0:
        raise ValueError(f"RPC_TIMEOUT must be non-negative: {value}")
    return timeout


def load_config(env_path: Optional[Path] = None) -> BridgeConfig:
    """
    Build a BridgeConfig from the environment.

    Args:
        env_path: Path to .env file (default: ~/.dappbridge/.env)

    Returns:
        The resolved configuration
    """
    load_env(env_path)
    return BridgeConfig(
        rpc_url=os.environ.get("RPC_URL") or DEFAULT_RPC_URL,
        timeout=parse_timeout(os.environ.get("RPC_TIMEOUT")),
    )
