"""Client configuration.

Values come from keyword arguments or from POWDER_* environment variables:

  POWDER_RPC_URL          (required)
  POWDER_ENGINE_ADDRESS   (required)
  POWDER_ROUTER_ADDRESS   (required)
  POWDER_CHAIN_ID         default 1
  POWDER_SLIPPAGE         decimal string, default "0.01"
  POWDER_DEADLINE_WINDOW  seconds, default 300
  POWDER_GAS_LIMIT        default 1000000
  POWDER_RECEIPT_TIMEOUT  seconds, default 120

Private keys are never part of the configuration object.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from web3 import Web3

from .core import Fraction, create_fraction, fraction_from_string


@dataclass(frozen=True)
class ClientConfig:
    rpc_url: str
    engine_address: str
    router_address: str
    chain_id: int = 1
    default_slippage: Fraction = field(default_factory=lambda: create_fraction(1, 100))
    deadline_window: int = 300
    gas_limit: int = 1_000_000
    receipt_timeout: int = 120

    def __post_init__(self):
        object.__setattr__(self, "engine_address", Web3.to_checksum_address(self.engine_address))
        object.__setattr__(self, "router_address", Web3.to_checksum_address(self.router_address))
        if self.deadline_window <= 0:
            raise ValueError("deadline_window must be > 0")

    def connect(self) -> Web3:
        """HTTP Web3 instance for `rpc_url` (no connectivity check)."""
        return Web3(Web3.HTTPProvider(self.rpc_url))

    def deadline_from(self, now: int) -> int:
        return now + self.deadline_window


def load_config(env: Optional[Mapping[str, str]] = None) -> ClientConfig:
    """Build a ClientConfig from POWDER_* variables (defaults to os.environ)."""
    env = os.environ if env is None else env

    def required(name: str) -> str:
        if not env.get(name):
            raise KeyError(f"missing required environment variable {name}")
        return env[name]

    return ClientConfig(
        rpc_url=required("POWDER_RPC_URL"),
        engine_address=required("POWDER_ENGINE_ADDRESS"),
        router_address=required("POWDER_ROUTER_ADDRESS"),
        chain_id=int(env.get("POWDER_CHAIN_ID", "1")),
        default_slippage=fraction_from_string(env.get("POWDER_SLIPPAGE", "0.01")),
        deadline_window=int(env.get("POWDER_DEADLINE_WINDOW", "300")),
        gas_limit=int(env.get("POWDER_GAS_LIMIT", "1000000")),
        receipt_timeout=int(env.get("POWDER_RECEIPT_TIMEOUT", "120")),
    )


__all__ = ["ClientConfig", "load_config"]
