"""ABI fragments and wire layouts for the engine and router contracts.

Only the functions this client touches are described. Command inputs are
ABI-encoded tuples whose layouts are listed in COMMAND_INPUT_TYPES; the
route call wraps them as

    route((address to, uint8[] commands, bytes[] inputs, uint256 nonce, uint256 deadline))
"""
from __future__ import annotations

from typing import Any, Dict, List, Tuple

from eth_abi import decode, encode
from web3 import Web3

from .commands import CommandType

ROUTE_PARAMS_TYPE = "(address,uint8[],bytes[],uint256,uint256)"
ROUTE_SIGNATURE = f"route({ROUTE_PARAMS_TYPE})"
ROUTE_SELECTOR: bytes = bytes(Web3.keccak(text=ROUTE_SIGNATURE)[:4])

APPROVE_SIGNATURE = "approve(address,bytes32,bool)"
APPROVE_SELECTOR: bytes = bytes(Web3.keccak(text=APPROVE_SIGNATURE)[:4])

_PAIR_HEAD = ["address", "address", "uint8"]

#: Per-command input tuple layouts (recipient and deadline last where taken).
COMMAND_INPUT_TYPES: Dict[CommandType, List[str]] = {
    # token0, token1, scalingFactor, strikeInitial
    CommandType.CREATE_PAIR: _PAIR_HEAD + ["int24"],
    # ..., strike, spread, amountDesired, amountMax, to, deadline
    CommandType.ADD_LIQUIDITY: _PAIR_HEAD + ["int24", "uint8", "uint256", "uint256", "address", "uint256"],
    # ..., strike, spread, amountDesired, amountMin, to, deadline
    CommandType.REMOVE_LIQUIDITY: _PAIR_HEAD + ["int24", "uint8", "uint256", "uint256", "address", "uint256"],
    # ..., strike, collateralSelector, collateralDesired, collateralMax, debtDesired, debtMin, to, deadline
    CommandType.BORROW_LIQUIDITY: _PAIR_HEAD
    + ["int24", "uint8", "uint256", "uint256", "uint256", "uint256", "address", "uint256"],
    # ..., strike, collateralSelector, debtDesired, debtMax, collateralDesired, collateralMin, to, deadline
    CommandType.REPAY_LIQUIDITY: _PAIR_HEAD
    + ["int24", "uint8", "uint256", "uint256", "uint256", "uint256", "address", "uint256"],
    # ..., zeroForOne, amountInDesired, amountInMax, amountOutDesired, amountOutMin, to, deadline
    CommandType.SWAP: _PAIR_HEAD + ["bool", "uint256", "uint256", "uint256", "uint256", "address", "uint256"],
    # ..., strike
    CommandType.ACCRUE: _PAIR_HEAD + ["int24"],
}


def encode_command_input(command_type: CommandType, values: Tuple[Any, ...]) -> bytes:
    return encode(COMMAND_INPUT_TYPES[command_type], list(values))


def decode_command_input(command_type: int, data: bytes) -> Tuple[Any, ...]:
    """Decode one command input; address fields come back checksummed."""
    types = COMMAND_INPUT_TYPES[CommandType(command_type)]
    values = decode(types, data)
    return tuple(
        Web3.to_checksum_address(v) if t == "address" else v
        for t, v in zip(types, values)
    )


def encode_route_call(to: str, commands: List[int], inputs: List[bytes], nonce: int, deadline: int) -> bytes:
    return ROUTE_SELECTOR + encode([ROUTE_PARAMS_TYPE], [(to, commands, inputs, nonce, deadline)])


def decode_route_call(calldata: bytes) -> Dict[str, Any]:
    """Split route calldata back into its parameters (inspection/testing)."""
    if bytes(calldata[:4]) != ROUTE_SELECTOR:
        raise ValueError("calldata is not a route() call")
    (params,) = decode([ROUTE_PARAMS_TYPE], bytes(calldata[4:]))
    to, commands, inputs, nonce, deadline = params
    return {
        "to": Web3.to_checksum_address(to),
        "commands": tuple(commands),
        "inputs": tuple(bytes(i) for i in inputs),
        "nonce": nonce,
        "deadline": deadline,
    }


def _tier_components() -> List[Dict[str, str]]:
    return [
        {"name": "swap", "type": "uint256"},
        {"name": "borrowed", "type": "uint256"},
    ]


ENGINE_ABI: List[Dict[str, Any]] = [
    {
        "name": "getPair",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "token0", "type": "address"},
            {"name": "token1", "type": "address"},
            {"name": "scalingFactor", "type": "uint8"},
        ],
        "outputs": [
            {"name": "composition", "type": "uint128[5]"},
            {"name": "strikeCurrent", "type": "int24[5]"},
            {"name": "initialized", "type": "bool"},
        ],
    },
    {
        "name": "getStrike",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "token0", "type": "address"},
            {"name": "token1", "type": "address"},
            {"name": "scalingFactor", "type": "uint8"},
            {"name": "strike", "type": "int24"},
        ],
        "outputs": [
            {"name": "liquidity", "type": "tuple[5]", "components": _tier_components()},
            {"name": "next0To1", "type": "int24"},
            {"name": "next1To0", "type": "int24"},
            {"name": "initialized", "type": "bool"},
        ],
    },
    {
        "name": "balanceOf",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "owner", "type": "address"},
            {"name": "id", "type": "bytes32"},
        ],
        "outputs": [{"name": "balance", "type": "uint256"}],
    },
    {
        "name": "approve",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "spender", "type": "address"},
            {"name": "id", "type": "bytes32"},
            {"name": "approved", "type": "bool"},
        ],
        "outputs": [],
    },
]


__all__ = [
    "ROUTE_SIGNATURE",
    "ROUTE_SELECTOR",
    "APPROVE_SELECTOR",
    "COMMAND_INPUT_TYPES",
    "encode_command_input",
    "decode_command_input",
    "encode_route_call",
    "decode_route_call",
    "ENGINE_ABI",
]
