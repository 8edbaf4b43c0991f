"""Chain collaborators: engine reads, route submission, nonce bookkeeping.

Everything here touches the network through web3 and is deliberately thin:
reads return raw tuples for `decode`, submission hands a compiled
RoutePayload to a signer and broadcasts it. web3 errors propagate unchanged;
there is no retry or backoff.

Usage:
    cfg = load_config()
    w3 = cfg.connect()
    reader = EngineReader(w3, cfg.engine_address)
    submitter = Web3Submitter(w3, Account.from_key(key), cfg.router_address)

    payload, tx_hash = route(w3, submitter, request, nonces=tracker)
    tracker.settle(submitter.address, request.nonce, wait_for_receipt(w3, tx_hash))
    pair = get_pair(reader, key, strikes=[0])
"""
from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Iterable, Optional, Protocol, Set, Tuple

from web3 import Web3

from .abi import ENGINE_ABI
from .core import InvalidCommandInput, NonceReuse, Pair, PairKey, Strike
from .decode import NOT_FOUND, decode_pair, decode_position_balance, decode_strike
from .positions import Position
from .router import RoutePayload, RouteRequest, build_route

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Collaborator interfaces
# ---------------------------------------------------------------------------

class PairStateReader(Protocol):
    def read_pair_state(self, key: PairKey) -> Any: ...

    def read_strike_state(self, key: PairKey, strike: int) -> Any: ...


class Submitter(Protocol):
    address: str

    def submit(self, payload: RoutePayload, signer_context: Optional[Dict[str, Any]] = None) -> Any: ...


# ---------------------------------------------------------------------------
# Engine reads
# ---------------------------------------------------------------------------

class EngineReader:
    """Read-only view of the engine contract; returns raw tuples."""

    def __init__(self, w3: Web3, engine_address: str):
        self.w3 = w3
        self.engine_address = Web3.to_checksum_address(engine_address)
        self.contract = w3.eth.contract(address=self.engine_address, abi=ENGINE_ABI)

    def read_pair_state(self, key: PairKey) -> Any:
        log.debug("getPair %s/%s sf=%d", key.token0.address, key.token1.address, key.scaling_factor)
        return self.contract.functions.getPair(
            key.token0.address, key.token1.address, key.scaling_factor
        ).call()

    def read_strike_state(self, key: PairKey, strike: int) -> Any:
        log.debug("getStrike %s/%s sf=%d strike=%d",
                  key.token0.address, key.token1.address, key.scaling_factor, strike)
        raw = self.contract.functions.getStrike(
            key.token0.address, key.token1.address, key.scaling_factor, strike
        ).call()
        # Existence comes from the engine's flag, never from zero liquidity.
        if len(raw) > 3 and raw[3] is False:
            return NOT_FOUND
        return raw

    def read_position_balance(self, owner: str, position: Position) -> int:
        raw = self.contract.functions.balanceOf(
            Web3.to_checksum_address(owner), position.id
        ).call()
        return decode_position_balance(raw)


def get_pair(reader: PairStateReader, key: PairKey, strikes: Iterable[int] = ()) -> Optional[Pair]:
    """Read and decode a pair, attaching any of `strikes` that exist."""
    pair = decode_pair(reader.read_pair_state(key), key)
    if pair is None:
        return None
    found = {}
    for s in strikes:
        strike = get_strike(reader, key, s)
        if strike is not None:
            found[s] = strike
    return pair.with_strikes(found) if found else pair


def get_strike(reader: PairStateReader, key: PairKey, strike: int) -> Optional[Strike]:
    return decode_strike(reader.read_strike_state(key, strike), key, strike)


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------

class Web3Submitter:
    """Sign and broadcast route payloads with a local eth_account signer."""

    def __init__(self, w3: Web3, account, router_address: str, *,
                 gas_limit: int = 1_000_000, chain_id: Optional[int] = None):
        self.w3 = w3
        self.account = account
        self.address = account.address
        self.router_address = Web3.to_checksum_address(router_address)
        self.gas_limit = gas_limit
        self.chain_id = chain_id

    def build_transaction(self, payload: RoutePayload,
                          signer_context: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        tx: Dict[str, Any] = {
            "to": self.router_address,
            "from": self.address,
            "data": payload.calldata,
            "value": 0,
            "gas": self.gas_limit,
            "nonce": self.w3.eth.get_transaction_count(self.address),
            "chainId": self.chain_id if self.chain_id is not None else self.w3.eth.chain_id,
        }
        overrides = dict(signer_context or {})
        if "maxFeePerGas" not in overrides and "gasPrice" not in overrides:
            tx["gasPrice"] = self.w3.eth.gas_price
        tx.update(overrides)
        return tx

    def submit(self, payload: RoutePayload, signer_context: Optional[Dict[str, Any]] = None) -> Any:
        tx = self.build_transaction(payload, signer_context)
        signed = self.account.sign_transaction(tx)
        tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
        log.info("route submitted: tx=%s route_nonce=%d commands=%s",
                 Web3.to_hex(tx_hash), payload.nonce, list(payload.commands))
        return tx_hash


def latest_timestamp(w3: Web3) -> int:
    return int(w3.eth.get_block("latest")["timestamp"])


def wait_for_receipt(w3: Web3, tx_hash: Any, timeout: int = 120) -> Any:
    receipt = w3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)
    log.info("receipt: tx=%s status=%s block=%s",
             Web3.to_hex(tx_hash), receipt["status"], receipt["blockNumber"])
    return receipt


# ---------------------------------------------------------------------------
# Route nonces
# ---------------------------------------------------------------------------

class NonceTracker:
    """Per-signer bookkeeping of route nonces.

    A nonce may be reserved once; it stays in flight until `confirm` (the
    route landed) or `release` (submission failed before broadcast).
    Reservations are strictly increasing per signer: a nonce at or below
    the highest confirmed or in-flight nonce is rejected with NonceReuse.
    A released nonce may be reserved again once nothing above it is in
    flight.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._confirmed: Dict[str, int] = {}
        self._in_flight: Dict[str, Set[int]] = {}

    @staticmethod
    def _key(signer: str) -> str:
        return Web3.to_checksum_address(signer)

    def reserve(self, signer: str, nonce: int) -> int:
        """Reserve `nonce`; it must be above every confirmed and in-flight nonce."""
        if isinstance(nonce, bool) or not isinstance(nonce, int) or nonce < 0:
            raise InvalidCommandInput("nonce", nonce, "must be a non-negative int")
        k = self._key(signer)
        with self._lock:
            flying = self._in_flight.setdefault(k, set())
            if nonce <= max([self._confirmed.get(k, -1), *flying]):
                raise NonceReuse(k, nonce)
            flying.add(nonce)
        return nonce

    def next_nonce(self, signer: str) -> int:
        """Reserve and return the smallest nonce above everything seen."""
        k = self._key(signer)
        with self._lock:
            flying = self._in_flight.setdefault(k, set())
            nonce = max([self._confirmed.get(k, -1), *flying]) + 1
            flying.add(nonce)
        return nonce

    def confirm(self, signer: str, nonce: int) -> None:
        k = self._key(signer)
        with self._lock:
            self._in_flight.get(k, set()).discard(nonce)
            self._confirmed[k] = max(nonce, self._confirmed.get(k, -1))

    def release(self, signer: str, nonce: int) -> None:
        k = self._key(signer)
        with self._lock:
            self._in_flight.get(k, set()).discard(nonce)

    def in_flight(self, signer: str) -> Tuple[int, ...]:
        k = self._key(signer)
        with self._lock:
            return tuple(sorted(self._in_flight.get(k, set())))

    def settle(self, signer: str, nonce: int, receipt: Any) -> bool:
        """Confirm `nonce` if the receipt succeeded, release it otherwise."""
        ok = receipt["status"] == 1
        if ok:
            self.confirm(signer, nonce)
        else:
            log.warning("route reverted: signer=%s route_nonce=%d", signer, nonce)
            self.release(signer, nonce)
        return ok


def route(w3: Web3, submitter: Submitter, request: RouteRequest, *,
          signer_context: Optional[Dict[str, Any]] = None,
          nonces: Optional[NonceTracker] = None) -> Tuple[RoutePayload, Any]:
    """Build `request` against the latest block timestamp and submit it.

    With a NonceTracker the request nonce is reserved before broadcast and
    released again if submission raises.
    """
    payload = build_route(request, now=latest_timestamp(w3))
    if nonces is not None:
        nonces.reserve(submitter.address, request.nonce)
    try:
        tx_hash = submitter.submit(payload, signer_context)
    except Exception:
        if nonces is not None:
            nonces.release(submitter.address, request.nonce)
        raise
    return payload, tx_hash


# ---------------------------------------------------------------------------
# Dev chain helpers
# ---------------------------------------------------------------------------

class DevChain:
    """Snapshot/restore on a development node (anvil / hardhat)."""

    def __init__(self, w3: Web3):
        self.w3 = w3

    def _call(self, method: str, params: list) -> Any:
        resp = self.w3.provider.make_request(method, params)
        if "error" in resp:
            raise RuntimeError(f"{method} failed: {resp['error']}")
        return resp["result"]

    def snapshot(self) -> str:
        return self._call("evm_snapshot", [])

    def revert(self, snapshot_id: str) -> bool:
        return bool(self._call("evm_revert", [snapshot_id]))


__all__ = [
    "PairStateReader",
    "Submitter",
    "EngineReader",
    "get_pair",
    "get_strike",
    "Web3Submitter",
    "latest_timestamp",
    "wait_for_receipt",
    "NonceTracker",
    "route",
    "DevChain",
]
