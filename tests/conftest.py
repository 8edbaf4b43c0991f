from __future__ import annotations
import copy
from typing import Any, Dict, List, Tuple

import pytest

# Import project primitives
from powder_router.abi import decode_command_input, decode_route_call
from powder_router.commands import CommandType
from powder_router.core import NUM_SPREADS, PairKey, Token
from powder_router.decode import NOT_FOUND


ALICE = "0x" + "a1" * 20
BOB = "0x" + "b0" * 20
ENGINE = "0x" + "e0" * 20
ROUTER = "0x" + "d0" * 20

GENESIS_TS = 1_700_000_000


# -----------------------------
# Test helpers (in-memory engine)
# -----------------------------


class EngineRevert(Exception):
    """Raised by FakeEngine where the contract would revert."""


class FakeEngine:
    """In-memory stand-in for the engine + router contracts.

    Executes real route calldata produced by `build_route` and answers the
    same raw read tuples the engine ABI returns. Only the bookkeeping needed
    by read tests is modelled:

    - CreatePair initialises a pair with zero composition at the given strike.
    - AddLiquidity / RemoveLiquidity move `amountDesired` in/out of swap liquidity.
    - BorrowLiquidity moves `debtDesired` from swap to borrowed, lowest spread first.
    - RepayLiquidity moves it back.

    State resets go through `snapshot()` / `revert(id)` only.
    """

    def __init__(self) -> None:
        self.timestamp = GENESIS_TS
        self.pairs: Dict[Tuple[str, str, int], Dict[str, Any]] = {}
        self.strikes: Dict[Tuple[str, str, int, int], List[List[int]]] = {}
        self.executed: List[Tuple[int, Tuple[Any, ...]]] = []
        self._snapshots: Dict[str, Tuple[Any, ...]] = {}

    # ---- chain-like helpers ----

    def block_timestamp(self) -> int:
        return self.timestamp

    def mine(self, seconds: int = 12) -> None:
        self.timestamp += seconds

    def snapshot(self) -> str:
        sid = hex(len(self._snapshots) + 1)
        self._snapshots[sid] = copy.deepcopy((self.timestamp, self.pairs, self.strikes, self.executed))
        return sid

    def revert(self, sid: str) -> bool:
        state = self._snapshots.get(sid)
        if state is None:
            return False
        self.timestamp, self.pairs, self.strikes, self.executed = copy.deepcopy(state)
        return True

    # ---- reads (raw tuples) ----

    @staticmethod
    def _pk(key: PairKey) -> Tuple[str, str, int]:
        return key.token0.address.lower(), key.token1.address.lower(), key.scaling_factor

    def read_pair_state(self, key: PairKey):
        p = self.pairs.get(self._pk(key))
        if p is None:
            return ([0] * NUM_SPREADS, [0] * NUM_SPREADS, False)
        return (list(p["composition"]), list(p["strikeCurrent"]), True)

    def read_strike_state(self, key: PairKey, strike: int):
        liq = self.strikes.get(self._pk(key) + (strike,))
        if liq is None:
            return NOT_FOUND
        return ([tuple(t) for t in liq], 0, 0, True)

    # ---- writes ----

    def execute(self, calldata: bytes) -> None:
        params = decode_route_call(calldata)
        if params["deadline"] <= self.timestamp:
            raise EngineRevert("deadline")
        snap = self.snapshot()
        try:
            for cmd, data in zip(params["commands"], params["inputs"]):
                values = decode_command_input(cmd, data)
                self._apply(CommandType(cmd), values)
                self.executed.append((cmd, values))
        except EngineRevert:
            self.revert(snap)
            raise
        self.mine()

    def _strike(self, pk: Tuple[str, str, int], strike: int) -> List[List[int]]:
        if pk not in self.pairs:
            raise EngineRevert("pair not initialized")
        return self.strikes.setdefault(pk + (strike,), [[0, 0] for _ in range(NUM_SPREADS)])

    def _apply(self, cmd: CommandType, v: Tuple[Any, ...]) -> None:
        pk = (v[0].lower(), v[1].lower(), v[2])
        if cmd is CommandType.CREATE_PAIR:
            if pk in self.pairs:
                raise EngineRevert("pair exists")
            self.pairs[pk] = {"composition": [0] * NUM_SPREADS, "strikeCurrent": [v[3]] * NUM_SPREADS}
        elif cmd is CommandType.ADD_LIQUIDITY:
            strike, spread, desired = v[3], v[4], v[5]
            self._strike(pk, strike)[spread - 1][0] += desired
        elif cmd is CommandType.REMOVE_LIQUIDITY:
            strike, spread, desired = v[3], v[4], v[5]
            tier = self._strike(pk, strike)[spread - 1]
            if tier[0] < desired:
                raise EngineRevert("insufficient liquidity")
            tier[0] -= desired
        elif cmd is CommandType.BORROW_LIQUIDITY:
            strike, debt = v[3], v[7]
            for tier in self._strike(pk, strike):
                take = min(debt, tier[0])
                tier[0] -= take
                tier[1] += take
                debt -= take
            if debt:
                raise EngineRevert("insufficient liquidity")
        elif cmd is CommandType.REPAY_LIQUIDITY:
            strike, debt = v[3], v[5]
            for tier in self._strike(pk, strike):
                give = min(debt, tier[1])
                tier[1] -= give
                tier[0] += give
                debt -= give
            if debt:
                raise EngineRevert("repay exceeds debt")
        elif pk not in self.pairs:
            raise EngineRevert("pair not initialized")


# -----------------------------
# Pytest fixtures
# -----------------------------

@pytest.fixture(scope="session")
def tokens() -> Tuple[Token, Token]:
    """Two 18-decimal tokens, already in canonical order."""
    token_a = Token("0x" + "22" * 20, 18, "TEST", "Test ERC20")
    token_b = Token("0x" + "11" * 20, 18, "TEST", "Test ERC20")
    pair = PairKey.from_tokens(token_a, token_b, 0)
    return pair.token0, pair.token1


@pytest.fixture(scope="session")
def pair_key(tokens) -> PairKey:
    return PairKey(tokens[0], tokens[1], 0)


@pytest.fixture()
def fake_engine() -> FakeEngine:
    return FakeEngine()
