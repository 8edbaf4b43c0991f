"""Demo: compile engine routes and inspect their slippage bounds and calldata.

Scenarios covered:
R1) CreatePair + AddLiquidity on a fresh pair (order matters)
R2) BorrowLiquidity with token0 collateral (collateral max, debt min)
R3) RepayLiquidity + RemoveLiquidity (unwind)
R4) Swap token1 -> token0
R5) Expired deadline (rejected before encoding)

With --submit, the selected routes are sent to the node in POWDER_RPC_URL,
signed with POWDER_PRIVATE_KEY, and the pair is read back afterwards.
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from typing import Callable, List, Optional

from powder_router import (
    AddLiquidity,
    BorrowLiquidity,
    CreatePair,
    ExpiredDeadline,
    PairKey,
    RemoveLiquidity,
    RepayLiquidity,
    RouteRequest,
    Swap,
    Token,
    build_route,
    create_amount_from_string,
    fraction_from_string,
)
from powder_router.core.fmt import fmt_value, fraction_to_decimal

E18 = 10 ** 18
RECIPIENT = "0x" + "a1" * 20

TOKEN_A = Token("0x" + "11" * 20, 18, "TKA")
TOKEN_B = Token("0x" + "22" * 20, 18, "TKB")
PAIR = PairKey.from_tokens(TOKEN_A, TOKEN_B, 0)


# ---------- pretty printers ----------

def print_payload(title: str, payload, *, show_calldata: bool = True) -> None:
    print(f"\n=== {title} ===")
    print(f"- to={payload.to}  nonce={payload.nonce}  deadline={payload.deadline}")
    for b in payload.bounds:
        print(f"  #{b.index} {b.command_type.name}")
        for a in b.amounts:
            kind = "max" if a.direction.value == "supply" else "min"
            print(f"     {a.field}: desired={fmt_value(a.desired)}  {kind}={fmt_value(a.bound)}")
    if show_calldata:
        print(f"- calldata ({len(payload.calldata)} bytes): 0x{payload.calldata.hex()}")


# ---------- scenario runner ----------

class Scenario:
    def __init__(self, sid: str, fn: Callable[[], Optional[RouteRequest]]):
        self.sid = sid
        self.fn = fn


scenarios: List[Scenario] = []


def add(sid: str, fn: Callable[[], Optional[RouteRequest]]) -> None:
    scenarios.append(Scenario(sid, fn))


def compile_and_print(title: str, request: RouteRequest, now: int, *, show_calldata: bool) -> Optional[RouteRequest]:
    print("\n" + "=" * 80)
    print(f"Scenario: {title}")
    print(f"- slippage={fraction_to_decimal(request.slippage)}  now={now}")
    try:
        payload = build_route(request, now=now)
    except ExpiredDeadline as e:
        print(f"Route rejected: {e}")
        return None
    print_payload("Route Payload", payload, show_calldata=show_calldata)
    return request


# ---------- run scenarios ----------
if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Powder engine route demo")
    parser.add_argument("--only", type=str, default=None, help="Comma-separated scenario ids to run (e.g., R1,R2)")
    parser.add_argument("--skip", type=str, default=None, help="Comma-separated scenario ids to skip")
    parser.add_argument("--slippage", type=str, default="0.02", help="Slippage tolerance as a decimal string")
    parser.add_argument("--no-calldata", action="store_true", help="Hide encoded calldata")
    parser.add_argument("--submit", action="store_true", help="Send routes to the configured node (needs POWDER_* env)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(sys.argv[1:])

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    slippage = fraction_from_string(args.slippage)
    show_calldata = not args.no_calldata

    w3 = submitter = reader = None
    now = int(time.time())
    if args.submit:
        from eth_account import Account

        from powder_router.client import EngineReader, NonceTracker, Web3Submitter, latest_timestamp
        from powder_router.config import load_config

        cfg = load_config()
        w3 = cfg.connect()
        account = Account.from_key(os.environ["POWDER_PRIVATE_KEY"])
        submitter = Web3Submitter(w3, account, cfg.router_address, gas_limit=cfg.gas_limit, chain_id=cfg.chain_id)
        reader = EngineReader(w3, cfg.engine_address)
        nonces = NonceTracker()
        now = latest_timestamp(w3)
        RECIPIENT = account.address
        logging.getLogger("demo").info("submitting as %s to router %s", account.address, cfg.router_address)

    deadline = now + 300
    collateral = create_amount_from_string(PAIR.token0, "1.5")

    # --------------- Register scenarios ---------------
    add("R1", lambda: compile_and_print(
        "R1) CreatePair(0) + AddLiquidity(1e18, spread 1)",
        RouteRequest(RECIPIENT, [CreatePair(PAIR, 0), AddLiquidity(PAIR, 0, 1, E18)], 0, deadline, slippage),
        now, show_calldata=show_calldata,
    ))

    add("R2", lambda: compile_and_print(
        "R2) BorrowLiquidity(collateral=1.5 token0, debt=0.5e18)",
        RouteRequest(RECIPIENT, [BorrowLiquidity(PAIR, 0, collateral, E18 // 2)], 1, deadline, slippage),
        now, show_calldata=show_calldata,
    ))

    add("R3", lambda: compile_and_print(
        "R3) RepayLiquidity(0.5e18) + RemoveLiquidity(0.5e18, spread 1)",
        RouteRequest(
            RECIPIENT,
            [RepayLiquidity(PAIR, 0, E18 // 2, collateral), RemoveLiquidity(PAIR, 0, 1, E18 // 2)],
            2, deadline, slippage,
        ),
        now, show_calldata=show_calldata,
    ))

    add("R4", lambda: compile_and_print(
        "R4) Swap 0.1 token1 -> 0.099 token0",
        RouteRequest(
            RECIPIENT,
            [Swap(PAIR, create_amount_from_string(PAIR.token1, "0.1"),
                  create_amount_from_string(PAIR.token0, "0.099"))],
            3, deadline, slippage,
        ),
        now, show_calldata=show_calldata,
    ))

    add("R5", lambda: compile_and_print(
        "R5) Deadline equal to the reference timestamp",
        RouteRequest(RECIPIENT, [CreatePair(PAIR, 0)], 4, now, slippage),
        now, show_calldata=show_calldata,
    ))

    only = set(args.only.split(",")) if args.only else None
    skip = set(args.skip.split(",")) if args.skip else set()

    for sc in scenarios:
        if only is not None and sc.sid not in only:
            continue
        if sc.sid in skip:
            continue
        request = sc.fn()
        if request is None or submitter is None:
            continue

        from powder_router.client import get_pair, route, wait_for_receipt

        payload, tx_hash = route(w3, submitter, request, nonces=nonces)
        receipt = wait_for_receipt(w3, tx_hash, timeout=cfg.receipt_timeout)
        if not nonces.settle(submitter.address, request.nonce, receipt):
            print(f"- route {sc.sid} reverted: tx=0x{bytes(tx_hash).hex()}")
        pair = get_pair(reader, PAIR, strikes=[0])
        print(f"- pair after {sc.sid}: {pair}")
