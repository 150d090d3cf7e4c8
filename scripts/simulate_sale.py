#!/usr/bin/env python3
"""Drive the cash-register simulator from a shell.

The state lives in a JSON file, so two shells pointed at the same file
behave like two open admin tabs: run ``watch`` in one and ``sale`` in
the other to see each sale arrive as a remote storage event.

Usage
-----
::

    python scripts/simulate_sale.py --state /tmp/habibbi-cash.json init
    python scripts/simulate_sale.py --state /tmp/habibbi-cash.json watch
    python scripts/simulate_sale.py --state /tmp/habibbi-cash.json sale 2500 --tender card
    python scripts/simulate_sale.py --state /tmp/habibbi-cash.json show
    python scripts/simulate_sale.py --state /tmp/habibbi-cash.json reset

``--state`` defaults to ``HABIBBI_CASH_STATE_PATH``.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pyhabibbi import (  # noqa: E402
    CashRegister,
    CashSaleRecorded,
    EventBus,
    HabibbiConfig,
    HabibbiError,
    JsonFileStorage,
    SaleSimulator,
    StorageChanged,
)
from pyhabibbi.models import CashState  # noqa: E402

_logger = logging.getLogger("simulate_sale")


def _print_state(state: CashState | None) -> None:
    if state is None:
        print("No cash state stored")
        return
    print(json.dumps(json.loads(state.to_json()), indent=2, ensure_ascii=False))


def _on_storage(event: StorageChanged) -> None:
    print(f"[{event.origin.value}] {event.key} changed at {event.observed_at:%H:%M:%S}")
    if event.new_value is None:
        print("  (removed)")
        return
    state = CashState.from_json(event.new_value)
    print(f"  open={state.is_open} cash_on_hand={state.cash_on_hand:g} total_sales={state.total_sales:g}")


def _on_sale(event: CashSaleRecorded) -> None:
    print(f"Sale recorded: {event.sale_total:g} ({event.tender.value})")


async def _watch(storage: JsonFileStorage, interval: float) -> None:
    print(f"Watching {storage.path} (Ctrl+C to stop)")
    while True:
        storage.poll()
        await asyncio.sleep(interval)


def main() -> int:
    parser = argparse.ArgumentParser(description="Habibbi cash-register simulator")
    parser.add_argument("--state", type=Path, help="JSON state file shared between shells")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    init = sub.add_parser("init", help="Write a fresh open register")
    init.add_argument("opening_float", nargs="?", type=float, default=75000)
    sale = sub.add_parser("sale", help="Record a simulated sale")
    sale.add_argument("amount", nargs="?", type=float, default=2500)
    sale.add_argument("--tender", choices=("cash", "card"), default="cash")
    sub.add_parser("show", help="Print the stored state")
    sub.add_parser("reset", help="Remove the stored state")
    watch = sub.add_parser("watch", help="Print changes made by other shells")
    watch.add_argument("--interval", type=float, default=0.5)

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = HabibbiConfig.from_env()
    path = args.state or (Path(config.cash_state_path) if config.cash_state_path else None)
    if path is None:
        parser.error("--state or HABIBBI_CASH_STATE_PATH is required")

    bus = EventBus()
    bus.subscribe(StorageChanged, _on_storage)
    bus.subscribe(CashSaleRecorded, _on_sale)
    storage = JsonFileStorage(path, bus)
    simulator = SaleSimulator(CashRegister(storage, bus, key=config.cash_state_key))

    try:
        if args.command == "init":
            simulator.initialize(args.opening_float)
        elif args.command == "sale":
            if not simulator.simulate(args.amount, args.tender):
                print("The cash register is not open; run 'init' first", file=sys.stderr)
                return 1
        elif args.command == "show":
            _print_state(simulator.inspect())
        elif args.command == "reset":
            simulator.reset()
        elif args.command == "watch":
            try:
                asyncio.run(_watch(storage, args.interval))
            except KeyboardInterrupt:
                pass
    except HabibbiError as exc:
        _logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
