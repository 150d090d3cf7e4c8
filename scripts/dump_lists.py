#!/usr/bin/env python3
"""Dump the reconciled management lists from a live backend.

Fetches customers, suppliers and users through the same screens the
admin views use, so duplicates are removed exactly as they would be on
screen.  Each record is printed with its parsed fields and the raw
backend JSON, which makes unparsed columns easy to spot.

Usage
-----
::

    export HABIBBI_BASE_URL="http://localhost/habibbi-api"
    python scripts/dump_lists.py

Options::

    --only customers     Only dump this list (repeatable)
    --search TEXT        Apply a free-text filter before printing
    --json               Output as machine-readable JSON
    --output FILE        Write output to FILE instead of stdout
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pyhabibbi import HabibbiClient, HabibbiConfig, NotificationStore, RecordFilter  # noqa: E402
from pyhabibbi.models import render_notification  # noqa: E402

_LISTS = ("customers", "suppliers", "users")


def _section(title: str) -> str:
    line = "=" * 60
    return f"\n{line}\n  {title}\n{line}"


async def main() -> int:
    parser = argparse.ArgumentParser(description="Dump reconciled Habibbi lists")
    parser.add_argument("--only", action="append", choices=_LISTS, help="Only dump this list")
    parser.add_argument("--search", default="", help="Free-text filter applied to every list")
    parser.add_argument("--json", dest="json_mode", action="store_true", help="Output as JSON")
    parser.add_argument("--output", type=Path, help="Write output to FILE")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    config = HabibbiConfig.from_env()
    notifications = NotificationStore(default_duration_ms=0)
    selected = args.only or list(_LISTS)
    result: dict[str, Any] = {"timestamp": datetime.now(UTC).isoformat(), "base_url": config.base_url}
    out: list[str] = [_section("pyhabibbi dump_lists"), f"  base_url : {config.base_url}"]
    failed = False

    async with HabibbiClient(config) as client:
        screens = {
            "customers": client.customer_screen(notifications),
            "suppliers": client.supplier_screen(notifications),
            "users": client.user_screen(notifications),
        }
        for name in selected:
            screen = screens[name]
            if not await screen.load():
                failed = True
                result[name] = {"error": screen.error}
                continue
            if args.search:
                screen.set_filter(RecordFilter(query=args.search))
            records = screen.records
            result[name] = [{"parsed": r.model_dump(mode="json"), "raw": r.raw} for r in records]

            out.append(_section(f"{name.upper()} ({len(records)})"))
            for record in records:
                out.append(f"  #{record.id}")
                for key, value in record.model_dump().items():
                    out.append(f"    {key}: {value!r}")
                out.append(f"    raw: {json.dumps(record.raw, ensure_ascii=False, default=str)}")

    for notification in notifications.notifications:
        out.append(f"  {render_notification(notification)}")

    if args.json_mode:
        payload = json.dumps(result, indent=2, default=str, ensure_ascii=False)
    else:
        payload = "\n".join(out)
    if args.output:
        args.output.write_text(payload, encoding="utf-8")
        print(f"Output written to {args.output}", file=sys.stderr)
    else:
        print(payload)
    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
