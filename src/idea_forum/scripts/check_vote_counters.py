from __future__ import annotations

import argparse
import asyncio
import logging
from typing import Any, List

from sqlalchemy import Row
from sqlalchemy.ext.asyncio import AsyncSession

from idea_forum.db import SessionLocal
from idea_forum.repositories.votes import find_counter_drift, recount_counters


logger = logging.getLogger("idea_forum.scripts.check_vote_counters")


async def audit(session: AsyncSession, *, fix: bool = False) -> List[Row[Any]]:
    """Return ideas whose counters drifted from their votes; rewrite them when ``fix``."""
    drift = await find_counter_drift(session)
    if drift and fix:
        touched = await recount_counters(session, [r.id for r in drift])
        await session.commit()
        logger.warning("vote_counters:fixed", extra={"ideas": touched})
    return drift


async def run(args: argparse.Namespace) -> int:
    async with SessionLocal() as ses:
        drift = await audit(ses, fix=args.fix)
    if not drift:
        print("Counters match live votes.")
        return 0
    print(f"Ideas with drifted counters: {len(drift)}")
    for r in drift[: args.show]:
        print(f"  idea={r.id} up={r.upvotes}/{r.live_up} down={r.downvotes}/{r.live_down}")
    if args.fix:
        print("Counters rewritten from vote rows.")
        return 0
    return 1


def main() -> int:
    ap = argparse.ArgumentParser(description="Compare idea vote counters with live vote rows")
    ap.add_argument("--fix", action="store_true", help="rewrite drifted counters from the vote rows")
    ap.add_argument("--show", type=int, default=20, help="how many drifted ideas to print")
    args = ap.parse_args()
    return asyncio.run(run(args))


if __name__ == "__main__":
    raise SystemExit(main())
