from __future__ import annotations

import argparse
import asyncio
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from idea_forum.db import SessionLocal
from idea_forum.models import IdeaCategory
from idea_forum.repositories.categories import list_active, list_all


async def collect(session: AsyncSession, *, include_inactive: bool = False) -> List[str]:
    rows = await (list_all(session) if include_inactive else list_active(session))
    lines = [f"Found {len(rows)} categories:"]
    for category, post_count in rows:
        flag = "" if category.is_active else " [inactive]"
        lines.append(f"  {category.name} ({category.slug}) - {category.color}, posts={post_count}{flag}")
    lines.append("IdeaCategory values:")
    lines.extend(f"  - {c.value}" for c in IdeaCategory)
    return lines


async def run(args: argparse.Namespace) -> int:
    async with SessionLocal() as ses:
        lines = await collect(ses, include_inactive=args.all)
    print("\n".join(lines))
    return 0


def main() -> int:
    ap = argparse.ArgumentParser(description="List forum categories and idea category values")
    ap.add_argument("--all", action="store_true", help="include inactive categories")
    args = ap.parse_args()
    return asyncio.run(run(args))


if __name__ == "__main__":
    raise SystemExit(main())
