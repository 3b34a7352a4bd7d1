"""
Seed the demo author, category and article

    python scripts/seed_demo.py [--create-tables]
"""

import argparse
import asyncio
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from loguru import logger

from pznews.core.exceptions import PZNewsException
from pznews.core.logging import configure_logging
from pznews.db.database import AsyncSessionLocal, close_db, create_tables
from pznews.seed import seed_demo
from pznews.utils.cache import TaggedCache


async def main(args: argparse.Namespace) -> int:
    configure_logging()
    if args.create_tables:
        await create_tables()

    cache = TaggedCache()
    await cache.initialize()
    try:
        async with AsyncSessionLocal() as session:
            await seed_demo(session, cache)
    except PZNewsException as e:
        logger.error(f"Seeding failed: {e.message}")
        return 1
    finally:
        await cache.close()
        await close_db()
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Insert PZ News demo content")
    parser.add_argument("--create-tables", action="store_true", help="create missing tables first")
    sys.exit(asyncio.run(main(parser.parse_args())))
