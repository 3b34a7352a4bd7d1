import asyncio
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from pznews.db.database import close_db, create_tables


async def main() -> None:
    await create_tables()
    await close_db()


if __name__ == "__main__":
    asyncio.run(main())
