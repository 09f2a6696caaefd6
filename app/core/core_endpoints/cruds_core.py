from collections.abc import Sequence

from sqlalchemy import text
from sqlalchemy.engine import RowMapping
from sqlalchemy.ext.asyncio import AsyncSession


async def check_database(db: AsyncSession) -> Sequence[RowMapping]:
    """Run a trivial query, used to check that the database is reachable"""

    result = await db.execute(text("SELECT 1 + 1 AS result"))
    return result.mappings().all()
