"""File defining the functions called by the endpoints, making queries to the table using the models"""

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import func, insert, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from app.modules.schools import models_schools, schemas_schools


async def get_schools(db: AsyncSession) -> Sequence[schemas_schools.School]:
    """Return all schools from database, the most recently added first"""

    result = await db.execute(
        select(models_schools.SchoolRecord).order_by(
            models_schools.SchoolRecord.ordering_number.desc(),
        ),
    )
    return [
        schemas_schools.School(
            ordering_number=school.ordering_number,
            id=school.id,
            name=school.name,
            address=school.address,
            city=school.city,
            state=school.state,
            contact=school.contact,
            email=school.email,
            image=school.image,
        )
        for school in result.scalars().all()
    ]


async def create_school(
    db: AsyncSession,
    school_id: UUID,
    school: schemas_schools.SchoolBase,
    image: str,
) -> int:
    """
    Insert a new school and return the ordering number it was given.

    The ordering number is computed by the INSERT statement itself, so that reading the current maximum
    and writing the new row can not be interleaved with another registration.
    The unique constraint on the column rejects the statement if a concurrent transaction committed the same value first.
    """
    # The subquery reads an alias of the table so that it is never correlated with the INSERT target
    existing_schools = aliased(models_schools.SchoolRecord)
    next_ordering_number = select(
        func.coalesce(func.max(existing_schools.ordering_number), 0) + 1,
    ).scalar_subquery()
    result = await db.execute(
        insert(models_schools.SchoolRecord)
        .values(
            ordering_number=next_ordering_number,
            id=school_id,
            name=school.name,
            address=school.address,
            city=school.city,
            state=school.state,
            contact=school.contact,
            email=school.email,
            image=image,
        )
        .returning(models_schools.SchoolRecord.ordering_number),
    )
    return result.scalar_one()


async def count_schools(db: AsyncSession) -> int:
    result = await db.execute(
        select(func.count()).select_from(models_schools.SchoolRecord),
    )
    return result.scalar_one()
