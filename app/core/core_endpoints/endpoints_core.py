import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.core_endpoints import cruds_core, schemas_core
from app.core.utils.config import Settings
from app.dependencies import get_db, get_request_id, get_settings
from app.types.exceptions import ContentHTTPException
from app.types.module import CoreModule
from app.types.standard_responses import ErrorResult

directory_error_logger = logging.getLogger("directory.error")

router = APIRouter(tags=["Core"])

core_module = CoreModule(
    root="core",
    tag="Core",
    router=router,
)


@router.get(
    "/information",
    response_model=schemas_core.CoreInformation,
    status_code=200,
)
async def read_information(
    settings: Settings = Depends(get_settings),
):
    """
    Return information about the school directory. This endpoint can be used to check if the API is up.
    """

    return schemas_core.CoreInformation(
        ready=True,
        version=settings.DIRECTORY_VERSION,
    )


@router.get(
    "/api/testdb",
    response_model=schemas_core.DatabaseCheck,
    status_code=200,
    responses={500: {"model": ErrorResult}},
)
async def check_database(
    db: AsyncSession = Depends(get_db),
    request_id: str = Depends(get_request_id),
):
    """
    Run a trivial query to check that the database is reachable
    """
    try:
        rows = await cruds_core.check_database(db)
    except Exception as error:
        await db.rollback()
        directory_error_logger.exception(
            f"Database check failed: {error} ({request_id})",
        )
        raise ContentHTTPException(
            status_code=500,
            content=ErrorResult(error=str(error)).model_dump(exclude_none=True),
        ) from error

    return schemas_core.DatabaseCheck(
        data=[schemas_core.DatabaseCheckRow(result=row["result"]) for row in rows],
    )
