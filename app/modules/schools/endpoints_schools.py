"""
File defining the API itself, using fastAPI and schemas, and calling the cruds functions

The school directory lets anyone register a school and list the registered schools.
Both endpoints answer with a `{success: ...}` body, errors included.
"""

import logging
import uuid

from fastapi import Depends, Request
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.utils.config import Settings
from app.dependencies import get_db, get_image_host, get_request_id, get_settings
from app.modules.schools import cruds_schools, schemas_schools, utils_schools
from app.types.exceptions import (
    ContentHTTPException,
    SchoolSubmissionValidationError,
)
from app.types.image_host import LOCAL_IMAGES_DIRECTORY, ImageHost
from app.types.module import Module
from app.types.standard_responses import ErrorResult, MessageResult
from app.utils.tools import get_file_from_data

directory_access_logger = logging.getLogger("directory.access")
directory_error_logger = logging.getLogger("directory.error")

module = Module(
    root="schools",
    tag="Schools",
)


@module.router.post(
    "/api/addschool",
    response_model=MessageResult,
    status_code=200,
    responses={400: {"model": ErrorResult}, 500: {"model": ErrorResult}},
)
async def add_school(
    request: Request,
    db: AsyncSession = Depends(get_db),
    image_host: ImageHost = Depends(get_image_host),
    settings: Settings = Depends(get_settings),
    request_id: str = Depends(get_request_id),
):
    """
    Register a new school.

    The request can either be:
     - a `multipart/form-data` form with the fields `name`, `address`, `city`, `state`, `contact`, `email`, `image` and an optional `imageFile` file
     - a json object with the fields `name`, `address`, `city`, `state`, `contact`, `email` and `image`, the url of the school image

    All fields but the image are required.
    """
    try:
        submission = await utils_schools.parse_school_submission(
            request,
            max_image_size=settings.MAX_IMAGE_SIZE,
        )
        school = utils_schools.check_required_fields(submission)
        image_content_type = utils_schools.check_image_file(
            submission,
            max_image_size=settings.MAX_IMAGE_SIZE,
        )
        image = await utils_schools.resolve_image(
            submission,
            image_content_type=image_content_type,
            image_host=image_host,
        )
        db_school = await utils_schools.insert_school(
            db=db,
            school=school,
            image=image,
            max_attempts=settings.ORDERING_NUMBER_MAX_ATTEMPTS,
            request_id=request_id,
        )
    except SchoolSubmissionValidationError as error:
        raise ContentHTTPException(
            status_code=400,
            content=ErrorResult(message=str(error)).model_dump(exclude_none=True),
        ) from error
    except Exception as error:
        await db.rollback()
        directory_error_logger.exception(
            f"School registration failed: {error} ({request_id})",
        )
        raise ContentHTTPException(
            status_code=500,
            content=ErrorResult(
                message="Failed to add school",
                error=str(error),
            ).model_dump(exclude_none=True),
        ) from error

    directory_access_logger.info(
        f"School {db_school.id} registered with ordering number {db_school.ordering_number} ({request_id})",
    )
    return MessageResult(message="School added successfully")


@module.router.get(
    "/api/getschools",
    response_model=schemas_schools.SchoolList,
    status_code=200,
    responses={500: {"model": ErrorResult}},
)
async def get_schools(
    db: AsyncSession = Depends(get_db),
    request_id: str = Depends(get_request_id),
):
    """
    Return every registered school, the most recently added first
    """
    try:
        schools = await cruds_schools.get_schools(db)
    except Exception as error:
        await db.rollback()
        directory_error_logger.exception(
            f"Error fetching schools: {error} ({request_id})",
        )
        raise ContentHTTPException(
            status_code=500,
            content=ErrorResult(
                message="Failed to fetch schools",
                error=str(error),
            ).model_dump(exclude_none=True),
        ) from error

    return schemas_schools.SchoolList(data=list(schools))


@module.router.get(
    "/api/schools/images/{image_id}",
    response_class=FileResponse,
    status_code=200,
)
async def read_school_image(image_id: uuid.UUID):
    """
    Return a school image saved by the local image host
    """
    return get_file_from_data(
        directory=LOCAL_IMAGES_DIRECTORY,
        filename=str(image_id),
    )
