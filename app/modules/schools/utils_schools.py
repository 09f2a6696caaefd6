import logging
import uuid

from fastapi import Request
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from app.modules.schools import cruds_schools, schemas_schools
from app.types.content_type import ContentType
from app.types.exceptions import (
    InvalidImageError,
    MalformedSchoolSubmissionError,
    MissingSchoolFieldsError,
    OrderingNumberConflictError,
)
from app.types.image_host import ImageHost

directory_error_logger = logging.getLogger("directory.error")

REQUIRED_FIELDS = ["name", "address", "city", "state", "contact", "email"]
TEXT_FIELDS = [*REQUIRED_FIELDS, "image"]
FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


async def parse_school_submission(
    request: Request,
    max_image_size: int,
) -> schemas_schools.SchoolSubmission:
    """
    Read the body of a registration request and return its canonical form.

    Forms (`multipart/form-data` or `application/x-www-form-urlencoded`) may contain an `imageFile` file field,
    any other request is read as a json object in which `image` is the url of an already hosted image.

    At most `max_image_size + 1` bytes of the file are read, which is enough for `check_image_file` to reject a bigger file.
    """
    content_type = request.headers.get("content-type", "")

    if content_type.startswith(FORM_CONTENT_TYPES):
        try:
            form = await request.form()
        except Exception as error:
            raise MalformedSchoolSubmissionError(str(error)) from error

        fields: dict[str, object] = {
            field: form.get(field) for field in TEXT_FIELDS if field in form
        }
        image_file = form.get("imageFile")
        # Browsers send an empty file when the file input was left blank
        if isinstance(image_file, UploadFile) and image_file.filename:
            fields["image_file"] = await image_file.read(max_image_size + 1)
            fields["image_content_type"] = image_file.content_type
    else:
        try:
            body = await request.json()
        except ValueError as error:
            raise MalformedSchoolSubmissionError("the body is not valid json") from error
        if not isinstance(body, dict):
            raise MalformedSchoolSubmissionError("a json object is expected")
        fields = {field: body[field] for field in TEXT_FIELDS if field in body}

    try:
        return schemas_schools.SchoolSubmission(**fields)
    except ValidationError as error:
        raise MalformedSchoolSubmissionError(
            f"invalid fields {[e['loc'][0] for e in error.errors()]}",
        ) from error


def check_required_fields(
    submission: schemas_schools.SchoolSubmission,
) -> schemas_schools.SchoolBase:
    """
    Return the required fields of the submission, exactly as they were submitted.

    A field which is absent, empty or only made of spaces is missing.
    """
    missing_fields = [
        field
        for field in REQUIRED_FIELDS
        if not (getattr(submission, field) or "").strip()
    ]
    if missing_fields:
        raise MissingSchoolFieldsError(missing_fields)

    return schemas_schools.SchoolBase(
        **{field: getattr(submission, field) for field in REQUIRED_FIELDS},
    )


def check_image_file(
    submission: schemas_schools.SchoolSubmission,
    max_image_size: int,
) -> ContentType | None:
    """
    Check the uploaded image, if any, and return its content type.
    """
    if submission.image_file is None:
        return None

    accepted_content_types = [content_type.value for content_type in ContentType]
    if submission.image_content_type not in accepted_content_types:
        raise InvalidImageError(
            f"Invalid file format, supported {accepted_content_types}",
        )
    if len(submission.image_file) > max_image_size:
        raise InvalidImageError(
            f"File size is too big. Limit is {max_image_size / 1024 / 1024} MB",
        )
    return ContentType(submission.image_content_type)


async def resolve_image(
    submission: schemas_schools.SchoolSubmission,
    image_content_type: ContentType | None,
    image_host: ImageHost,
) -> str:
    """
    Return the url that should be stored for the school image.

    An uploaded file takes precedence over an url, no image is stored as an empty string.
    """
    if submission.image_file is not None and image_content_type is not None:
        return await image_host.upload(submission.image_file, image_content_type)
    return submission.image or ""


async def insert_school(
    db: AsyncSession,
    school: schemas_schools.SchoolBase,
    image: str,
    max_attempts: int,
    request_id: str,
) -> schemas_schools.School:
    """
    Insert and commit the school, retrying when a concurrent registration took the same ordering number.
    """
    for attempt in range(1, max_attempts + 1):
        school_id = uuid.uuid4()
        try:
            ordering_number = await cruds_schools.create_school(
                db=db,
                school_id=school_id,
                school=school,
                image=image,
            )
            await db.commit()
        except IntegrityError as error:
            await db.rollback()
            directory_error_logger.warning(
                f"School registration: attempt {attempt}/{max_attempts} conflicted with a concurrent registration: {error.orig} ({request_id})",
            )
        else:
            return schemas_schools.School(
                ordering_number=ordering_number,
                id=school_id,
                image=image,
                **school.model_dump(),
            )

    raise OrderingNumberConflictError(max_attempts)
