from typing import Any

from fastapi import HTTPException


class ContentHTTPException(HTTPException):
    """
    A custom HTTPException allowing to return custom content.

    Instead of returning `{detail: <content>}`, this exception can return a json serialized `<content>`.

    You need to define a custom exception handler to use it:
    ```python
    @app.exception_handler(ContentHTTPException)
    async def content_exception_handler(
        request: Request,
        exc: ContentHTTPException,
    ):
        return JSONResponse(
            status_code=exc.status_code,
            content=jsonable_encoder(exc.content),
            headers=exc.headers,
        )
    ```
    """

    def __init__(
        self,
        status_code: int,
        content: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=content, headers=headers)
        self.content = content


class InvalidAppStateTypeError(Exception):
    def __init__(self):
        super().__init__("The request state is neither a dict nor a starlette State")


class DotenvMissingVariableError(Exception):
    def __init__(self, variable_name: str):
        super().__init__(f"{variable_name} should be configured in the dotenv")


class DotenvInvalidVariableError(Exception):
    pass


class FileNameIsNotAnUUIDError(Exception):
    def __init__(self):
        super().__init__("The filename is not a valid UUID")


class SchoolSubmissionValidationError(Exception):
    """
    The submission was understood but does not satisfy the requirements of a school record.

    These errors are returned to the caller with a 400 status.
    """


class MissingSchoolFieldsError(SchoolSubmissionValidationError):
    def __init__(self, missing_fields: list[str]):
        super().__init__("All fields are required")
        self.missing_fields = missing_fields


class InvalidImageError(SchoolSubmissionValidationError):
    pass


class MalformedSchoolSubmissionError(Exception):
    def __init__(self, reason: str):
        super().__init__(f"Malformed school submission: {reason}")


class ImageUploadError(Exception):
    def __init__(self, reason: str):
        super().__init__(f"Could not upload the image: {reason}")


class OrderingNumberConflictError(Exception):
    def __init__(self, attempts: int):
        super().__init__(
            f"Could not assign a unique ordering number after {attempts} attempts",
        )


class InvalidS3AccessError(Exception):
    def __init__(self):
        super().__init__("Invalid S3 configuration")


class InvalidS3BucketNameError(Exception):
    def __init__(self, bucket_name: str):
        super().__init__(f"Invalid S3 bucket name: {bucket_name}")


class InvalidS3FolderError(Exception):
    def __init__(self, folder: str):
        super().__init__(
            f"Invalid S3 folder: {folder} - it should not start nor end with a special character",
        )
