import logging
import re
import secrets
from pathlib import Path

from fastapi import HTTPException
from fastapi.responses import FileResponse

from app.types.exceptions import FileNameIsNotAnUUIDError

directory_error_logger = logging.getLogger("directory.error")


uuid_regex = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
)


def get_file_path_from_data(
    directory: str,
    filename: str,
) -> Path | None:
    """
    If there is a file with the provided filename in the data folder, return its path. The file extension will be inferred from the existing file.
    > "data/{directory}/{filename}.ext"
    Otherwise, return None.

    The filename should be a uuid.

    WARNING: **NEVER** trust user input when calling this function. Always check that parameters are valid.
    """
    if not uuid_regex.match(filename):
        directory_error_logger.error(
            f"get_file_path_from_data: security issue, the filename is not a valid UUID: {filename}. This mean that the user input was not properly checked.",
        )
        raise FileNameIsNotAnUUIDError()

    for file_path in Path().glob(f"data/{directory}/{filename}.*"):
        return file_path

    return None


def get_file_from_data(
    directory: str,
    filename: str,
) -> FileResponse:
    """
    If there is a file with the provided filename in the data folder, return it.
    > "data/{directory}/{filename}.ext"
    Otherwise, raise a 404 HTTPException.

    WARNING: **NEVER** trust user input when calling this function. Always check that parameters are valid.
    """
    path = get_file_path_from_data(directory, filename)
    if path is None:
        raise HTTPException(status_code=404, detail="File not found")

    return FileResponse(path)


def get_random_string(length: int = 5) -> str:
    return "".join(
        secrets.choice("abcdefghijklmnopqrstuvwxyz0123456789") for _ in range(length)
    )
