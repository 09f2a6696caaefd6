import logging
import re
import uuid
from abc import ABC, abstractmethod
from io import BytesIO
from pathlib import Path

import aiofiles
import boto3
import botocore
import botocore.exceptions
from fastapi.concurrency import run_in_threadpool

from app.types.content_type import ContentType
from app.types.exceptions import (
    ImageUploadError,
    InvalidS3AccessError,
    InvalidS3BucketNameError,
    InvalidS3FolderError,
)

AUTHORIZED_FOLDER_STRING = r"^[\w](?:[\w/_:\.-]*[\w])?$"

LOCAL_IMAGES_DIRECTORY = "schools"

directory_images_logger = logging.getLogger("directory.images")


class ImageHost(ABC):
    """
    Turn the raw bytes of an image into a durable url.

    An instance is created once during the application startup (see `app.utils.state.init_image_host`)
    and should be accessed using the `get_image_host` dependency. Tests replace it with their own implementation.
    """

    @abstractmethod
    async def upload(self, content: bytes, content_type: ContentType) -> str:
        """
        Store the image and return the url it can be retrieved at.

        Raises:
            ImageUploadError: if the image could not be stored
        """


class S3ImageHost(ImageHost):
    """Upload school images to an S3 compatible bucket."""

    def __init__(
        self,
        s3_bucket_name: str,
        s3_access_key_id: str,
        s3_secret_access_key: str,
        folder: str,
        s3_region: str | None = None,
        s3_endpoint_url: str | None = None,
        public_base_url: str | None = None,
    ) -> None:
        if folder != "" and not re.match(AUTHORIZED_FOLDER_STRING, folder):
            raise InvalidS3FolderError(folder)
        self.folder = folder
        self.bucket_name = s3_bucket_name
        self.s3 = boto3.client(
            "s3",
            aws_access_key_id=s3_access_key_id,
            aws_secret_access_key=s3_secret_access_key,
            region_name=s3_region,
            endpoint_url=s3_endpoint_url,
        )
        try:
            response = self.s3.list_buckets()
        except botocore.exceptions.ClientError as e:
            raise InvalidS3AccessError() from e
        if not any(
            bucket["Name"] == self.bucket_name for bucket in response["Buckets"]
        ):
            raise InvalidS3BucketNameError(self.bucket_name)

        if public_base_url is not None:
            self.public_base_url = public_base_url.rstrip("/")
        elif s3_region is not None:
            self.public_base_url = (
                f"https://{s3_bucket_name}.s3.{s3_region}.amazonaws.com"
            )
        else:
            self.public_base_url = f"https://{s3_bucket_name}.s3.amazonaws.com"

    def _object_key(self, content_type: ContentType) -> str:
        filename = f"{uuid.uuid4()}.{content_type.name}"
        if self.folder != "":
            return f"{self.folder}/{filename}"
        return filename

    async def upload(self, content: bytes, content_type: ContentType) -> str:
        key = self._object_key(content_type)
        try:
            # boto3 is synchronous, we don't want to block the event loop during the upload
            await run_in_threadpool(
                self.s3.upload_fileobj,
                BytesIO(content),
                self.bucket_name,
                key,
                ExtraArgs={"ContentType": content_type.value},
            )
        except (
            botocore.exceptions.ClientError,
            botocore.exceptions.BotoCoreError,
        ) as error:
            directory_images_logger.error(f"S3 upload of {key} failed: {error}")
            raise ImageUploadError(str(error)) from error

        directory_images_logger.info(
            f"Uploaded {key} ({len(content)} bytes) to bucket {self.bucket_name}",
        )
        return f"{self.public_base_url}/{key}"


class LocalImageHost(ImageHost):
    """
    Save school images in the data folder: "data/schools/{uuid}.ext"

    Images are then served by the `/api/schools/images/{image_id}` endpoint.
    This host is used when no S3 bucket is configured, for development purposes.
    """

    def __init__(self, client_url: str, data_folder: str = "data") -> None:
        self.client_url = client_url
        self.directory = Path(data_folder) / LOCAL_IMAGES_DIRECTORY

    async def upload(self, content: bytes, content_type: ContentType) -> str:
        image_id = uuid.uuid4()
        path = self.directory / f"{image_id}.{content_type.name}"
        try:
            # If the directory does not exist, we want to create it
            self.directory.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, mode="wb") as buffer:
                await buffer.write(content)
        except OSError as error:
            directory_images_logger.error(f"Could not save image {path}: {error}")
            raise ImageUploadError(str(error)) from error

        directory_images_logger.info(f"Saved {path} ({len(content)} bytes)")
        return f"{self.client_url}api/schools/images/{image_id}"
