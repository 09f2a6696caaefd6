from pathlib import Path

import botocore.exceptions
import pytest
from fastapi.testclient import TestClient
from pytest_mock import MockerFixture

from app.types.content_type import ContentType
from app.types.exceptions import (
    ImageUploadError,
    InvalidS3AccessError,
    InvalidS3BucketNameError,
    InvalidS3FolderError,
)
from app.types.image_host import LocalImageHost, S3ImageHost
from tests.commons import settings


def mock_s3_client(mocker: MockerFixture, buckets: list[str]):
    s3_client = mocker.MagicMock()
    s3_client.list_buckets.return_value = {
        "Buckets": [{"Name": bucket} for bucket in buckets],
    }
    mocker.patch("app.types.image_host.boto3.client", return_value=s3_client)
    return s3_client


def new_s3_image_host(**kwargs) -> S3ImageHost:
    return S3ImageHost(
        s3_bucket_name="school-directory",
        s3_access_key_id="access-key",
        s3_secret_access_key="secret-key",
        folder=kwargs.pop("folder", "schools"),
        **kwargs,
    )


async def test_local_image_host_saves_image(tmp_path: Path) -> None:
    host = LocalImageHost(client_url="http://127.0.0.1:8000/", data_folder=str(tmp_path))

    url = await host.upload(b"png content", ContentType.png)

    assert url.startswith("http://127.0.0.1:8000/api/schools/images/")
    image_id = url.rsplit("/", 1)[1]
    assert (tmp_path / "schools" / f"{image_id}.png").read_bytes() == b"png content"


async def test_local_image_host_reports_write_errors(tmp_path: Path) -> None:
    # A file where the data folder should be prevents the creation of the images directory
    data_folder = tmp_path / "data"
    data_folder.write_text("not a directory")
    host = LocalImageHost(client_url="http://127.0.0.1:8000/", data_folder=str(data_folder))

    with pytest.raises(ImageUploadError):
        await host.upload(b"png content", ContentType.png)


async def test_local_image_is_served(client: TestClient) -> None:
    host = LocalImageHost(client_url=settings.CLIENT_URL)
    url = await host.upload(b"webp content", ContentType.webp)

    try:
        response = client.get(url.removeprefix(settings.CLIENT_URL.rstrip("/")))
        assert response.status_code == 200
        assert response.content == b"webp content"
    finally:
        image_id = url.rsplit("/", 1)[1]
        Path(f"data/schools/{image_id}.webp").unlink()


def test_unknown_local_image(client: TestClient) -> None:
    response = client.get(
        "/api/schools/images/8a1b6f5e-7f45-4a8f-9a3c-1d2e3f4a5b6c",
    )
    assert response.status_code == 404


def test_local_image_id_must_be_an_uuid(client: TestClient) -> None:
    response = client.get("/api/schools/images/not-an-uuid")
    assert response.status_code == 422


async def test_s3_image_host_uploads_image(mocker: MockerFixture) -> None:
    s3_client = mock_s3_client(mocker, ["school-directory"])
    host = new_s3_image_host(s3_region="eu-west-3")

    url = await host.upload(b"jpeg content", ContentType.jpg)

    assert url.startswith(
        "https://school-directory.s3.eu-west-3.amazonaws.com/schools/",
    )
    assert url.endswith(".jpg")
    s3_client.upload_fileobj.assert_called_once()
    fileobj, bucket, key = s3_client.upload_fileobj.call_args.args
    assert fileobj.read() == b"jpeg content"
    assert bucket == "school-directory"
    assert url.endswith(key)
    assert s3_client.upload_fileobj.call_args.kwargs == {
        "ExtraArgs": {"ContentType": "image/jpeg"},
    }


async def test_s3_image_host_uses_public_base_url(mocker: MockerFixture) -> None:
    mock_s3_client(mocker, ["school-directory"])
    host = new_s3_image_host(
        folder="",
        s3_endpoint_url="https://s3.fr-par.scw.cloud",
        public_base_url="https://images.example.org/",
    )

    url = await host.upload(b"png content", ContentType.png)

    assert url.startswith("https://images.example.org/")
    assert url.count("/") == 3


async def test_s3_image_host_reports_upload_errors(mocker: MockerFixture) -> None:
    s3_client = mock_s3_client(mocker, ["school-directory"])
    s3_client.upload_fileobj.side_effect = botocore.exceptions.ClientError(
        {"Error": {"Code": "AccessDenied", "Message": "Access Denied"}},
        "PutObject",
    )
    host = new_s3_image_host()

    with pytest.raises(ImageUploadError):
        await host.upload(b"png content", ContentType.png)


def test_s3_image_host_requires_existing_bucket(mocker: MockerFixture) -> None:
    mock_s3_client(mocker, ["another-bucket"])

    with pytest.raises(InvalidS3BucketNameError):
        new_s3_image_host()


def test_s3_image_host_requires_valid_credentials(mocker: MockerFixture) -> None:
    s3_client = mock_s3_client(mocker, [])
    s3_client.list_buckets.side_effect = botocore.exceptions.ClientError(
        {"Error": {"Code": "InvalidAccessKeyId", "Message": "Invalid key"}},
        "ListBuckets",
    )

    with pytest.raises(InvalidS3AccessError):
        new_s3_image_host()


def test_s3_image_host_rejects_invalid_folder(mocker: MockerFixture) -> None:
    mock_s3_client(mocker, ["school-directory"])

    with pytest.raises(InvalidS3FolderError):
        new_s3_image_host(folder="/schools/")
