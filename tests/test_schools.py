import uuid

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from pytest_mock import MockerFixture
from sqlalchemy.exc import OperationalError

from app.dependencies import get_image_host
from app.modules.schools import cruds_schools, models_schools
from app.utils.tools import get_random_string
from tests.commons import (
    FailingImageHost,
    TestingSessionLocal,
    add_object_to_db,
    clear_schools,
    image_host,
)

OAK_HALL = {
    "name": "Oak Hall",
    "address": "1 Elm St",
    "city": "Springfield",
    "state": "IL",
    "contact": "555-0100",
    "email": "info@oakhall.edu",
    "image": "",
}


def random_school(**fields: str) -> dict[str, str]:
    school = {
        "name": get_random_string(10),
        "address": f"{get_random_string()} Road",
        "city": get_random_string(),
        "state": get_random_string(2),
        "contact": "555-0199",
        "email": f"{get_random_string()}@school.edu",
    }
    school.update(fields)
    return school


@pytest_asyncio.fixture
async def empty_directory() -> None:
    await clear_schools()


async def count_schools() -> int:
    async with TestingSessionLocal() as db:
        return await cruds_schools.count_schools(db)


async def test_create_school_in_empty_directory(
    client: TestClient,
    empty_directory: None,
) -> None:
    response = client.post("/api/addschool", json=OAK_HALL)
    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": "School added successfully",
    }

    response = client.get("/api/getschools")
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert len(data["data"]) == 1
    school = data["data"][0]
    assert school["orderingNumber"] == 1
    assert school["image"] == ""
    for field, value in OAK_HALL.items():
        assert school[field] == value
    uuid.UUID(school["id"])


async def test_create_school_without_email(
    client: TestClient,
    empty_directory: None,
) -> None:
    school = dict(OAK_HALL)
    del school["email"]

    response = client.post("/api/addschool", json=school)
    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "message": "All fields are required",
    }
    assert await count_schools() == 0


async def test_create_school_with_blank_field(
    client: TestClient,
    empty_directory: None,
) -> None:
    response = client.post("/api/addschool", json=random_school(city="   "))
    assert response.status_code == 400
    assert response.json()["message"] == "All fields are required"
    assert await count_schools() == 0


def test_create_school_keeps_values_verbatim(client: TestClient) -> None:
    school = random_school(name="  Saint Mary's  ", image="https://cdn.test/a.png")

    response = client.post("/api/addschool", json=school)
    assert response.status_code == 200

    schools = client.get("/api/getschools").json()["data"]
    created = next(s for s in schools if s["email"] == school["email"])
    assert created["name"] == "  Saint Mary's  "
    assert created["image"] == "https://cdn.test/a.png"


def test_create_school_with_null_image(client: TestClient) -> None:
    school: dict[str, str | None] = {**random_school(), "image": None}

    response = client.post("/api/addschool", json=school)
    assert response.status_code == 200

    schools = client.get("/api/getschools").json()["data"]
    created = next(s for s in schools if s["email"] == school["email"])
    assert created["image"] == ""


def test_create_school_with_multipart_image(client: TestClient) -> None:
    school = random_school()

    response = client.post(
        "/api/addschool",
        data=school,
        files={"imageFile": ("logo.png", b"fake png content", "image/png")},
    )
    assert response.status_code == 200

    schools = client.get("/api/getschools").json()["data"]
    created = next(s for s in schools if s["email"] == school["email"])
    assert created["image"] in image_host.uploads
    assert image_host.uploads[created["image"]][0] == b"fake png content"


def test_uploaded_image_takes_precedence_over_url(client: TestClient) -> None:
    school = random_school(image="https://cdn.test/ignored.png")

    response = client.post(
        "/api/addschool",
        data=school,
        files={"imageFile": ("logo.webp", b"webp", "image/webp")},
    )
    assert response.status_code == 200

    schools = client.get("/api/getschools").json()["data"]
    created = next(s for s in schools if s["email"] == school["email"])
    assert created["image"] in image_host.uploads


def test_create_school_with_empty_file_field(client: TestClient) -> None:
    # Browsers send an empty file without filename when no file was selected
    school = random_school(image="https://cdn.test/b.png")

    response = client.post(
        "/api/addschool",
        data=school,
        files={"imageFile": ("", b"", "application/octet-stream")},
    )
    assert response.status_code == 200

    schools = client.get("/api/getschools").json()["data"]
    created = next(s for s in schools if s["email"] == school["email"])
    assert created["image"] == "https://cdn.test/b.png"


def test_create_school_with_urlencoded_form(client: TestClient) -> None:
    school = random_school()

    response = client.post("/api/addschool", data=school)
    assert response.status_code == 200

    schools = client.get("/api/getschools").json()["data"]
    created = next(s for s in schools if s["email"] == school["email"])
    assert created["image"] == ""


@pytest.mark.parametrize(
    ("filename", "content_type"),
    [
        ("logo.gif", "image/gif"),
        ("logo.avif", "image/avif"),
        ("logo.svg", "image/svg+xml"),
    ],
)
def test_create_school_with_other_image_formats(
    client: TestClient,
    filename: str,
    content_type: str,
) -> None:
    school = random_school()

    response = client.post(
        "/api/addschool",
        data=school,
        files={"imageFile": (filename, b"image content", content_type)},
    )
    assert response.status_code == 200

    schools = client.get("/api/getschools").json()["data"]
    created = next(s for s in schools if s["email"] == school["email"])
    assert image_host.uploads[created["image"]][1].value == content_type


async def test_create_school_with_invalid_image_type(
    client: TestClient,
    empty_directory: None,
) -> None:
    uploads_before = len(image_host.uploads)

    response = client.post(
        "/api/addschool",
        data=random_school(),
        files={"imageFile": ("brochure.pdf", b"%PDF-1.7", "application/pdf")},
    )
    assert response.status_code == 400
    assert response.json()["success"] is False
    assert "Invalid file format" in response.json()["message"]
    assert len(image_host.uploads) == uploads_before
    assert await count_schools() == 0


async def test_create_school_with_too_big_image(
    client: TestClient,
    empty_directory: None,
) -> None:
    # The test configuration limits images to 1024 bytes
    response = client.post(
        "/api/addschool",
        data=random_school(),
        files={"imageFile": ("logo.jpg", b"0" * 2048, "image/jpeg")},
    )
    assert response.status_code == 400
    assert "File size is too big" in response.json()["message"]
    assert await count_schools() == 0


def test_missing_fields_are_checked_before_upload(client: TestClient) -> None:
    uploads_before = len(image_host.uploads)

    response = client.post(
        "/api/addschool",
        data=random_school(name=""),
        files={"imageFile": ("logo.png", b"png", "image/png")},
    )
    assert response.status_code == 400
    assert len(image_host.uploads) == uploads_before


def test_create_school_with_malformed_json(client: TestClient) -> None:
    response = client.post(
        "/api/addschool",
        content=b"{not json",
        headers={"content-type": "application/json"},
    )
    assert response.status_code == 500
    data = response.json()
    assert data["success"] is False
    assert data["message"] == "Failed to add school"
    assert "not valid json" in data["error"]


def test_create_school_with_json_array(client: TestClient) -> None:
    response = client.post("/api/addschool", json=[OAK_HALL])
    assert response.status_code == 500
    assert response.json()["success"] is False


def test_create_school_with_non_string_field(client: TestClient) -> None:
    response = client.post("/api/addschool", json=random_school() | {"contact": 5550100})
    assert response.status_code == 500
    assert "contact" in response.json()["error"]


async def test_create_school_when_upload_fails(
    client: TestClient,
    empty_directory: None,
) -> None:
    client.app.dependency_overrides[get_image_host] = FailingImageHost  # type: ignore[attr-defined]
    try:
        response = client.post(
            "/api/addschool",
            data=random_school(),
            files={"imageFile": ("logo.png", b"png", "image/png")},
        )
    finally:
        del client.app.dependency_overrides[get_image_host]  # type: ignore[attr-defined]

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "message": "Failed to add school",
        "error": "Could not upload the image: the bucket is unreachable",
    }
    assert await count_schools() == 0


async def test_successive_creations_get_distinct_ordering_numbers(
    client: TestClient,
    empty_directory: None,
) -> None:
    first = random_school()
    second = random_school()

    assert client.post("/api/addschool", json=first).status_code == 200
    assert client.post("/api/addschool", json=second).status_code == 200

    schools = client.get("/api/getschools").json()["data"]
    assert [s["email"] for s in schools] == [second["email"], first["email"]]
    assert [s["orderingNumber"] for s in schools] == [2, 1]


async def test_list_returns_every_school_most_recent_first(
    client: TestClient,
    empty_directory: None,
) -> None:
    created = [random_school() for _ in range(5)]
    for school in created:
        assert client.post("/api/addschool", json=school).status_code == 200

    response = client.get("/api/getschools")
    assert response.status_code == 200
    schools = response.json()["data"]
    assert len(schools) == 5

    ordering_numbers = [s["orderingNumber"] for s in schools]
    assert ordering_numbers == sorted(ordering_numbers, reverse=True)
    assert len(set(ordering_numbers)) == 5
    assert [s["email"] for s in schools] == [s["email"] for s in reversed(created)]
    assert len({s["id"] for s in schools}) == 5


async def test_new_school_follows_the_highest_ordering_number(
    client: TestClient,
    empty_directory: None,
) -> None:
    await add_object_to_db(
        models_schools.SchoolRecord(
            ordering_number=41,
            id=uuid.uuid4(),
            name="Existing school",
            address="2 Elm St",
            city="Springfield",
            state="IL",
            contact="555-0101",
            email="existing@school.edu",
        ),
    )

    assert client.post("/api/addschool", json=OAK_HALL).status_code == 200

    schools = client.get("/api/getschools").json()["data"]
    assert [s["orderingNumber"] for s in schools] == [42, 41]
    assert schools[0]["name"] == "Oak Hall"


async def test_list_empty_directory(
    client: TestClient,
    empty_directory: None,
) -> None:
    response = client.get("/api/getschools")
    assert response.status_code == 200
    assert response.json() == {"success": True, "data": []}


async def test_create_school_when_database_fails(
    client: TestClient,
    mocker: MockerFixture,
    empty_directory: None,
) -> None:
    error = OperationalError(
        "INSERT INTO school_directory",
        {},
        Exception("database is locked"),
    )
    mocker.patch(
        "app.modules.schools.cruds_schools.create_school",
        side_effect=error,
    )

    response = client.post("/api/addschool", json=OAK_HALL)
    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "message": "Failed to add school",
        "error": str(error),
    }
    assert await count_schools() == 0


async def test_list_when_database_fails(
    client: TestClient,
    mocker: MockerFixture,
    empty_directory: None,
) -> None:
    assert client.post("/api/addschool", json=OAK_HALL).status_code == 200

    error = OperationalError(
        "SELECT school_directory.ordering_number",
        {},
        Exception("unable to open database file"),
    )
    mocker.patch(
        "app.modules.schools.cruds_schools.get_schools",
        side_effect=error,
    )

    response = client.get("/api/getschools")
    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "message": "Failed to fetch schools",
        "error": str(error),
    }
