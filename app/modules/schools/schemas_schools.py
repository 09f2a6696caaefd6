from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.types.standard_responses import Result


class SchoolBase(BaseModel):
    """Required fields of a school registration"""

    name: str
    address: str
    city: str
    state: str
    contact: str
    email: str


class SchoolSubmission(BaseModel):
    """
    Canonical form of a registration, whatever the encoding of the request was.

    Fields are optional here: their presence is checked afterwards so that a missing field can be reported as such.
    `image` is an url provided by the client, `image_file` the content of an uploaded file.
    """

    model_config = ConfigDict(strict=True)

    name: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    contact: str | None = None
    email: str | None = None
    image: str | None = None
    image_file: bytes | None = None
    image_content_type: str | None = None


class School(SchoolBase):
    model_config = ConfigDict(populate_by_name=True)

    ordering_number: int = Field(alias="orderingNumber")
    id: UUID
    image: str


class SchoolList(Result):
    data: list[School]
