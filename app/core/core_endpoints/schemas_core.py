"""Schemas of the core endpoints"""

from pydantic import BaseModel

from app.types.standard_responses import Result


class CoreInformation(BaseModel):
    """Information about the school directory"""

    ready: bool
    version: str


class DatabaseCheckRow(BaseModel):
    result: int


class DatabaseCheck(Result):
    data: list[DatabaseCheckRow]
