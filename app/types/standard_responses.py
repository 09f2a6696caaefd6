from pydantic import BaseModel


class Result(BaseModel):
    success: bool = True


class MessageResult(Result):
    message: str


class ErrorResult(BaseModel):
    """
    Body returned by the directory endpoints when a request could not be processed.

    `message` is a human readable explanation, `error` carries the underlying failure message.
    """

    success: bool = False
    message: str | None = None
    error: str | None = None
