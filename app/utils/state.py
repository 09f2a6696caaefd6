import logging
from typing import TypedDict

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.core.utils.config import Settings
from app.types.image_host import ImageHost, LocalImageHost, S3ImageHost
from app.types.sqlalchemy import SessionLocalType


class LifespanState(TypedDict):
    """
    The LifespanState is built once during the application startup and is yielded by the lifespan.
    Starlette then copies it in each request state. Use dependencies to access it.
    """

    # Database engine
    engine: AsyncEngine
    # Database session creator
    SessionLocal: SessionLocalType
    # Media host used to store school images
    image_host: ImageHost


class RuntimeLifespanState(LifespanState):
    """
    Requests contains an extended version of the LifespanState for each request.
    """

    request_id: str


def get_database_url(settings: Settings) -> str:
    if settings.SQLITE_DB:
        return f"sqlite+aiosqlite:///./{settings.SQLITE_DB}"
    return f"postgresql+asyncpg://{settings.POSTGRES_USER}:{settings.POSTGRES_PASSWORD}@{settings.POSTGRES_HOST}/{settings.POSTGRES_DB}"


def init_engine(settings: Settings) -> AsyncEngine:
    """
    Return the (asynchronous) database engine, based on the settings
    """

    return create_async_engine(
        get_database_url(settings),
        echo=settings.DATABASE_DEBUG,
    )


def init_SessionLocal(engine: AsyncEngine) -> SessionLocalType:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


def init_image_host(
    settings: Settings,
    directory_error_logger: logging.Logger,
) -> ImageHost:
    """
    Return the S3 image host if a bucket is configured, otherwise images are kept on the local disk.
    """
    # `Settings.check_s3_settings` guarantees the credentials are set along with the bucket
    if settings.USE_S3_IMAGE_HOST:
        return S3ImageHost(
            s3_bucket_name=settings.S3_BUCKET_NAME,  # type: ignore[arg-type]
            s3_access_key_id=settings.S3_ACCESS_KEY_ID,  # type: ignore[arg-type]
            s3_secret_access_key=settings.S3_SECRET_ACCESS_KEY,  # type: ignore[arg-type]
            folder=settings.S3_FOLDER,
            s3_region=settings.S3_REGION,
            s3_endpoint_url=settings.S3_ENDPOINT_URL,
            public_base_url=settings.S3_PUBLIC_BASE_URL,
        )

    directory_error_logger.warning(
        "S3 is not configured, school images will be stored in the data folder",
    )
    return LocalImageHost(client_url=settings.CLIENT_URL)


async def disconnect_engine(engine: AsyncEngine) -> None:
    await engine.dispose()
