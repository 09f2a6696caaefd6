from sqlalchemy import Connection, MetaData
from sqlalchemy.engine import Engine, create_engine

from app.core.utils.config import Settings
from app.types.sqlalchemy import Base

# These utils are used at startup to run database initializations & migrations


def get_sync_database_url(settings: Settings) -> str:
    if settings.SQLITE_DB:
        return f"sqlite:///./{settings.SQLITE_DB}"
    return f"postgresql+psycopg://{settings.POSTGRES_USER}:{settings.POSTGRES_PASSWORD}@{settings.POSTGRES_HOST}/{settings.POSTGRES_DB}"


def get_sync_db_engine(settings: Settings) -> Engine:
    """
    Create a synchronous database engine
    """
    return create_engine(get_sync_database_url(settings), echo=settings.DATABASE_DEBUG)


def drop_db_sync(conn: Connection):
    """
    Drop all tables in the database
    """
    # All tables should be dropped, including the alembic_version table
    # or the application will think that the database is up to date and will not initialize it
    # when running tests a second time.

    # `Base.metadata.drop_all(conn)` is only able to drop tables that are defined in models
    # Thus we construct a metadata object that reflects the database instead of only using models
    my_metadata: MetaData = MetaData(schema=Base.metadata.schema)
    my_metadata.reflect(bind=conn, resolve_fks=False)
    my_metadata.drop_all(bind=conn)
