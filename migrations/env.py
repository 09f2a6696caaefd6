import asyncio
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncConnection

from app.dependencies import get_settings
from app.types.sqlalchemy import Base
from app.utils.state import init_engine

config = context.config

if config.config_file_name is not None:
    # Existing loggers, including the directory ones, must stay enabled
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = Base.metadata

# Models must be imported for autogenerate to see their tables
for models_file in Path().glob("app/**/models_*.py"):
    __import__(".".join(models_file.with_suffix("").parts))


def run_migrations_offline() -> None:
    """
    Emit the migrations as SQL to the script output, without a database connection
    """
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        user_module_prefix="",
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations(connection: AsyncConnection) -> None:
    # Alembic can not inspect an AsyncConnection, the migration must run in `run_sync`
    # See https://alembic.sqlalchemy.org/en/latest/cookbook.html#programmatic-api-use-connection-sharing-with-asyncio
    await connection.run_sync(do_run_migrations)


async def run_cli_migrations() -> None:
    """
    Alembic was invoked from the command line: migrate the database of the production settings
    """
    engine = init_engine(get_settings())

    async with engine.connect() as connection:
        await run_async_migrations(connection)
    await engine.dispose()


def run_migrations_online() -> None:
    """
    The application passes its own connection in `config.attributes["connection"]` (see `app.app.get_alembic_config`).
    Without one, we assume Alembic was invoked from the command line.

    See https://alembic.sqlalchemy.org/en/latest/cookbook.html#connection-sharing
    """

    connection: None | Connection | AsyncConnection = config.attributes.get(
        "connection",
        None,
    )

    if connection is None:
        asyncio.run(run_cli_migrations())
    elif isinstance(connection, AsyncConnection):
        asyncio.run(run_async_migrations(connection))
    elif isinstance(connection, Connection):
        do_run_migrations(connection)
    else:
        raise TypeError(  # noqa: TRY003
            f"A Connection or an AsyncConnection is required, got a {type(connection)}",
        )


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
