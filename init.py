import logging

from app.app import init_db
from app.core.utils.config import construct_prod_settings
from app.core.utils.log import LogConfig

# Create or migrate the database tables before starting uvicorn.
# The production settings are built directly: `get_settings()` is cached and reads the environment only once
settings = construct_prod_settings()

LogConfig().initialize_loggers(settings=settings)

directory_error_logger = logging.getLogger("directory.error")

directory_error_logger.warning(
    "Starting Uvicorn server and initializing the database.",
)

init_db(
    settings=settings,
    directory_error_logger=directory_error_logger,
    drop_db=False,
)
