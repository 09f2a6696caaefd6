import logging
import multiprocessing
import os

from app.app import init_db
from app.core.utils.config import construct_prod_settings
from app.core.utils.log import LogConfig

# Gunicorn configuration, used with `gunicorn app.main:app -k uvicorn.workers.UvicornWorker -c gunicorn.conf.py`
# The `on_starting` hook creates or migrates the database once, before the workers are forked

bind = os.getenv("BIND", f"{os.getenv('HOST', '0.0.0.0')}:{os.getenv('PORT', '80')}")  # noqa: S104
loglevel = os.getenv("LOG_LEVEL", "info")

if os.getenv("WEB_CONCURRENCY"):
    workers = int(os.environ["WEB_CONCURRENCY"])
else:
    workers = max(
        int(float(os.getenv("WORKERS_PER_CORE", "1")) * multiprocessing.cpu_count()),
        2,
    )
    if os.getenv("MAX_WORKERS"):
        workers = min(workers, int(os.environ["MAX_WORKERS"]))

accesslog = os.getenv("ACCESS_LOG", "-") or None
errorlog = os.getenv("ERROR_LOG", "-") or None
worker_tmp_dir = "/dev/shm"  # noqa: S108
graceful_timeout = int(os.getenv("GRACEFUL_TIMEOUT", "120"))
timeout = int(os.getenv("TIMEOUT", "120"))
keepalive = int(os.getenv("KEEP_ALIVE", "5"))


def on_starting(server) -> None:
    """
    Called just before the master process is initialized.

    See https://docs.gunicorn.org/en/stable/settings.html#on-starting
    """
    settings = construct_prod_settings()

    # Workers must not initialize the database again
    os.environ["DIRECTORY_INIT_DB"] = "False"

    LogConfig().initialize_loggers(settings=settings)

    directory_error_logger = logging.getLogger("directory.error")

    directory_error_logger.warning(
        "Starting Gunicorn server and initializing the database.",
    )

    init_db(
        settings=settings,
        directory_error_logger=directory_error_logger,
        drop_db=False,
    )
