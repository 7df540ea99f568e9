# agribiz/core/logging.py
# -----------------------------------------------------------------------------
# Loguru based logging setup
# - rotating file sink with backtrace, plus stderr for local runs
# - called once from the FastAPI startup hook
# -----------------------------------------------------------------------------
import sys
from pathlib import Path

from loguru import logger

from agribiz.core.config import settings


def setup_logging(log_dir: str | None = None, level: str | None = None) -> Path:
    """Install the file and stderr sinks. Returns the log file path."""
    directory = Path(log_dir or settings.LOG_DIR)
    directory.mkdir(exist_ok=True, parents=True)
    level = level or settings.LOG_LEVEL
    log_file = directory / "app.log"

    logger.remove()  # drop the default handler
    logger.add(sys.stderr, level=level)
    logger.add(
        log_file,
        rotation="10 MB",
        retention=10,  # keep the ten newest rotated files
        enqueue=True,  # safe across worker processes
        backtrace=True,
        diagnose=settings.ENV == "dev",
        level=level,
    )
    return log_file
