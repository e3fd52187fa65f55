import os
import sys

from loguru import logger


def configure_logging(level: str | None = None, *, service: str = "fieldgate-core", env: str = "dev") -> None:
    """
    Structured JSON logs on stdout.

    Every record carries `service` and `env`; engine calls add their own
    `extra={...}` (mission_id, entry_id, undo/redo depths).
    """
    logger.remove()
    logger.configure(extra={"service": service, "env": env})

    logger.add(
        sys.stdout,
        level=(level or os.getenv("FG_LOG_LEVEL", "INFO")).upper(),
        serialize=True,
        backtrace=False,
        diagnose=False,
    )
