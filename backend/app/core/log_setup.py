# backend/app/core/log_setup.py
import logging

from backend.app.core.config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str = LOG_LEVEL) -> int:
    """
    Configures root logging once for the collector process.
    Returns the numeric level actually applied (unknown names fall back to INFO).
    """
    numeric_level = logging.getLevelName(str(level).upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logging.basicConfig(
        level=numeric_level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler()],
        force=True,
    )
    # requests/urllib3 are chatty at DEBUG
    logging.getLogger("urllib3").setLevel(max(numeric_level, logging.WARNING))
    return numeric_level
