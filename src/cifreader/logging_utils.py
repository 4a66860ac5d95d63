# logging_utils.py
import logging
import sys
from typing import IO, Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level: str = "INFO", stream: Optional[IO[str]] = None) -> None:
    """
    Configure root logging with a single stream handler.

    Args:
        level: Log level name (e.g., INFO, DEBUG); unknown names fall back to INFO.
        stream: Optional stream to write logs to; defaults to stderr so that
            printed commands on stdout stay clean.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    if not isinstance(log_level, int):
        log_level = logging.INFO
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.basicConfig(level=log_level, handlers=[handler], force=True)
