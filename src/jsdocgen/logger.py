import logging
import sys
from typing import Optional

import structlog

structlog.configure(
    wrapper_class=structlog.make_filtering_bound_logger(logging.NOTSET),
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
    processors=[
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", utc=False),
        structlog.dev.ConsoleRenderer(),
    ],
)

# Records from "jsdocgen" are filtered by whatever level the root logger has.
_std_logger = logging.getLogger("jsdocgen")
_std_logger.setLevel(logging.NOTSET)
_std_logger.propagate = True

logger: structlog.BoundLogger = structlog.get_logger("jsdocgen")


def setup_stderr_logging(level: int) -> None:
    """Route jsdocgen events to stderr at *level*, reusing existing root handlers."""
    root = logging.getLogger()
    root.setLevel(level)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        # structlog already renders the event line
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
    for handler in root.handlers:
        handler.setLevel(level)


def declaration_logger(line: int, name: Optional[str] = None) -> structlog.BoundLogger:
    """Logger bound to a declaration; *line* is zero-based and reported one-based."""
    return logger.bind(line=line + 1, name=name)
