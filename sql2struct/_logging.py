"""
Package logger for sql2struct.

Everything logs under the "sql2struct" logger, which carries a
NullHandler so library callers see nothing unless they opt in.

- WARNING: a column whose SQL type has no mapping, or a backtick
  definition the extractor had to skip (line, reason, source text).
- INFO: one summary per parsed table, and the path of each written
  template.
- DEBUG: the table name found and every column as it resolves.

The CLI shows warnings by default and everything with -v. Other callers
use configure_logging() or attach their own handler.
"""
import logging
from typing import Optional

logger = logging.getLogger("sql2struct")
logger.addHandler(logging.NullHandler())


def configure_logging(
    level: int = logging.INFO,
    format: Optional[str] = None,
    handler: Optional[logging.Handler] = None,
) -> None:
    """
    Configure logging for sql2struct.

    Args:
        level: Logging level (default: INFO)
        format: Log format string (default: "[%(levelname)s] sql2struct: %(message)s")
        handler: Custom handler (default: StreamHandler to stderr)
    """
    pkg_logger = logging.getLogger("sql2struct")
    pkg_logger.setLevel(level)

    for h in pkg_logger.handlers[:]:
        if not isinstance(h, logging.NullHandler):
            pkg_logger.removeHandler(h)

    if handler is None:
        handler = logging.StreamHandler()
        if format is None:
            format = "[%(levelname)s] sql2struct: %(message)s"
        handler.setFormatter(logging.Formatter(format))

    pkg_logger.addHandler(handler)
