"""Logging setup for the query assembler.

Records may carry a ``context`` mapping (attached by ``ContextLoggerAdapter``,
e.g. the data source a query ran on). Both formatters render it: the JSON
formatter as top-level keys, the text formatter as a ``[key=value]`` suffix.
"""

import logging
import sys
import json
from typing import Any, Dict, List, MutableMapping, Optional, Tuple
from datetime import datetime, timezone

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _record_context(record: logging.LogRecord) -> Dict[str, Any]:
    return getattr(record, "context", None) or {}


class StructuredFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        entry.update(_record_context(record))
        # bound values such as dates or UUIDs are not JSON types
        return json.dumps(entry, default=str)


class StandardFormatter(logging.Formatter):
    """Human-readable lines with the record context appended."""

    def __init__(self):
        super().__init__(fmt=TEXT_FORMAT, datefmt=DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = _record_context(record)
        if not context:
            return line
        pairs = " ".join(f"{key}={value}" for key, value in context.items())
        return f"{line} [{pairs}]"


def setup_logging(
    level: str = "INFO",
    structured: bool = False,
    log_file: Optional[str] = None,
) -> None:
    """Configure the root logger, replacing any previous handlers.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR)
        structured: Emit JSON lines instead of text
        log_file: Also write records to this file
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    formatter = StructuredFormatter() if structured else StandardFormatter()

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(log_level)

    logging.basicConfig(level=log_level, handlers=handlers, force=True)
    logging.getLogger("psycopg2").setLevel(logging.WARNING)


class ContextLoggerAdapter(logging.LoggerAdapter):
    """Adds a fixed context mapping to every record it logs.

    Context passed per call through ``extra={"context": {...}}`` is merged
    over the adapter's own.
    """

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        extra["context"] = {**self.extra, **(extra.get("context") or {})}
        kwargs["extra"] = extra
        return msg, kwargs


def get_contextual_logger(name: str, context: Dict[str, Any]) -> ContextLoggerAdapter:
    """Logger for ``name`` whose records carry ``context``.

    Example:
        >>> logger = get_contextual_logger(__name__, {"datasource": "shop"})
        >>> logger.debug("Running select 1")  # record.context == {"datasource": "shop"}
    """
    return ContextLoggerAdapter(logging.getLogger(name), dict(context))
