"""Dual-handler logging setup: JSON rotating file + human-readable console.

Call setup_logging() once at application startup. Library modules only
ever use logging.getLogger(__name__) and never configure handlers, so
applications embedding the ingestion pipeline keep control of output.

Records are tagged with the document being processed. Wrap one
extraction in ``document_context(name)`` and every record emitted inside
it, including those from ``asyncio.to_thread`` workers (which copy the
caller's context), carries ``document=name``; outside it the field is
``None``.
"""

import contextvars
import logging
import logging.handlers
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from pythonjsonlogger.core import RESERVED_ATTRS
from pythonjsonlogger.json import JsonFormatter

LOG_FILE_NAME = "pdfquiz.log"

_current_document: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "pdfquiz_document", default=None
)


class DocumentContextFilter(logging.Filter):
    """Stamp each record with the document of the current extraction."""

    def filter(self, record: logging.LogRecord) -> bool:
        document = _current_document.get()
        record.document = document
        record.document_tag = f" [{document}]" if document else ""
        return True


@contextmanager
def document_context(name: str) -> Iterator[None]:
    """Tag log records emitted inside the block with ``document=name``."""
    token = _current_document.set(name)
    try:
        yield
    finally:
        _current_document.reset(token)


def setup_logging(
    log_dir: str = "logs",
    log_level_file: int = logging.DEBUG,
    log_level_console: int = logging.INFO,
    max_bytes: int = 10_485_760,  # 10MB
    backup_count: int = 5,
) -> Path:
    """Configure dual-handler logging: JSON file + text console.

    Creates the log directory if it does not exist. Clears any existing
    handlers on the root logger so repeated calls do not duplicate output.

    Args:
        log_dir: Directory for log files.
        log_level_file: Logging level for the file handler (default DEBUG).
        log_level_console: Logging level for the console handler (default INFO).
        max_bytes: Maximum size per log file before rotation (default 10MB).
        backup_count: Number of rotated backup files to keep (default 5).

    Returns:
        Path of the JSON log file.
    """
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    log_file = log_path / LOG_FILE_NAME

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Capture everything; handlers filter
    root_logger.handlers.clear()

    context_filter = DocumentContextFilter()

    # --- File handler: JSON lines, one "document" field per record ---
    file_handler = logging.handlers.RotatingFileHandler(
        filename=str(log_file),
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    file_handler.setLevel(log_level_file)
    file_handler.addFilter(context_filter)
    file_handler.setFormatter(
        JsonFormatter(
            fmt="%(asctime)s %(name)s %(levelname)s %(document)s %(message)s",
            rename_fields={
                "asctime": "timestamp",
                "levelname": "level",
                "name": "component",
            },
            datefmt="%Y-%m-%dT%H:%M:%S",
            # document_tag is console-only decoration
            reserved_attrs=[*RESERVED_ATTRS, "document_tag"],
        )
    )

    # --- Console handler: text, document name only when set ---
    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level_console)
    console_handler.addFilter(context_filter)
    console_handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-8s] %(name)s%(document_tag)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)
    return log_file
