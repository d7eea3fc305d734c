"""Rich logging integration for maketorrent.

Provides the Rich console handler used for terminal output and a formatter
that strips Rich markup from records written to log files.
"""

from __future__ import annotations

import logging
import re
import sys
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

_MARKUP_PATTERN = re.compile(r"\[/?[^\]]+\]")


class CorrelationRichHandler(RichHandler):
    """RichHandler that tags each record with the current correlation ID.

    The calling function name is prefixed to the message in pink so piece
    progress lines can be traced back to the component that emitted them.
    """

    def __init__(
        self,
        *args: Any,
        console: Console | None = None,
        show_colors: bool = True,
        **kwargs: Any,
    ) -> None:
        """Initialize RichHandler with markup enabled.

        Args:
            *args: Positional arguments for RichHandler
            console: Optional Rich Console instance (defaults to stderr)
            show_colors: Whether to prefix messages with the colored function name
            **kwargs: Keyword arguments for RichHandler

        """
        if console is None:
            console = Console(file=sys.stderr, markup=True)
        self.show_colors = show_colors
        kwargs.setdefault("markup", True)
        super().__init__(*args, console=console, **kwargs)

    def emit(self, record: logging.LogRecord) -> None:
        """Emit a log record with correlation ID and function name coloring."""
        try:
            if not hasattr(record, "correlation_id"):
                from maketorrent.utils.logging_config import get_correlation_id

                record.correlation_id = get_correlation_id() or "no-correlation-id"

            if self.show_colors and record.funcName:
                message = escape(record.getMessage())
                # Other handlers still need the original message
                record = logging.makeLogRecord(record.__dict__)
                record.msg = f"[#ff69b4]{record.funcName}[/#ff69b4] {message}"
                record.args = ()

            super().emit(record)
        except Exception:
            self.handleError(record)


def strip_rich_markup(text: str) -> str:
    """Strip Rich markup from text for file logging.

    Args:
        text: Text with Rich markup

    Returns:
        Text without Rich markup

    """
    return _MARKUP_PATTERN.sub("", text)


class FileFormatter(logging.Formatter):
    """Formatter for file output that strips Rich markup."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record, stripping Rich markup for file output."""
        return strip_rich_markup(super().format(record))


def create_rich_handler(
    console: Console | None = None,
    level: int | str = logging.INFO,
    show_path: bool = False,
    rich_tracebacks: bool = True,
    show_colors: bool = True,
) -> logging.Handler:
    """Create a RichHandler with correlation ID support.

    Args:
        console: Optional Rich Console instance
        level: Log level
        show_path: Whether to show file paths in log output
        rich_tracebacks: Whether to use rich tracebacks
        show_colors: Whether to color the function name prefix

    Returns:
        Configured RichHandler instance

    """
    handler = CorrelationRichHandler(
        console=console,
        show_colors=show_colors,
        show_path=show_path,
        rich_tracebacks=rich_tracebacks,
    )
    handler.setLevel(level)
    return handler
