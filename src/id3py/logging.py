"""Logging utilities for id3py.

id3py logs through loguru.  The ``id3py`` namespace is disabled when the
package is imported, so nothing is emitted unless the application calls
``logger.enable("id3py")`` itself or uses :func:`enable_logging`.
"""

from __future__ import annotations

import contextlib
import sys
import threading
from typing import TYPE_CHECKING, Any, ClassVar, Final, Literal

from loguru import logger

if TYPE_CHECKING:
    from types import TracebackType

PACKAGE_NAME: Final[str] = __name__.split(".")[0]

LogLevel = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_SHORT_FORMAT: Final[str] = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {function} - {message}"


class LoggingHandle:
    """Handle for an id3py log handler added by :func:`enable_logging`.

    Call :meth:`disable` or use the handle as a context manager to remove the
    handler.  When the last active handle goes away the ``id3py`` namespace is
    disabled again.
    """

    _active_ids: ClassVar[set[int]] = set()
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self, handler_id: int) -> None:
        self.handler_id: int | None = handler_id
        with LoggingHandle._lock:
            LoggingHandle._active_ids.add(handler_id)

    def disable(self) -> None:
        """Remove the handler; calling it twice is a no-op."""
        with LoggingHandle._lock:
            if self.handler_id is None:
                return
            LoggingHandle._active_ids.discard(self.handler_id)
            with contextlib.suppress(ValueError):
                logger.remove(self.handler_id)
            self.handler_id = None
            if not LoggingHandle._active_ids:
                logger.disable(PACKAGE_NAME)

    def __enter__(self) -> LoggingHandle:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.disable()


def enable_logging(*, level: LogLevel = "INFO", sink: Any = None) -> LoggingHandle:
    """
    Enable id3py log output.

    Parameters
    ----------
    level : LogLevel, default="INFO"
        Minimum level to emit.  Use "DEBUG" to follow every split and leaf
        created while a tree is built.
    sink : loguru sink or None, default=None
        Where records go.  Defaults to ``sys.stderr``.

    Returns
    -------
    LoggingHandle
        Handle that removes the handler again.

    Examples
    --------
    >>> with enable_logging(level="DEBUG"):  # doctest: +SKIP
    ...     DecisionTreeModel(dataset, labels)
    """
    logger.enable(PACKAGE_NAME)
    handler_id = logger.add(
        sys.stderr if sink is None else sink,
        level=level,
        format=_SHORT_FORMAT,
        filter=PACKAGE_NAME,
    )
    return LoggingHandle(handler_id)
