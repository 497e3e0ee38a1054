"""
Progress reporting for store operations.

ConversationStore reports what it backs up, deletes and repairs through a
LoggerProtocol. The CLI passes a CLILogger; library callers get
StdlibLogger, which forwards to the `logging` module.
"""

from __future__ import annotations

import logging
from typing import Protocol


class LoggerProtocol(Protocol):
    """Async sink for user-facing progress messages."""

    async def info(self, message: str) -> None: ...
    async def warning(self, message: str) -> None: ...
    async def error(self, message: str) -> None: ...


class StdlibLogger:
    """LoggerProtocol over a standard library logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger('conversation_manager')

    async def info(self, message: str) -> None:
        self.logger.info(message)

    async def warning(self, message: str) -> None:
        self.logger.warning(message)

    async def error(self, message: str) -> None:
        self.logger.error(message)
