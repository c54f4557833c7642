from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class LogAction:
    kind = "log"

    def __init__(self, message: str, level: str = "INFO") -> None:
        self.message = message
        self._level = logging.getLevelName(level.upper())
        if not isinstance(self._level, int):
            raise ValueError(f"unknown log level: {level!r}")

    def __call__(self) -> None:
        logger.log(self._level, "%s", self.message)

    def __repr__(self) -> str:
        return f"LogAction({self.message!r})"
