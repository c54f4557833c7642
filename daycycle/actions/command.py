from __future__ import annotations

import logging
import shlex
import subprocess

from daycycle.errors import CallbackFailure

logger = logging.getLogger(__name__)


class CommandAction:
    """Run an external command, e.g. to switch a desktop theme.

    The command is split with ``shlex`` and run without a shell. It blocks the
    event loop until it exits, so it should be short.
    """

    kind = "command"

    def __init__(self, command: str, timeout: float | None = None) -> None:
        self.argv = shlex.split(command)
        if not self.argv:
            raise ValueError("command must not be empty")
        self._timeout = timeout

    def __call__(self) -> None:
        logger.debug("Running %s", self.argv)
        try:
            result = subprocess.run(
                self.argv,
                capture_output=True,
                text=True,
                timeout=self._timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise CallbackFailure(
                f"{self.argv[0]} timed out after {self._timeout}s"
            ) from exc
        except OSError as exc:
            raise CallbackFailure(f"{self.argv[0]} could not be started: {exc}") from exc

        if result.returncode != 0:
            raise CallbackFailure(
                f"{self.argv[0]} exited with {result.returncode}: "
                f"{result.stderr.strip()}"
            )

    def __repr__(self) -> str:
        return f"CommandAction({shlex.join(self.argv)!r})"
