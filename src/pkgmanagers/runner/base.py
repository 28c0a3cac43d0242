"""Runner protocol -- executes one argument vector and captures its output."""

from __future__ import annotations

from typing import Protocol

from pkgmanagers.models import Result


class Runner(Protocol):
    """Protocol for command execution.

    Implementations return a Result for any process that ran, whatever its
    exit code, and raise only when nothing could be executed.
    """

    async def run(self, directory: str, args: list[str]) -> Result:
        """Run ``args`` in ``directory``."""
        ...
