"""Safe async subprocess execution for package-manager commands."""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import time

from pkgmanagers.errors import CommandNotFoundError, NoCommandError
from pkgmanagers.models import ExecContext, Result

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 300.0


class ExecRunner:
    """Runs commands with asyncio subprocesses.

    Uses asyncio.create_subprocess_exec -- never a shell.
    Uses start_new_session=True so child processes can be killed as a group.
    Output is returned in full: extraction rules may need all of it.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        env: dict[str, str] | None = None,
        context: ExecContext = ExecContext.PROJECT,
    ) -> None:
        self.timeout = timeout
        self.env = env
        self.context = context

    async def run(self, directory: str, args: list[str]) -> Result:
        if not args:
            raise NoCommandError()

        logger.info("Running %s in %s", " ".join(args), directory or ".")
        start = time.monotonic()
        try:
            proc = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=directory or None,
                env=self.env,
                start_new_session=True,
            )
        except FileNotFoundError as exc:
            raise CommandNotFoundError(args[0]) from exc

        try:
            stdout_bytes, stderr_bytes = await asyncio.wait_for(
                proc.communicate(), timeout=self.timeout
            )
        except TimeoutError:
            try:
                os.killpg(os.getpgid(proc.pid), signal.SIGKILL)
            except (ProcessLookupError, OSError):
                proc.kill()
            await proc.wait()
            logger.warning("Command timed out after %ss: %s", self.timeout, " ".join(args))
            return Result(
                command=list(args),
                stderr=f"Command timed out after {self.timeout}s",
                exit_code=-1,
                duration=time.monotonic() - start,
                cwd=directory,
                context=self.context,
            )

        return Result(
            command=list(args),
            stdout=stdout_bytes.decode(errors="replace"),
            stderr=stderr_bytes.decode(errors="replace"),
            exit_code=proc.returncode or 0,
            duration=time.monotonic() - start,
            cwd=directory,
            context=self.context,
        )
