"""Timeout-guarded external command execution.

Callers get a ``CommandResult`` back and never touch the process handle.
A process that outlives its budget is killed and reported as timed out.
"""

import asyncio
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one external command run."""

    returncode: int
    stdout: str
    stderr: str
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out


class CommandRunner:
    """Runs an executable with arguments under a wall-clock timeout."""

    def __init__(self, executable: str) -> None:
        self.executable = executable

    async def run(self, args: list[str], timeout_seconds: float) -> CommandResult:
        """Run the executable and capture its output.

        A missing executable or any other spawn failure is reported as a failed
        result (returncode -1) carrying the OS error text, not raised.
        """
        try:
            proc = await asyncio.create_subprocess_exec(
                self.executable,
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            logger.warning("Failed to start %s: %s", self.executable, exc)
            return CommandResult(returncode=-1, stdout="", stderr=str(exc))

        try:
            async with asyncio.timeout(timeout_seconds):
                stdout, stderr = await proc.communicate()
        except TimeoutError:
            logger.warning("%s exceeded %.0fs, killing", self.executable, timeout_seconds)
            await _kill(proc)
            return CommandResult(returncode=-1, stdout="", stderr="Timeout", timed_out=True)
        except asyncio.CancelledError:
            await _kill(proc)
            raise

        return CommandResult(
            returncode=proc.returncode if proc.returncode is not None else 1,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
        )

    async def version(self) -> str | None:
        """Return ``<executable> --version`` output, or None if it cannot run."""
        result = await self.run(["--version"], timeout_seconds=10.0)
        return result.stdout.strip() if result.ok else None


async def _kill(proc: asyncio.subprocess.Process) -> None:
    """Kill a still-running process and reap it."""
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
        await proc.wait()
