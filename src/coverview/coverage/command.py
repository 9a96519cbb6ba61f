"""Running a root's coverage command."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Protocol

import structlog

from coverview.core.errors import CommandError

logger = structlog.get_logger()


class CommandRunner(Protocol):
    async def run(self, command: str, cwd: Path) -> str:
        """Run ``command`` in ``cwd`` and return its standard output.

        Raises:
            CommandError: If the command exits unsuccessfully.
        """
        ...


class ShellCommandRunner:
    """Runs commands through the platform shell."""

    async def run(self, command: str, cwd: Path) -> str:
        logger.info("coverage_command_started", command=command, cwd=str(cwd))
        proc = await asyncio.create_subprocess_shell(
            command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=cwd,
        )
        try:
            stdout_bytes, stderr_bytes = await proc.communicate()
        except asyncio.CancelledError:
            proc.kill()
            await proc.wait()
            logger.info("coverage_command_cancelled", command=command)
            raise
        stdout = stdout_bytes.decode(errors="replace")
        stderr = stderr_bytes.decode(errors="replace")

        if proc.returncode != 0:
            logger.error(
                "coverage_command_failed",
                command=command,
                returncode=proc.returncode,
                stderr=stderr,
            )
            raise CommandError.failed(command, proc.returncode, stderr)

        logger.info("coverage_command_finished", command=command)
        return stdout
