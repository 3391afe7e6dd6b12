# app/services/build.py
"""Runs the static content build after the markup directory changes.

Only one build process runs at a time: callers arriving while a build is in
flight await that same build instead of starting another one.
"""
from __future__ import annotations

import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Awaitable, Callable, Optional, Sequence

from app.config import (
    BUILD_ARGS,
    BUILD_CWD,
    BUILD_RUNNER,
    BUILD_TOOL,
    CONTENT_AUTO_BUILD,
    IS_PRODUCTION,
)
from app.exceptions import BuildError, BuildToolMissing

logger = logging.getLogger(__name__)

IS_WINDOWS = sys.platform == "win32"

OUTPUT_CHUNK = 64 * 1024
MAX_LOGGED_LINE = 4000

Runner = Callable[[Sequence[str]], Awaitable[None]]


class BuildCoordinator:
    def __init__(
        self,
        *,
        enabled: bool = CONTENT_AUTO_BUILD,
        strict: bool = not IS_PRODUCTION,
        tool: str = BUILD_TOOL,
        args: Sequence[str] = BUILD_ARGS,
        runner_prefix: Sequence[str] = BUILD_RUNNER,
        cwd: Path | str = BUILD_CWD,
        run_command: Optional[Runner] = None,
    ):
        self.enabled = enabled
        self.strict = strict
        self.tool = tool
        self.args = tuple(args)
        self.runner_prefix = tuple(runner_prefix)
        self.cwd = Path(cwd)
        self._run_command = run_command or self._spawn
        self._pending: Optional[asyncio.Future] = None

    @property
    def in_flight(self) -> bool:
        return self._pending is not None

    def resolve_command(self) -> list[str]:
        """Local executable when installed, else the package runner (checked per build)."""
        local = self.cwd / "node_modules" / ".bin" / (f"{self.tool}.cmd" if IS_WINDOWS else self.tool)
        if local.is_file() and os.access(local, os.X_OK):
            return [str(local), *self.args]
        runner = list(self.runner_prefix)
        if runner and IS_WINDOWS and not runner[0].lower().endswith(".cmd"):
            runner[0] = f"{runner[0]}.cmd"
        logger.info("[%s] local executable not found, falling back to %s", self.tool, " ".join(runner) or "PATH")
        return [*runner, self.tool, *self.args]

    async def trigger(self) -> None:
        if not self.enabled:
            return
        if self._pending is None:
            self._pending = asyncio.ensure_future(self._build())
            self._pending.add_done_callback(self._clear)
        # A caller that goes away must not cancel the build for everyone else
        await asyncio.shield(self._pending)

    def _clear(self, fut: asyncio.Future) -> None:
        if self._pending is fut:
            self._pending = None
        if not fut.cancelled():
            # Mark as retrieved; every awaiting caller already receives it
            fut.exception()

    async def _build(self) -> None:
        try:
            await self._run_command(self.resolve_command())
        except Exception as e:
            error = e if isinstance(e, BuildError) else BuildError(f"{self.tool} build crashed: {e}")
            if isinstance(error, BuildToolMissing):
                logger.error("[%s] build command not found; is it installed?", self.tool)
            if self.strict:
                logger.error("[%s] rebuild failed: %s", self.tool, error)
                if error is e:
                    raise
                raise error from e
            logger.warning("[%s] ignoring rebuild failure: %s", self.tool, error)

    def _log_line(self, raw: bytes, level: int) -> None:
        line = raw.decode("utf-8", errors="replace").rstrip()
        if len(line) > MAX_LOGGED_LINE:
            line = f"{line[:MAX_LOGGED_LINE]} ... ({len(line) - MAX_LOGGED_LINE} more characters)"
        if line:
            logger.log(level, "[%s] %s", self.tool, line)

    async def _pump(self, stream: Optional[asyncio.StreamReader], level: int) -> None:
        # Chunked reads: a single output line may be far longer than the reader's line limit
        if stream is None:
            return
        pending = b""
        while True:
            chunk = await stream.read(OUTPUT_CHUNK)
            if not chunk:
                break
            *lines, pending = (pending + chunk).split(b"\n")
            for raw in lines:
                self._log_line(raw, level)
            if len(pending) > OUTPUT_CHUNK:
                self._log_line(pending, level)
                pending = b""
        if pending:
            self._log_line(pending, level)

    async def _spawn(self, command: Sequence[str]) -> None:
        logger.info("[%s] running %s", self.tool, " ".join(command))
        try:
            proc = await asyncio.create_subprocess_exec(
                *command,
                cwd=str(self.cwd),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise BuildToolMissing(f"{command[0]}: {e}") from e
        except OSError as e:
            raise BuildError(f"Could not start {command[0]}: {e}") from e

        try:
            await asyncio.gather(
                self._pump(proc.stdout, logging.INFO),
                self._pump(proc.stderr, logging.WARNING),
            )
        except Exception as e:
            if proc.returncode is None:
                proc.kill()
            raise BuildError(f"Reading output of {command[0]} failed: {e}") from e
        finally:
            returncode = await proc.wait()
        if returncode != 0:
            raise BuildError(f"{' '.join(command)} exited with status {returncode}", returncode=returncode)
        logger.info("[%s] rebuild finished", self.tool)
