"""Subprocess helpers shared by the health probe and recovery actions."""

from __future__ import annotations

import asyncio
import contextlib

MAX_OUTPUT_BYTES = 5 * 1024 * 1024
READ_CHUNK_SIZE = 64 * 1024


class OutputLimitExceeded(Exception):
    """Raised when a child process writes more than the allowed output."""

    def __init__(self, limit: int) -> None:
        super().__init__(f"output exceeded {limit} bytes")
        self.limit = limit


async def collect_output(
    process: asyncio.subprocess.Process,
    limit: int = MAX_OUTPUT_BYTES,
) -> tuple[bytes, bytes]:
    """
    Read stdout and stderr to EOF and wait for the process to exit.

    Both pipes are read incrementally; the combined size is checked after
    every chunk so a runaway child is stopped before its output is buffered.

    Raises:
        OutputLimitExceeded: If combined output is larger than ``limit``
    """
    total = 0

    async def _read(stream: asyncio.StreamReader | None) -> bytes:
        nonlocal total
        if stream is None:
            return b""
        chunks: list[bytes] = []
        while True:
            chunk = await stream.read(READ_CHUNK_SIZE)
            if not chunk:
                return b"".join(chunks)
            total += len(chunk)
            if total > limit:
                raise OutputLimitExceeded(limit)
            chunks.append(chunk)

    stdout, stderr = await asyncio.gather(_read(process.stdout), _read(process.stderr))
    await process.wait()
    return stdout, stderr


async def kill_process(process: asyncio.subprocess.Process) -> None:
    """Kill a child process (if still running) and reap it."""
    with contextlib.suppress(ProcessLookupError):
        process.kill()
    await process.wait()
