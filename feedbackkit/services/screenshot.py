"""Screenshot capture capabilities.

Real on-screen capture belongs to the host UI toolkit; these headless
implementations cover services and tests.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

import aiofiles

logger = logging.getLogger(__name__)


@runtime_checkable
class ScreenshotCapture(Protocol):
    async def capture(self) -> bytes | None: ...


class NullScreenshotCapture:
    """Capture is unavailable on this platform."""

    async def capture(self) -> bytes | None:
        return None


class FileScreenshotCapture:
    """Reads an already-rendered image from disk.

    A missing file means there is nothing to attach, not an error.
    """

    def __init__(self, path: str | Path, *, max_bytes: int = 10 * 1024 * 1024):
        self.path = Path(path)
        self.max_bytes = max_bytes

    async def capture(self) -> bytes | None:
        if not self.path.is_file():
            logger.info("Screenshot source %s not found", self.path)
            return None
        async with aiofiles.open(self.path, "rb") as handle:
            data = await handle.read(self.max_bytes + 1)
        if len(data) > self.max_bytes:
            logger.warning("Screenshot %s exceeds %s bytes; skipping", self.path, self.max_bytes)
            return None
        return data or None
