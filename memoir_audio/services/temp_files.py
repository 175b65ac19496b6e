"""Request-scoped staging of uploaded audio on local disk."""

from __future__ import annotations

import logging
import secrets
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator

from fastapi.concurrency import run_in_threadpool

logger = logging.getLogger(__name__)


@dataclass
class StagedFile:
    """Handle to one staged file; ``released`` flips once it is gone."""

    path: Path
    size_bytes: int
    released: bool = False


class TempFileManager:
    """Write audio under ``base_dir`` and guarantee removal on scope exit."""

    def __init__(self, base_dir: str | Path) -> None:
        self._base_dir = Path(base_dir)

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def _new_path(self, suffix: str) -> Path:
        name = f"audio_{int(time.time() * 1000)}_{secrets.token_urlsafe(8)}{suffix}"
        return self._base_dir / name

    def _write_sync(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    async def create(self, data: bytes, suffix: str = ".webm") -> StagedFile:
        path = self._new_path(suffix)
        await run_in_threadpool(self._write_sync, path, data)
        logger.debug("Staged %s bytes at %s", len(data), path)
        return StagedFile(path=path, size_bytes=len(data))

    async def release(self, handle: StagedFile) -> None:
        """Delete the staged file. Safe to call more than once."""

        if handle.released:
            return
        handle.released = True
        try:
            await run_in_threadpool(handle.path.unlink, True)
        except OSError:
            logger.warning("Failed to remove staged file %s", handle.path, exc_info=True)

    @asynccontextmanager
    async def stage(self, data: bytes, suffix: str = ".webm") -> AsyncIterator[StagedFile]:
        handle = await self.create(data, suffix)
        try:
            yield handle
        finally:
            await self.release(handle)


__all__ = ["StagedFile", "TempFileManager"]
