import os
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, Protocol

import aiofiles
import aiofiles.os

from app.core.config import settings
from app.core.errors import (
    BlobNotFound,
    InvalidRange,
    PayloadTooLarge,
    StorageReadError,
    StorageWriteError,
)
from app.core.logger import get_logger

logger = get_logger(__name__)

_SAFE_EXT = re.compile(r"^\.[A-Za-z0-9]{1,16}$")


class ByteSource(Protocol):
    async def read(self, size: int = -1) -> bytes: ...


@dataclass(frozen=True)
class StoredBlob:
    filename: str
    path: Path
    size: int


def safe_extension(original_name: str | None) -> str:
    """Keep the client's extension only if it is short and alphanumeric."""
    ext = os.path.splitext(original_name or "")[1]
    return ext.lower() if _SAFE_EXT.match(ext) else ""


class BlobStorage:
    def __init__(self, root: Path, chunk_size: int = settings.stream_chunk_size):
        self.root = Path(root)
        self.chunk_size = chunk_size

    def ensure_root(self):
        self.root.mkdir(parents=True, exist_ok=True)

    async def _create_unique(self, ext: str):
        stamp = int(time.time() * 1000)
        attempt = 0
        while True:
            suffix = f"_{attempt}" if attempt else ""
            filename = f"recording_{stamp}{suffix}{ext}"
            path = self.root / filename
            try:
                # "x" fails if another upload already claimed the name
                handle = await aiofiles.open(path, "xb")
            except FileExistsError:
                attempt += 1
                continue
            return filename, path, handle

    async def write(
        self, source: ByteSource, ext: str = "", max_size: int | None = None
    ) -> StoredBlob:
        """Copy ``source`` to a new file chunk by chunk.

        Raises:
            PayloadTooLarge: more than ``max_size`` bytes were read.
            StorageWriteError: the file could not be created or written.
        """
        self.ensure_root()
        try:
            filename, path, handle = await self._create_unique(ext)
        except OSError as e:
            logger.exception(f"Could not create blob in {self.root}")
            raise StorageWriteError() from e

        size = 0
        try:
            try:
                while True:
                    chunk = await source.read(self.chunk_size)
                    if not chunk:
                        break
                    size += len(chunk)
                    if max_size is not None and size > max_size:
                        raise PayloadTooLarge()
                    await handle.write(chunk)
            finally:
                await handle.close()
        except PayloadTooLarge:
            await self.discard(path)
            raise
        except Exception as e:
            logger.exception(f"Failed writing blob {path}")
            await self.discard(path)
            raise StorageWriteError() from e

        logger.info(f"Stored blob {filename} ({size} bytes)")
        return StoredBlob(filename=filename, path=path, size=size)

    def stat(self, path: str | Path) -> int:
        try:
            return os.stat(path).st_size
        except FileNotFoundError as e:
            raise BlobNotFound() from e
        except OSError as e:
            logger.exception(f"Cannot stat blob {path}")
            raise StorageReadError("Failed to stream recording") from e

    def open_range(
        self, path: str | Path, start: int, end: int
    ) -> AsyncIterator[bytes]:
        """Return an iterator over bytes ``start..end`` (inclusive) of a blob."""
        size = self.stat(path)
        if not (0 <= start <= end < size):
            raise InvalidRange(size)
        return self._read_slice(Path(path), start, end - start + 1)

    async def _read_slice(self, path: Path, offset: int, length: int):
        # the handle closes on exhaustion and when the consumer is cancelled
        async with aiofiles.open(path, "rb") as f:
            await f.seek(offset)
            remaining = length
            while remaining > 0:
                chunk = await f.read(min(self.chunk_size, remaining))
                if not chunk:
                    break
                remaining -= len(chunk)
                yield chunk

    async def discard(self, path: str | Path):
        """Best-effort removal. Failures are logged as orphans."""
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error(f"Orphaned blob left at {path}: {e}")


blob_storage = BlobStorage(settings.uploads_dir)


def get_blob_storage() -> BlobStorage:
    return blob_storage
