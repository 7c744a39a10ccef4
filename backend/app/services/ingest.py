from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from app.constants import MULTIPART_OVERHEAD, VIDEO_MEDIA_PREFIX
from app.core.errors import (
    MissingUpload,
    PayloadTooLarge,
    StorageError,
    StorageWriteError,
    UnsupportedMediaType,
)
from app.core.logger import get_logger
from app.db.models import Recording
from app.db.recordings import RecordingStore
from app.services.blob_storage import BlobStorage, safe_extension

logger = get_logger(__name__)


class RecordingIngestor:
    """Validate an upload, write it to blob storage, then register it.

    The row is only inserted once the blob is fully on disk. If the insert
    fails the blob is removed again so no unregistered file is left behind.
    """

    def __init__(self, blobs: BlobStorage, store: RecordingStore, max_size: int):
        self.blobs = blobs
        self.store = store
        self.max_size = max_size

    def check_content_length(self, content_length: str | None) -> None:
        """Reject a request whose declared body is already over the limit."""
        try:
            declared = int(content_length) if content_length else None
        except ValueError:
            return
        if declared is not None and declared > self.max_size + MULTIPART_OVERHEAD:
            logger.warning(f"Rejected upload request of {declared} bytes")
            raise PayloadTooLarge()

    def validate(self, upload: UploadFile | None) -> None:
        if upload is None or not upload.filename:
            raise MissingUpload()
        content_type = (upload.content_type or "").lower()
        if not content_type.startswith(VIDEO_MEDIA_PREFIX):
            logger.warning(
                f"Rejected upload {upload.filename!r} with content type {content_type!r}"
            )
            raise UnsupportedMediaType()
        if upload.size is not None and upload.size > self.max_size:
            logger.warning(f"Rejected upload {upload.filename!r}: {upload.size} bytes")
            raise PayloadTooLarge()

    async def ingest(self, upload: UploadFile | None) -> Recording:
        self.validate(upload)

        try:
            blob = await self.blobs.write(
                upload, ext=safe_extension(upload.filename), max_size=self.max_size
            )
        except PayloadTooLarge:
            logger.warning(f"Upload {upload.filename!r} exceeded {self.max_size} bytes")
            raise

        try:
            recording = await run_in_threadpool(
                self.store.insert, blob.filename, str(blob.path), blob.size
            )
        except StorageError:
            await self.blobs.discard(blob.path)
            raise
        except Exception as e:
            logger.exception(f"Unexpected failure registering {blob.filename}")
            await self.blobs.discard(blob.path)
            raise StorageWriteError() from e

        logger.info(
            f"Registered recording {recording.id} -> {blob.filename} ({blob.size} bytes)"
        )
        return recording
