from fastapi.responses import StreamingResponse

from app.constants import STREAM_MEDIA_TYPE
from app.core.byte_range import parse_range_header
from app.core.logger import get_logger
from app.db.models import Recording
from app.services.blob_storage import BlobStorage

logger = get_logger(__name__)


def stream_recording(
    recording: Recording, blobs: BlobStorage, range_header: str | None
) -> StreamingResponse:
    """Build a 200 or 206 response streaming a recording's blob.

    Raises:
        BlobNotFound: the row exists but its file is gone.
        InvalidRange: the Range header cannot be satisfied.
    """
    file_size = blobs.stat(recording.filepath)
    byte_range = parse_range_header(range_header, file_size)

    headers = {"Accept-Ranges": "bytes"}
    if byte_range is None:
        if file_size == 0:
            body = iter(())
        else:
            body = blobs.open_range(recording.filepath, 0, file_size - 1)
        headers["Content-Length"] = str(file_size)
        status_code = 200
    else:
        body = blobs.open_range(recording.filepath, byte_range.start, byte_range.end)
        headers["Content-Length"] = str(byte_range.length)
        headers["Content-Range"] = byte_range.content_range(file_size)
        status_code = 206

    logger.debug(
        f"Streaming recording {recording.id} status={status_code} "
        f"range={headers.get('Content-Range', 'full')}"
    )
    return StreamingResponse(
        body, status_code=status_code, headers=headers, media_type=STREAM_MEDIA_TYPE
    )
