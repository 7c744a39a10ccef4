from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile
from app.db.base import get_db
from app.db.models import Recording as RecordingModel
from app.db.recordings import RecordingStore
from app.services.blob_storage import BlobStorage, get_blob_storage
from app.services.ingest import RecordingIngestor
from app.services.streaming import stream_recording
from app.schemas.recording import Recording, RecordingDeleted, RecordingUploaded
from app.core.config import settings
from app.core.logger import get_logger
from typing import List

router = APIRouter(prefix="/api/recordings", tags=["recordings"])
logger = get_logger(__name__)


@router.post(
    "",
    status_code=201,
    response_model=RecordingUploaded,
)
async def upload_recording(
    request: Request,
    db: Session = Depends(get_db),
    blobs: BlobStorage = Depends(get_blob_storage),
) -> RecordingUploaded:
    """Upload a video from the multipart ``video`` field and register it.

    Args:
        request (Request): The incoming request, its form is parsed here.
        db (Session, optional): The database session. Defaults to Depends(get_db).
        blobs (BlobStorage, optional): Where blobs are written.
    Returns:
        RecordingUploaded: Confirmation message and the stored recording.
    """
    ingestor = RecordingIngestor(blobs, RecordingStore(db), settings.max_upload_size)
    # refuse before the body is spooled to disk
    ingestor.check_content_length(request.headers.get("content-length"))

    async with request.form() as form:
        video = form.get("video")
        # a plain text field named "video" is not a file
        if not isinstance(video, UploadFile):
            video = None
        recording = await ingestor.ingest(video)
    return RecordingUploaded(recording=Recording.model_validate(recording))


@router.get("", response_model=List[Recording])
def get_recordings(db: Session = Depends(get_db)) -> List[RecordingModel]:
    """List every recording, newest first.

    Args:
        db (Session, optional): The database session. Defaults to Depends(get_db).
    Returns:
        List[Recording]: List of recordings.
    """
    return RecordingStore(db).list_all()


@router.get("/{recording_id}")
async def get_recording_stream(
    recording_id: int,
    range_header: str | None = Header(None, alias="Range"),
    db: Session = Depends(get_db),
    blobs: BlobStorage = Depends(get_blob_storage),
) -> StreamingResponse:
    """Stream a recording, honouring a single ``Range: bytes=`` request.

    Args:
        recording_id (int): The recording id.
        range_header (str | None, optional): The raw Range header.
    Returns:
        StreamingResponse: 200 with the whole file or 206 with the slice.
    """
    recording = await run_in_threadpool(RecordingStore(db).get, recording_id)
    return stream_recording(recording, blobs, range_header)


@router.delete("/{recording_id}", response_model=RecordingDeleted)
def delete_recording(recording_id: int, db: Session = Depends(get_db)) -> RecordingDeleted:
    """Delete a recording's metadata row. The file on disk is kept.

    Args:
        recording_id (int): The recording id.
        db (Session, optional): The database session. Defaults to Depends(get_db).
    Returns:
        RecordingDeleted: How many rows were removed (0 or 1).
    """
    deleted = RecordingStore(db).delete(recording_id)
    logger.info(f"Delete recording {recording_id}: {deleted} row(s) removed")
    return RecordingDeleted(deleted_rows=deleted)
