from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import RecordingNotFound, StorageReadError, StorageWriteError
from app.core.logger import get_logger
from app.db.models import Recording

logger = get_logger(__name__)


class RecordingStore:
    """CRUD over the ``recordings`` table for one session."""

    def __init__(self, db: Session):
        self.db = db

    def insert(self, filename: str, filepath: str, filesize: int) -> Recording:
        recording = Recording(filename=filename, filepath=filepath, filesize=filesize)
        try:
            self.db.add(recording)
            self.db.commit()
            self.db.refresh(recording)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception(f"Failed to insert recording {filename}")
            raise StorageWriteError() from e
        return recording

    def list_all(self) -> list[Recording]:
        stmt = select(Recording).order_by(
            Recording.created_at.desc(), Recording.id.desc()
        )
        try:
            return list(self.db.execute(stmt).scalars().all())
        except SQLAlchemyError as e:
            logger.exception("Failed to list recordings")
            raise StorageReadError() from e

    def get(self, recording_id: int) -> Recording:
        try:
            recording = self.db.get(Recording, recording_id)
        except SQLAlchemyError as e:
            logger.exception(f"Failed to load recording {recording_id}")
            raise StorageReadError("Failed to stream recording") from e
        if recording is None:
            raise RecordingNotFound()
        return recording

    def delete(self, recording_id: int) -> int:
        """Remove the row and return how many were deleted. The blob stays on disk."""
        try:
            result = self.db.execute(delete(Recording).where(Recording.id == recording_id))
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception(f"Failed to delete recording {recording_id}")
            raise StorageWriteError("Failed to delete recording") from e
        return result.rowcount
