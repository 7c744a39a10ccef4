from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime


class RecordingBase(BaseModel):
    filename: str
    filepath: str
    filesize: int


class Recording(RecordingBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime = Field(serialization_alias="createdAt")


class RecordingUploaded(BaseModel):
    message: str = "Recording uploaded successfully"
    recording: Recording


class RecordingDeleted(BaseModel):
    deleted_rows: int = Field(serialization_alias="deletedRows")
