class RecordingServiceError(Exception):
    """Base error. ``message`` is what the client sees in ``{"error": ...}``."""

    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


# 4xx: rejected before anything is written


class ValidationError(RecordingServiceError):
    status_code = 400
    message = "Invalid request"


class MissingUpload(ValidationError):
    message = "No video file provided"


class PayloadTooLarge(ValidationError):
    message = "File size too large"


class UnsupportedMediaType(ValidationError):
    status_code = 500
    message = "Only video files are allowed!"


class NotFound(RecordingServiceError):
    status_code = 404
    message = "Not found"


class RecordingNotFound(NotFound):
    message = "Recording not found"


class BlobNotFound(NotFound):
    message = "File not found on server"


class InvalidRange(RecordingServiceError):
    status_code = 416
    message = "Requested range not satisfiable"

    def __init__(self, file_size: int, message: str | None = None):
        self.file_size = file_size
        super().__init__(message)


# 5xx: detail goes to the log, the client gets the generic message


class StorageError(RecordingServiceError):
    status_code = 500


class StorageWriteError(StorageError):
    message = "Failed to upload recording"


class StorageReadError(StorageError):
    message = "Failed to fetch recordings"
