from pathlib import Path

APP_DIR = Path(__file__).resolve().parent

VIDEO_MEDIA_PREFIX = "video/"
STREAM_MEDIA_TYPE = "video/webm"

MAX_UPLOAD_SIZE = 100 * 1024 * 1024  # 100 MiB
READ_CHUNK_SIZE = 64 * 1024
# room for boundaries and part headers around the file in a multipart body
MULTIPART_OVERHEAD = 64 * 1024
