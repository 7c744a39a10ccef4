from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from app.constants import APP_DIR, MAX_UPLOAD_SIZE, READ_CHUNK_SIZE


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    host: str = "0.0.0.0"
    port: int = 5000
    frontend_url: str = "https://screen-recorder-iota-bay.vercel.app"

    database_url: str = f"sqlite:///{(APP_DIR / 'data').as_posix()}/database.db"
    uploads_dir: Path = APP_DIR / "uploads"

    max_upload_size: int = MAX_UPLOAD_SIZE
    stream_chunk_size: int = READ_CHUNK_SIZE

    log_level: str = "INFO"


settings = Settings()
