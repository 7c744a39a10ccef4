from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.api import endpoints
from app.core.config import settings
from app.core.errors import InvalidRange, RecordingServiceError
from app.core.logger import get_logger
from app.db.base import init_db
from app.services.blob_storage import blob_storage

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # create-if-absent only, existing rows and blobs survive restarts
    init_db()
    blob_storage.ensure_root()
    logger.info(f"Uploads directory: {blob_storage.root}")
    yield


app = FastAPI(title="Recording Server", lifespan=lifespan)


app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(endpoints.router)


@app.exception_handler(RecordingServiceError)
async def recording_error_handler(request: Request, exc: RecordingServiceError):
    headers = None
    if isinstance(exc, InvalidRange):
        headers = {"Content-Range": f"bytes */{exc.file_size}"}
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc!r}")
    return JSONResponse(
        status_code=exc.status_code, content={"error": exc.message}, headers=headers
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(status_code=422, content={"error": message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


@app.get("/health")
def health_check():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host=settings.host, port=settings.port)
