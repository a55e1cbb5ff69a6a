import logging
import os
import re
import shutil
from typing import BinaryIO, Callable, Iterator
from urllib.parse import quote

from fastapi import FastAPI, File, Request, UploadFile, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response, StreamingResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from word2pdf import __version__
from word2pdf.config import Settings, load_settings
from word2pdf.conversion import ConversionError, ConversionService, InvalidRequest, StorageError
from word2pdf.conversion.adapters import LibreOfficeConverter, TempDirStaging

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

CHUNK = 64 * 1024

_PLAIN_FILENAME = re.compile(r"[A-Za-z0-9._-]+")


def content_disposition(filename: str) -> str:
    """Attachment header for ``filename``; non-plain names also get RFC 5987 ``filename*``."""
    if _PLAIN_FILENAME.fullmatch(filename):
        return f"attachment; filename={filename}"
    fallback = re.sub(r"[^A-Za-z0-9._-]", "_", filename)
    return f"attachment; filename={fallback}; filename*=utf-8''{quote(filename)}"


class StagedPDFResponse(StreamingResponse):
    """Streams a PDF out of a staging directory and runs ``on_close`` afterwards.

    ``on_close`` runs once the response has been sent or sending failed,
    including client disconnects, so the staging directory never outlives
    the request.
    """

    def __init__(self, pdf: BinaryIO, filename: str, on_close: Callable[[], None]) -> None:
        self._pdf = pdf
        self._on_close = on_close
        super().__init__(
            self._chunks(),
            media_type="application/pdf",
            headers={
                "Content-Description": "File Transfer",
                "Content-Disposition": content_disposition(filename),
            },
        )

    def _chunks(self) -> Iterator[bytes]:
        sent = 0
        try:
            while chunk := self._pdf.read(CHUNK):
                sent += len(chunk)
                yield chunk
        except OSError as e:
            # headers are already out; nothing left but to log and abort the body
            logger.error("failed to send PDF after %d bytes: %s", sent, e)
            raise
        logger.info("PDF sent (%d bytes)", sent)

    async def __call__(self, scope, receive, send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            self._pdf.close()
            self._on_close()


def create_app(settings: Settings | None = None, service: ConversionService | None = None) -> FastAPI:
    settings = settings or load_settings()
    if service is None:
        converter = LibreOfficeConverter(settings.libreoffice_bin, timeout=settings.convert_timeout_sec)
        service = ConversionService(converter, TempDirStaging(), max_upload_mb=settings.max_upload_mb)

    app = FastAPI(
        title="Word2PDF Service",
        version=os.getenv("WORD2PDF_VERSION", __version__),
        description="Converts uploaded Word, Excel and PowerPoint documents to PDF using LibreOffice.",
    )
    app.state.settings = settings
    app.state.service = service

    @app.middleware("http")
    async def cors(request: Request, call_next):
        if request.method == "OPTIONS":
            response = Response(status_code=status.HTTP_204_NO_CONTENT)
        else:
            response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response

    @app.exception_handler(ConversionError)
    async def conversion_error(request: Request, exc: ConversionError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.warning("invalid request to %s: %s", request.url.path, exc.errors())
        err = InvalidRequest("No file uploaded")
        return JSONResponse(status_code=err.status_code, content=err.to_dict())

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        body = {"error": str(exc.detail)}
        if exc.status_code == status.HTTP_400_BAD_REQUEST:
            logger.warning("bad request to %s: %s", request.url.path, exc.detail)
            body["code"] = InvalidRequest.kind
        return JSONResponse(status_code=exc.status_code, content=body, headers=exc.headers)

    @app.on_event("startup")
    async def _startup() -> None:
        if shutil.which(settings.libreoffice_bin) is None:
            logger.warning("converter %r not found on PATH; conversions will fail", settings.libreoffice_bin)
        logger.info("Word2PDF service ready")

    @app.get("/health")
    def health() -> dict[str, str]:
        """Basic health check endpoint."""
        return {"status": "ok", "message": "Word2PDF service is running"}

    @app.post("/convert")
    def convert(request: Request, file: UploadFile | None = File(None)) -> Response:
        """Convert an uploaded office document to PDF.

        Accepts multipart/form-data with a single part named "file" and
        answers with the PDF as an attachment, or a JSON error body.
        """
        svc: ConversionService = request.app.state.service
        if file is None:
            logger.warning("conversion request without a file field")
            raise InvalidRequest("No file uploaded")
        logger.info("received file %s (%s bytes)", file.filename, file.size)

        result = svc.convert(file.filename, file.file)
        try:
            pdf = result.pdf_path.open("rb")
        except OSError as e:
            logger.error("failed to open converted PDF %s: %s", result.pdf_path, e)
            svc.cleanup(result.staging_dir)
            raise StorageError("Failed to open converted PDF file") from e

        logger.info("sending %s as %s", result.pdf_path, result.download_name)
        return StagedPDFResponse(pdf, result.download_name, lambda: svc.cleanup(result.staging_dir))

    return app


app = create_app()


def run() -> None:
    """Run the ASGI server using uvicorn.

    Exposes the app at host:port (default 0.0.0.0:8080). Set PORT env var to override.
    """
    import uvicorn

    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    if not os.getenv("PORT"):
        logger.info("PORT not set, using default port %d", settings.port)
    logger.info("starting Word2PDF service on %s:%d", settings.host, settings.port)

    uvicorn.run("word2pdf.webapi:app", host=settings.host, port=settings.port, reload=settings.reload)


if __name__ == "__main__":
    run()
