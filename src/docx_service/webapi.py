from datetime import datetime
from pathlib import Path
from typing import Callable

from fastapi import FastAPI, File, HTTPException, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import FileResponse, HTMLResponse, PlainTextResponse
from starlette.background import BackgroundTask
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .config import ServiceConfig
from .conversion import (
    ConversionError,
    ConversionService,
    ConverterGateway,
    RetentionScheduler,
    ServiceError,
)
from .conversion.adapters import DocxPdfEngine, EngineConverter, LocalStorage
from .logger import configure_logging, get_logger
from .pages import UPLOAD_FORM, success_page

logger = get_logger(__name__)

PDF_MEDIA_TYPE = "application/pdf"


def build_service(
    config: ServiceConfig,
    *,
    converter: ConverterGateway | None = None,
    clock: Callable[[], datetime] = datetime.now,
) -> ConversionService:
    """Wire the local adapters into a ConversionService for `config`."""
    storage = LocalStorage(config.upload_dir, config.output_dir)
    retention = RetentionScheduler(
        config.retention_delay,
        sweep_dirs=(storage.upload_dir, storage.output_dir),
        artifact_ttl=config.artifact_ttl,
        sweep_interval=config.sweep_interval,
    )
    return ConversionService(
        storage=storage,
        converter=converter or EngineConverter(DocxPdfEngine()),
        retention=retention,
        max_upload_bytes=config.max_file_size,
        clock=clock,
    )


def create_app(
    config: ServiceConfig | None = None,
    service: ConversionService | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Directories are created on startup; a failure there propagates and stops
    the server. Pending artifact deletions are cancelled on shutdown.
    """
    config = config or ServiceConfig.from_env()
    configure_logging(config.log_level)
    service = service or build_service(config)

    app = FastAPI(
        title="DOCX to PDF Conversion Service",
        version=__version__,
        description="Upload a DOCX document, convert it to PDF and download the result.",
    )
    app.state.config = config
    app.state.service = service

    @app.on_event("startup")
    async def _startup() -> None:
        await service.start()
        logger.info(
            "Service ready: max upload %d bytes, retention %.0fs",
            config.max_file_size,
            config.retention_delay,
        )

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        await service.stop()

    @app.exception_handler(StarletteHTTPException)
    async def _plain_http_error(request: Request, exc: StarletteHTTPException) -> PlainTextResponse:
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def _plain_validation_error(request: Request, exc: RequestValidationError) -> PlainTextResponse:
        logger.warning("Malformed request to %s: %s", request.url.path, exc.errors())
        return PlainTextResponse("Error retrieving file", status_code=400)

    @app.get("/", response_class=HTMLResponse)
    def home() -> HTMLResponse:
        return HTMLResponse(UPLOAD_FORM)

    @app.get("/health")
    def health() -> dict[str, str]:
        """Basic health check endpoint."""
        return {"status": "ok", "version": __version__}

    @app.post("/convert", response_class=HTMLResponse)
    async def convert(docx: UploadFile | None = File(None)) -> HTMLResponse:
        """Save a DOCX upload, convert it synchronously and link to the PDF.

        Accepts multipart/form-data with a single file part named "docx".
        """
        if docx is None:
            raise HTTPException(status_code=400, detail="Error retrieving file")

        async def read_chunk(n: int) -> bytes:
            return await docx.read(n)

        try:
            artifact = await service.convert_upload(docx.filename, read_chunk)
        except ConversionError as e:
            raise HTTPException(status_code=500, detail=f"Error converting file: {e}")
        except ServiceError as e:
            raise HTTPException(status_code=e.status_code, detail=str(e))
        finally:
            await docx.close()

        return HTMLResponse(success_page(artifact))

    async def _schedule_removal(path: Path) -> None:
        # async so Starlette runs it on the event loop, not in the threadpool
        service.schedule_removal(path)

    @app.get("/download/{filename:path}")
    async def download(filename: str) -> FileResponse:
        """Stream an artifact; its deletion is scheduled once the body is sent."""
        try:
            path = service.resolve_artifact(filename)
        except ServiceError as e:
            raise HTTPException(status_code=e.status_code, detail=str(e))

        response = FileResponse(
            path,
            media_type=PDF_MEDIA_TYPE,
            filename=filename,
            content_disposition_type="attachment",
            background=BackgroundTask(_schedule_removal, path),
        )
        logger.info("Serving %s", filename)
        return response

    return app


app = create_app()


def run() -> None:
    """Run the ASGI server using uvicorn.

    Host, port and the rest of the settings come from the environment (see
    ServiceConfig.from_env); defaults bind 0.0.0.0:8080.
    """
    import uvicorn

    config = ServiceConfig.from_env()
    if config.reload:
        uvicorn.run("docx_service.webapi:app", host=config.host, port=config.port, reload=True)
    else:
        uvicorn.run(create_app(config), host=config.host, port=config.port)


if __name__ == "__main__":
    run()
