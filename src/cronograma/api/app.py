"""FastAPI app exposing project upload, update, read, list and delete."""

from __future__ import annotations

import shutil
import tempfile
from pathlib import Path

from fastapi import APIRouter, FastAPI, File, Form, HTTPException, Request, Response, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cronograma import __version__
from cronograma.config import Settings, load_settings
from cronograma.logging import configure_logging, get_logger, log_exception
from cronograma.models.project import ProjectResponse, ProjectSummary
from cronograma.readers import ScheduleDecodeError
from cronograma.service import ProjectService
from cronograma.storage import ProjectConflictError, ProjectNotFoundError, ProjectStore, open_store


def _spool_upload(file: UploadFile, max_bytes: int) -> Path:
    """Copy an upload to a temp file, keeping its extension. Caller removes it."""

    suffix = Path(file.filename or "").suffix
    with tempfile.NamedTemporaryFile(suffix=suffix, delete=False) as tmp:
        shutil.copyfileobj(file.file, tmp)
        tmp_path = Path(tmp.name)

    size = tmp_path.stat().st_size
    if size == 0 or size > max_bytes:
        tmp_path.unlink(missing_ok=True)
        if size == 0:
            raise HTTPException(status_code=400, detail="No file uploaded.")
        raise HTTPException(status_code=413, detail=f"File exceeds {max_bytes} bytes.")
    return tmp_path


def create_app(settings: Settings | None = None, store: ProjectStore | None = None) -> FastAPI:
    """Create FastAPI app.

    Args:
        settings: Settings to use; loaded from the environment when omitted.
        store: Project store; opened from `settings.database_url` when omitted.
            The store is initialized here, once.
    """

    settings = settings or load_settings()
    configure_logging(settings.log_level)
    logger = get_logger(__name__)

    if store is None:
        store = open_store(settings.database_url)
    store.initialize()
    service = ProjectService(store, hours_per_day=settings.hours_per_day)

    app = FastAPI(title="Cronograma", version=__version__)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ProjectNotFoundError)
    async def _not_found(_: Request, exc: ProjectNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ProjectConflictError)
    async def _conflict(_: Request, exc: ProjectConflictError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(ScheduleDecodeError)
    async def _bad_schedule(_: Request, exc: ScheduleDecodeError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    router = APIRouter(prefix=settings.api_prefix)

    @router.post("/upload", response_model=ProjectResponse)
    def upload(file: UploadFile = File(...), project_name: str = Form("", alias="projectName")) -> ProjectResponse:
        filename = file.filename or "upload"
        logger.info("API upload requested", extra={"file_name": filename})
        tmp_path = _spool_upload(file, settings.max_upload_bytes)
        try:
            return service.upload(tmp_path, filename, project_name)
        except (ProjectConflictError, ScheduleDecodeError):
            raise
        except Exception as e:
            log_exception(logger, "Upload failed", file_name=filename)
            raise HTTPException(status_code=500, detail=f"Error processing schedule file: {e}") from e
        finally:
            tmp_path.unlink(missing_ok=True)

    @router.put("/{project_id}/upload", response_model=ProjectResponse)
    def update(project_id: int, file: UploadFile = File(...)) -> ProjectResponse:
        filename = file.filename or "upload"
        logger.info("API update requested", extra={"project_id": project_id, "file_name": filename})
        tmp_path = _spool_upload(file, settings.max_upload_bytes)
        try:
            return service.update(project_id, tmp_path, filename)
        except (ProjectNotFoundError, ProjectConflictError, ScheduleDecodeError):
            raise
        except Exception as e:
            log_exception(logger, "Update failed", project_id=project_id, file_name=filename)
            raise HTTPException(status_code=500, detail=f"Error updating project: {e}") from e
        finally:
            tmp_path.unlink(missing_ok=True)

    @router.get("/{project_id}", response_model=ProjectResponse)
    def get_project(project_id: int) -> ProjectResponse:
        return service.get(project_id)

    @router.get("", response_model=list[ProjectSummary])
    def list_projects() -> list[ProjectSummary]:
        return service.list_projects()

    @router.delete("/{project_id}", status_code=204)
    def delete_project(project_id: int) -> Response:
        service.delete(project_id)
        return Response(status_code=204)

    app.include_router(router)
    return app
