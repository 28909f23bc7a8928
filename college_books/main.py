# college_books/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.concurrency import run_in_threadpool

from .catalog.router import router as books_router
from .catalog.schemas import describe_errors
from .config import Settings
from .errors import CatalogError
from .storage import BackendSelector, BookBackend
from .uploads import URL_PREFIX, ImageStore

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    backend: Optional[BookBackend] = None,
) -> FastAPI:
    """Build the application.

    When ``backend`` is omitted the storage backend is chosen at startup
    by ``BackendSelector``: MongoDB if it answers, otherwise the
    in-memory fallback. Run with
    ``uvicorn college_books.main:create_app --factory`` or
    ``python -m college_books``.
    """
    settings = settings or Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    image_store = ImageStore(settings.upload_dir, url_prefix=URL_PREFIX)
    image_store.ensure_directory()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.backend is None:
            selector = BackendSelector(settings)
            app.state.backend = await run_in_threadpool(selector.select)
        logger.info("Using %s storage", app.state.backend.name)
        try:
            yield
        finally:
            app.state.backend.close()

    app = FastAPI(
        title="College Books",
        description="Buy and sell secondhand textbooks.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.backend = backend
    app.state.image_store = image_store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.mount(URL_PREFIX, StaticFiles(directory=image_store.directory), name="uploads")
    app.include_router(books_router)

    @app.exception_handler(CatalogError)
    async def catalog_error_handler(request: Request, exc: CatalogError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": describe_errors(exc.errors())})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    @app.get("/")
    def health_check(request: Request):
        backend = request.app.state.backend
        return {"status": "ok", "storage": backend.name if backend is not None else None}

    return app
