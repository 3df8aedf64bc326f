from contextlib import asynccontextmanager
import logging
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, PlainTextResponse

from app.config import CORS_ORIGINS, PORT, RETRIEVAL_MODE
from app.core.errors import register_exception_handlers
from app.registry.base import FileRegistry
from app.routers import files, uploads
from app.services.retrieval import RetrievalStrategy, build_retrieval
from app.storage import StorageBackend, build_storage

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect the registry before serving; release clients on shutdown."""
    prisma = None
    if app.state.registry is None:
        from prisma import Prisma

        from app.registry.prisma_registry import PrismaRegistry

        prisma = Prisma()
        await prisma.connect()
        app.state.registry = PrismaRegistry(prisma)
        logger.info("Database connected successfully.")
    yield
    await app.state.retrieval.aclose()
    if prisma is not None and prisma.is_connected():
        await prisma.disconnect()


def create_app(
    registry: FileRegistry | None = None,
    storage: StorageBackend | None = None,
    retrieval: RetrievalStrategy | None = None,
) -> FastAPI:
    """
    Build the app. Anything not passed in comes from configuration; the Prisma
    registry is connected in the lifespan when no registry is given.
    """
    storage = storage or build_storage()
    app = FastAPI(
        title="FileLink API",
        description="Upload a file, get a short shareable link",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.registry = registry
    app.state.storage = storage
    app.state.retrieval = retrieval or build_retrieval(storage, RETRIEVAL_MODE)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    # Include routers
    app.include_router(uploads.router)
    app.include_router(files.router)

    @app.get("/", include_in_schema=False)
    async def root():
        return FileResponse(STATIC_DIR / "index.html", media_type="text/html")

    # Serve local uploads when blobs live on disk (fileUrl is /files/...)
    if storage.is_local:

        @app.get("/files/{path:path}")
        async def serve_upload(path: str, download: str | None = Query(None)):
            """Serve files from local uploads directory. Path must be under uploads root."""
            try:
                full_path = storage.local_path(path)
            except ValueError:
                return PlainTextResponse("Forbidden", status_code=403)
            if full_path is None or not full_path.is_file():
                return PlainTextResponse("Not Found", status_code=404)
            return FileResponse(full_path, filename=download)

    logger.info(
        "Storage backend: %s, retrieval: %s",
        type(storage).__name__,
        type(app.state.retrieval).__name__,
    )
    return app


app = create_app()


def run() -> None:
    """Serve on 0.0.0.0:PORT (used by the `filelink` console script)."""
    uvicorn.run("app.main:app", host="0.0.0.0", port=PORT)


if __name__ == "__main__":
    run()
