"""Vector Store Admin Backend Application.

This is the main entry point for the vector store admin backend. It serves
a browser-based console for managing the files of a hosted vector store:
listing files, editing and bulk-importing their attributes via CSV,
exporting them, uploading and deleting files.

Modules:
    - vector_stores: collaborator boundary and /api/vector_stores proxy
    - console: CSV import/export, import reconciliation, console session
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import get_config
from app.console.router import router as console_router
from app.console.session import ConsoleSession, set_console_session
from app.vector_stores.errors import RemoteFailure
from app.vector_stores.openai_store import OpenAIVectorStore
from app.vector_stores.router import router as vector_stores_router
from app.vector_stores.service import VectorStoreService, set_vector_store_service

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

# Silence verbose third-party loggers.
# httpx/httpcore log every request and TLS handshake, and the openai SDK
# logs retries at INFO.
for _noisy in (
    "httpx",
    "httpcore",
    "httpcore.http11",
    "httpcore.connection",
    "openai",
    "urllib3",
):
    logging.getLogger(_noisy).setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup/shutdown events."""
    # Startup
    config = get_config()

    # Apply configured log level to root logger so that
    # `logging.level: "debug"` in vsadmin.settings.yaml activates DEBUG output.
    configured_level = getattr(logging, config.logging.level.upper(), None)
    if configured_level is not None:
        logging.getLogger().setLevel(configured_level)
        logger.info("Root logger level set to %s", config.logging.level.upper())

    provider = None
    api_key = config.openai_api_key()
    if api_key:
        openai_cfg = config.openai
        provider = OpenAIVectorStore(
            api_key=api_key,
            organization=openai_cfg.organization,
            base_url=openai_cfg.base_url,
            timeout=openai_cfg.timeout_seconds,
        )
        service = VectorStoreService(
            provider,
            upload_purpose=openai_cfg.upload_purpose,
            upload_settle_seconds=openai_cfg.upload_settle_seconds,
            default_upload_name=openai_cfg.default_upload_name,
        )
        set_vector_store_service(service)

        session = ConsoleSession(
            service,
            column_widths=config.console.column_widths,
            min_column_width=config.console.min_column_width,
        )
        set_console_session(session)
        logger.info("Vector store service ready: provider=openai")

        default_store = config.console.default_vector_store_id
        if default_store:
            try:
                files = await session.select_vector_store(default_store)
                logger.info("Loaded %d file(s) from default vector store %s", len(files), default_store)
            except RemoteFailure as exc:
                logger.warning("Failed to load default vector store %s: %s", default_store, exc)
    else:
        logger.warning("No OpenAI API key configured; vector store features disabled.")

    yield  # Application runs here

    # Shutdown
    if provider is not None:
        await provider.close()
    set_console_session(None)
    set_vector_store_service(None)
    logger.info("Application shutdown complete")


# Create FastAPI application with metadata
app = FastAPI(
    title="Vector Store Admin API",
    description="Backend service for the vector store file admin console",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_config().server.allowed_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register all routers
app.include_router(vector_stores_router)
app.include_router(console_router)


@app.get("/health")
async def health() -> dict:
    """Health check endpoint.

    Returns:
        dict: Status object indicating the server is running.
    """
    return {"status": "ok"}
