from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging
from storefront import __version__
from storefront.api import api_router
from storefront.database import init_db, close_db
from storefront.config import get_settings
from storefront.exceptions import (
    AccessDeniedError,
    CartError,
    ImmutableEventError,
    NotFoundError,
    OrderStateError,
    StorefrontError,
)

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Status code per domain error, checked in order
_ERROR_STATUS = (
    (NotFoundError, 404),
    (AccessDeniedError, 403),
    (CartError, 409),
    (OrderStateError, 409),
    (ImmutableEventError, 409),
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the database on startup and release the pool on shutdown."""
    logger.info(f"Starting Gemstone Storefront Search {__version__}...")
    logger.info(
        f"Search settings: max_page_size={settings.search_max_page_size} "
        f"auto_fuzzy_fallback={settings.search_auto_fuzzy_fallback} "
        f"analytics={settings.search_analytics_enabled}"
    )
    await init_db()
    logger.info("Database initialized")
    yield
    logger.info("Shutting down...")
    await close_db()
    logger.info("Database connections closed")


app = FastAPI(
    title="Gemstone Storefront Search",
    description="Multilingual gemstone catalog search with fuzzy matching and suggestions",
    version=__version__,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError):
    """Domain errors that escape a route become JSON errors instead of 500s."""
    status_code = next((code for error, code in _ERROR_STATUS if isinstance(exc, error)), 400)
    logger.warning(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Gemstone Storefront Search API",
        "version": __version__,
        "docs": "/docs"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "storefront.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=True,
        log_level=settings.log_level.lower()
    )
