from contextlib import asynccontextmanager
import time

import structlog
from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles

from linkhub_app.config import settings
from linkhub_app.dependencies import get_store
from linkhub_app.services.auth_service import AuthService
from linkhub_app.api.v1 import admin, auth, links, profiles, themes

# Configure structured logging
structlog.configure(
    processors=[
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer()
    ]
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle events: check the store, bootstrap the admin account"""
    # Honour test overrides of the store dependency
    store = app.dependency_overrides.get(get_store, get_store)()

    if not await store.ping():
        logger.warning("store_unreachable", backend=settings.store_backend)
    await AuthService(store).initialize_admin()

    logger.info("application_startup", app_name=settings.app_name, environment=settings.environment)
    yield
    await store.close()
    logger.info("application_shutdown")


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Link-in-bio profiles with links, themes and analytics",
    debug=settings.debug,
    lifespan=lifespan
)


# Middleware for logging requests
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()

    response = await call_next(request)

    duration = time.time() - start_time
    logger.info(
        "request_completed",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round(duration * 1000, 2)
    )

    return response


@app.get("/")
def read_root():
    """Root endpoint with API information"""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc"
    }


@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "environment": settings.environment}


######## Include routers
app.include_router(auth.router, prefix="/api/v1")
app.include_router(links.router, prefix="/api/v1")
app.include_router(profiles.router, prefix="/api/v1")
app.include_router(themes.router, prefix="/api/v1")
app.include_router(admin.router, prefix="/api/v1")
app.include_router(admin.dev_router, prefix="/api/v1")

# Locally stored profile images
if settings.blob_backend == "local":
    app.mount("/media", StaticFiles(directory=settings.blob_local_dir, check_dir=False), name="media")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
