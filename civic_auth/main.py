import logging
from datetime import datetime, timezone
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from civic_auth.config import settings
from civic_auth.core.errors import (
    AppError, app_error_handler, global_exception_handler, http_exception_handler,
    rate_limit_exceeded_handler, validation_exception_handler
)
from civic_auth.core.middleware import SecurityHeadersMiddleware
from civic_auth.core.rate_limit import limiter
from civic_auth.modules.admin import routes as admin_routes
from civic_auth.modules.auth import routes as auth_routes
from civic_auth.modules.citizen import routes as citizen_routes

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    debug=settings.debug,
    redirect_slashes=False,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

app.add_middleware(SlowAPIMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_trusted_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
    max_age=86400,
)

# Include module routes
app.include_router(auth_routes.router)
app.include_router(citizen_routes.router, prefix="/api")
app.include_router(admin_routes.router, prefix="/api")


@app.on_event("startup")
async def startup_event():
    logger.info("Application startup")
    logger.info("Auth endpoints: %s%s/*", settings.public_base_url, settings.auth_base_path)
    logger.info("Citizen endpoints: %s/api/citizen/*", settings.public_base_url)


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Application shutdown")


@app.get("/")
async def root():
    return {
        "status": "Civic Backend is Running",
        "version": settings.version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/api")
async def api_index():
    return {
        "name": "Civic Backend API",
        "version": settings.version,
        "documentation": "/docs",
        "endpoints": {
            "auth": f"{settings.auth_base_path}/*",
            "citizen": "/api/citizen/*",
            "admin": "/api/admin/*",
        },
    }


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy"}


@app.get("/ready")
@limiter.exempt
async def ready():
    return {"status": "ready"}


def run():
    import uvicorn

    uvicorn.run("civic_auth.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
