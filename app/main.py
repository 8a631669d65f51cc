from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
import sys

from app.config import get_settings
from app.errors import SOVError
from app.models.shared import fail
from app.routers import sov, sov_items, cost_codes

settings = get_settings()

# Configure loguru
logger.remove()
logger.add(
    sys.stderr,
    format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}",
    level=settings.log_level,
)

app = FastAPI(
    title="SiteSense SOV API",
    description="Schedule of values generation and progress billing",
    version="1.0.0",
)

# Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.app_base_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SOVError)
async def sov_error_handler(request: Request, exc: SOVError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
    return JSONResponse(content=fail(exc.message), status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"{field}: {first.get('msg', 'invalid input')}" if field else str(exc)
    logger.warning(f"{request.method} {request.url.path} rejected: {message}")
    return JSONResponse(content=fail(message), status_code=400)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(content=fail(str(exc)), status_code=500)


# Routers
app.include_router(sov.router)
app.include_router(sov_items.router)
app.include_router(cost_codes.router)


@app.get("/health")
async def health_check():
    return {"status": "ok", "version": "1.0.0"}


@app.get("/health/detailed")
async def detailed_health_check():
    """Detailed health check with dependency status."""
    health = {
        "status": "ok",
        "version": "1.0.0",
        "dependencies": {},
    }

    # Check Supabase
    try:
        from app.database import get_supabase
        db = get_supabase()
        db.table("schedule_of_values").select("id").limit(1).execute()
        health["dependencies"]["supabase"] = "ok"
    except Exception as e:
        health["dependencies"]["supabase"] = f"error: {str(e)[:100]}"
        health["status"] = "degraded"

    return health
