import logging
import os
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from wanderlog.config import settings

# ─── Logging setup (file + console) ───
_LOG_DIR = Path(__file__).resolve().parent.parent / "logs"
_LOG_DIR.mkdir(exist_ok=True)

_log_level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)

logging.basicConfig(
    level=_log_level,
    format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    handlers=[
        logging.StreamHandler(),
        RotatingFileHandler(
            _LOG_DIR / "wanderlog.log",
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8",
        ),
    ],
)

# Quiet noisy libraries
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

from wanderlog.exceptions import WanderlogError
from wanderlog.routers import ai, entries, places

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.create_tables_on_startup:
        try:
            from wanderlog.database import create_tables
            await create_tables()
            logger.info("Database tables ready")
        except Exception as e:
            logger.warning(f"Table creation skipped: {e}")

    yield

    # Shutdown
    from wanderlog.services.cache_service import cache_service
    from wanderlog.services.llm_client import llm_client
    from wanderlog.services.place_resolver import place_resolver

    await place_resolver.close()
    await cache_service.close()
    await llm_client.close()
    logger.info("Provider clients closed")


app = FastAPI(
    title="Wanderlog",
    description="Travel journal API: place resolution and AI trip insights",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ─── Error envelope ───

def _error_body(error: str, details=None) -> dict:
    body = {"error": error}
    if details:
        body["details"] = details
    return body


@app.exception_handler(WanderlogError)
async def wanderlog_error_handler(request: Request, exc: WanderlogError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message} ({exc.details})")
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message, exc.details))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}" for err in exc.errors()
    )
    return JSONResponse(status_code=400, content=_error_body("Invalid request", details))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content=_error_body("Internal server error", str(exc)))


app.include_router(ai.router, prefix="/ai", tags=["ai"])
app.include_router(places.router, prefix="/places", tags=["places"])
app.include_router(entries.router, prefix="/entries", tags=["entries"])


@app.get("/health")
async def health_check():
    return {"status": "ok", "service": "wanderlog"}
