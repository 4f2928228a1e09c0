import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy import text

from city_explorer.config import settings
from city_explorer.core.errors import CityExplorerError, NotFoundError
from city_explorer.database import dispose_engine, engine, init_db
from city_explorer.logging_config import setup_logging
from city_explorer.routers import category_data, location

setup_logging()
logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Sorry, something went wrong"
NOT_FOUND_MESSAGE = "Sorry, nothing was found for that location"

app = FastAPI(
    title="City Explorer API",
    description="Location lookup with cached weather, events and movies.",
    version="1.0.0",
)

cors_origins = [o.strip() for o in settings.cors_allow_origins.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials="*" not in cors_origins,
    allow_methods=["GET"],
    allow_headers=["*"],
)

app.include_router(location.router)
app.include_router(category_data.router)


@app.exception_handler(NotFoundError)
async def not_found_handler(request, exc):
    logger.info("Not found on %s %s: %s", request.method, request.url.path, exc)
    return PlainTextResponse(NOT_FOUND_MESSAGE, status_code=404)


@app.exception_handler(CityExplorerError)
async def city_explorer_error_handler(request, exc):
    logger.error("Request failed on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
    return PlainTextResponse(GENERIC_ERROR_MESSAGE, status_code=500)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request, exc):
    logger.exception("Unhandled server error on %s %s: %s", request.method, request.url.path, exc)
    return PlainTextResponse(GENERIC_ERROR_MESSAGE, status_code=500)


@app.get("/health/live")
def health_live():
    return {"status": "ok"}


@app.get("/health/ready")
def health_ready():
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return {"status": "ready"}
    except Exception:
        logger.exception("Readiness check failed")
        return JSONResponse(status_code=503, content={"status": "not_ready"})


@app.on_event("startup")
def on_startup():
    logger.info("Starting City Explorer API")
    env = (settings.app_env or "development").lower()
    missing = settings.missing_api_keys()
    if env in {"production", "prod"}:
        if missing:
            raise RuntimeError(f"Missing upstream API keys in production: {', '.join(missing)}")
    elif missing:
        logger.warning("Upstream API keys not set: %s. Those routes will fail until configured.", ", ".join(missing))
    init_db()


@app.on_event("shutdown")
def on_shutdown():
    logger.info("Stopping City Explorer API")
    dispose_engine()


@app.get("/")
def root():
    return {"message": "City Explorer API. GET /location?data=<place> to start."}
