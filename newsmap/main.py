import logging
import logging.config

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from newsmap.config import get_settings
from newsmap.errors import ConfigurationError, StoreQueryError
from newsmap.routers.sitemap import router as sitemap_router
from newsmap.routers.validate import limiter, router as validate_router

logging.config.dictConfig(
    {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "format": '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}',
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json",
            },
        },
        "root": {"level": get_settings().LOG_LEVEL, "handlers": ["console"]},
    }
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="newsmap – Sitemap Service",
    description="Serves the general and Google News sitemaps and validates sitemap integrity.",
    version="1.0.0",
)

# Rate-limiting state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
    logger.error("Configuration error for %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Server configuration error"})


@app.exception_handler(StoreQueryError)
async def store_query_error_handler(request: Request, exc: StoreQueryError) -> JSONResponse:
    logger.error("Store query failed for %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Database query failed"})


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception for %s", request.url)
    return JSONResponse(status_code=500, content={"detail": "An unexpected error occurred."})


app.include_router(sitemap_router)
app.include_router(validate_router)


@app.get("/", summary="Health check")
async def root() -> dict:
    return {"message": "Hello from newsmap"}
