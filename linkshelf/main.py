import logging
import logging.config

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from linkshelf.config import settings
from linkshelf.errors import AuthRequiredError, InvalidUrlError
from linkshelf.routers.save import limiter, router as save_router
from linkshelf.services.store import InMemoryItemStore

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
        "root": {"level": settings.log_level, "handlers": ["console"]},
    }
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    description="Saves URLs to a personal reading list with extracted metadata and duplicate detection.",
    version="1.0.0",
)

app.state.store = InMemoryItemStore()

# Rate-limiting state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(InvalidUrlError)
async def invalid_url_handler(request: Request, exc: InvalidUrlError) -> JSONResponse:
    logger.warning("Rejected URL for %s: %s", request.url.path, exc)
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    )
    logger.warning("Malformed request to %s: %s", request.url.path, details)
    return JSONResponse(status_code=400, content={"error": "Invalid request body", "details": details})


@app.exception_handler(AuthRequiredError)
async def auth_required_handler(request: Request, exc: AuthRequiredError) -> JSONResponse:
    logger.warning("Unauthenticated request to %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=401,
        content={"error": "Authentication required to save items", "details": str(exc)},
        headers={"WWW-Authenticate": "Bearer"},
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception for %s", request.url)
    return JSONResponse(status_code=500, content={"error": "An unexpected error occurred."})


app.include_router(save_router)


@app.get("/", summary="Health check")
async def root() -> dict:
    return {"message": "Hello from Linkshelf"}
