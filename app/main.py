import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.errors import InvalidInputError
from app.api.responses import cors_headers, json_response
from app.api.endpoints.sentiment import router as sentiment_router
from app.api.endpoints.lucky import router as lucky_router
from app.services.model_gateway import close_model_gateway

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown events."""
    logger.info(f"{settings.app_name} starting, model {settings.ai_model}")
    yield
    # Shutdown
    close_model_gateway()


# Only the two handlers are routable; docs and schema routes stay off.
app = FastAPI(
    title=settings.app_name,
    lifespan=lifespan,
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)


@app.middleware("http")
async def add_cors_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers.update(cors_headers())
    return response


@app.exception_handler(InvalidInputError)
async def invalid_input_handler(request: Request, exc: InvalidInputError):
    return json_response({"error": str(exc)}, 400)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # Unknown paths and unsupported methods on known paths are both "not found".
    if exc.status_code in (404, 405):
        return PlainTextResponse("Not found", status_code=404, headers=cors_headers())
    return json_response({"error": exc.detail}, exc.status_code)


app.include_router(sentiment_router)
app.include_router(lucky_router)


if __name__ == "__main__":
    uvicorn.run("app.main:app", host="127.0.0.1", port=8000, reload=True)
