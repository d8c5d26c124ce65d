from typing import Any, Dict

from fastapi.responses import JSONResponse

from app.core.config import settings


def cors_headers() -> Dict[str, str]:
    return {
        "Access-Control-Allow-Origin": settings.allowed_origin,
        "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type",
    }


def json_response(body: Any, status_code: int = 200) -> JSONResponse:
    """JSON envelope carrying the CORS headers."""
    return JSONResponse(content=body, status_code=status_code, headers=cors_headers())
