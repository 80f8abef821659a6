"""
Cross-origin headers for the endpoints the public portfolio site calls
directly. Everything else is same-origin (the admin dashboard) and gets no
CORS headers at all.
"""
from typing import Any, Dict, Optional

from fastapi import Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

import config

CORS_PATHS = (
    "/api/reels",
    "/api/sections",
    "/api/stories",
    "/api/testimonials",
    "/api/wedding-gallery",
)


def cors_headers(origin: Optional[str] = None) -> Dict[str, str]:
    allowed = config.ALLOWED_ORIGINS
    if origin and origin.rstrip("/") in allowed:
        allow_origin = origin
    else:
        allow_origin = allowed[0] if allowed else "*"
    return {
        "Access-Control-Allow-Origin": allow_origin,
        "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type, Authorization",
        "Access-Control-Max-Age": "86400",
        "Vary": "Origin",
    }


def headers_for(request: Request) -> Dict[str, str]:
    """CORS headers when the request targets a CORS-enabled path, else {}."""
    path = request.url.path
    if any(path == p or path.startswith(p + "/") for p in CORS_PATHS):
        return cors_headers(request.headers.get("origin"))
    return {}


def cors_response(data: Any, status_code: int = 200, request: Request = None) -> JSONResponse:
    origin = request.headers.get("origin") if request is not None else None
    return JSONResponse(content=jsonable_encoder(data), status_code=status_code, headers=cors_headers(origin))


def preflight(request: Request) -> Response:
    return Response(status_code=204, headers=cors_headers(request.headers.get("origin")))
