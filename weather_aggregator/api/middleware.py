from __future__ import annotations

import time
import uuid

import structlog
from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

logger = structlog.get_logger(__name__)

ERROR_CODES = {
    400: "bad_request",
    502: "bad_gateway",
    503: "service_unavailable",
}


class RequestIDMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return
        request_id = uuid.uuid4().hex
        scope.setdefault("state", {})
        scope["state"]["request_id"] = request_id

        start = time.perf_counter()

        async def send_wrapper(message):
            if message.get("type") == "http.response.start":
                headers = message.setdefault("headers", [])
                headers.append((b"x-request-id", request_id.encode()))
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            dur_ms = int((time.perf_counter() - start) * 1000)
            logger.info(
                "request_completed",
                method=scope.get("method", ""),
                path=scope.get("path", ""),
                duration_ms=dur_ms,
                request_id=request_id,
            )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    req_id = getattr(getattr(request, "state", None), "request_id", None) or ""
    code = ERROR_CODES.get(exc.status_code, "http_error")
    body = {"error": {"code": code, "message": str(exc.detail), "request_id": req_id}}
    # Header added by RequestIDMiddleware; avoid duplicates here
    return JSONResponse(status_code=exc.status_code, content=body)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    req_id = getattr(getattr(request, "state", None), "request_id", None) or ""
    logger.exception("unhandled_error", request_id=req_id)
    body = {"error": {"code": "internal_error", "message": str(exc), "request_id": req_id}}
    return JSONResponse(status_code=500, content=body)
