import logging
from typing import Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from nora_api.ai.llm_client import LLMRateLimitError
from nora_api.usage.errors import UsageError

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """
    An error returned to the client as {"error": ...}.
    """

    def __init__(
        self,
        status_code: int,
        error: str,
        headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.headers = headers


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.error},
        headers=exc.headers,
    )


async def usage_error_handler(request: Request, exc: UsageError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("Rejected malformed body on %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


async def rate_limit_handler(request: Request, exc: LLMRateLimitError) -> JSONResponse:
    logger.warning("Provider rate limit on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=503,
        content={"error": "OpenAI rate limit exceeded. Please retry after a short pause."},
        headers={"Retry-After": exc.retry_after or "30"},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Something went wrong"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(UsageError, usage_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(LLMRateLimitError, rate_limit_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
