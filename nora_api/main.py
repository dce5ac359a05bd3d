import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from nora_api.api.errors import register_exception_handlers
from nora_api.api.router import api_router
from nora_api.api.routes.health import router as health_router
from nora_api.config import settings
from nora_api.logging_config import configure_logging
from nora_api.middleware.request_logging import RequestLoggingMiddleware

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    configure_logging(settings.LOG_LEVEL, debug=settings.DEBUG)

    app = FastAPI(title="Nora API")

    # 1. CORS for the mobile client and local tooling
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins or ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    # 2. Errors rendered as {"error": ...}
    register_exception_handlers(app)

    # 3. Routes
    app.include_router(health_router, tags=["Health"])
    app.include_router(api_router, prefix="/api")

    return app


app = create_app()


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser()
    parser.add_argument("--host", type=str, default=settings.HOST)
    parser.add_argument("--port", type=int, default=settings.PORT)
    parser.add_argument("--reload", action="store_true")
    args = parser.parse_args()

    logger.info("Nora API starting on http://%s:%d (env=%s)", args.host, args.port, settings.ENV)

    uvicorn.run("nora_api.main:app", host=args.host, port=args.port, reload=args.reload)
