"""
FastAPI Application Entry Point

Integrates:
  - WhatsApp webhook (verification + message delivery)
  - Health checks
  - Middleware for logging & error handling

Run: uvicorn main:app --reload --host 0.0.0.0 --port 8000
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import Config, get_config
from transport.whatsapp import WebhookDispatcher, router as whatsapp_router

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(
    config: Optional[Config] = None,
    dispatcher: Optional[WebhookDispatcher] = None,
) -> FastAPI:
    """
    Build the application.

    Config is read once here and handed to the dispatcher; request handlers
    never consult the environment.

    Args:
        config: Configuration (defaults to Config.from_env())
        dispatcher: Pre-wired dispatcher (tests inject fakes here)
    """
    config = config or get_config()
    logging.getLogger().setLevel(config.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        logger.info("=" * 60)
        logger.info("WhatsApp RAG bridge starting up...")
        logger.info(f"Environment: {config.environment}")
        logger.info(f"RAG Backend: {config.rag_backend} ({config.rag_backend_url})")
        logger.info(f"Signature check: {'on' if config.whatsapp_app_secret else 'off'}")
        missing = config.missing()
        if missing:
            logger.warning(f"Missing required environment variables: {', '.join(missing)}")
        logger.info("=" * 60)

        yield

        # Shutdown
        logger.info("WhatsApp RAG bridge shutting down...")

    app = FastAPI(
        title="WhatsApp RAG Bridge",
        description="Relays WhatsApp messages to a RAG backend and back",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.dispatcher = dispatcher or WebhookDispatcher.from_config(config)

    # Middleware for logging
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all requests."""
        logger.debug(f"{request.method} {request.url.path}")
        try:
            response = await call_next(request)
            return response
        except Exception as e:
            logger.error(f"Request error: {str(e)}", exc_info=True)
            return JSONResponse(
                status_code=500,
                content={"detail": "Internal server error"},
            )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Plain-text 405 for methods without a route (HEAD, TRACE...)."""
        if exc.status_code == 405:
            return PlainTextResponse("Method not allowed", status_code=405)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    # Include routers
    app.include_router(whatsapp_router)

    # Health check endpoints
    @app.get("/health/live")
    async def health_live():
        """Live health check (Kubernetes liveness probe)."""
        return {"status": "alive"}

    @app.get("/health/ready")
    async def health_ready():
        """Readiness health check (Kubernetes readiness probe)."""
        missing = config.missing()
        if missing:
            return {"status": "not_ready", "missing": missing}
        return {"status": "ready"}

    @app.get("/")
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "WhatsApp RAG Bridge",
            "version": "1.0.0",
            "status": "running",
            "endpoints": {
                "whatsapp_verify": "GET /webhook/whatsapp",
                "whatsapp_webhook": "POST /webhook/whatsapp",
                "health_live": "GET /health/live",
                "health_ready": "GET /health/ready",
            },
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = app.state.config
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.environment == "development",
    )
