"""
FastAPI Application Entry Point

Integrates:
  - WhatsApp webhook (handshake + message relay)
  - Health checks
  - Middleware for logging & error handling

Run: python main.py
 or: uvicorn main:app --host 0.0.0.0 --port 8080
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from agent.replies import compose_reply
from config import RelayConfig
from inference import ModelBackend
from transport.whatsapp import WhatsAppSender, create_router

__version__ = "1.0.0"

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def create_app(
    config: Optional[RelayConfig] = None,
    sender: Optional[WhatsAppSender] = None,
    backend: Optional[ModelBackend] = None,
) -> FastAPI:
    """
    Build the relay application.

    Args:
        config: Relay configuration; loaded from the environment when omitted
        sender: Override for the send-message client (tests)
        backend: Override for the completion backend (tests)
    """
    config = config or RelayConfig.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan: startup and shutdown handlers.
        """
        # Startup
        logger.info("=" * 60)
        logger.info("WhatsApp relay starting up...")
        logger.info(f"Environment: {config.environment}")
        logger.info(f"Webhook path: {config.webhook_path}")
        logger.info(f"Inbound schema: {config.inbound_schema}")
        logger.info(f"Reply policy: {config.reply_policy}")
        missing = config.missing_settings()
        if missing:
            logger.warning(f"Missing settings: {', '.join(missing)}")
        logger.info("=" * 60)

        yield

        # Shutdown
        logger.info("WhatsApp relay shutting down...")

    app = FastAPI(
        title="WhatsApp Relay",
        description="Webhook relay for the WhatsApp Cloud API",
        version=__version__,
        lifespan=lifespan,
    )

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

    app.include_router(create_router(config, compose_reply, sender=sender, backend=backend))

    # Health check endpoints
    @app.get("/health/live")
    async def health_live():
        """Live health check (Kubernetes liveness probe)."""
        return {"status": "alive"}

    @app.get("/health/ready")
    async def health_ready():
        """Readiness health check (Kubernetes readiness probe)."""
        missing = config.missing_settings()
        if missing:
            return {"status": "not_ready", "missing": missing}
        return {"status": "ready"}

    @app.get("/")
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "WhatsApp Relay",
            "version": __version__,
            "status": "running",
            "endpoints": {
                "webhook_verify": f"GET {config.webhook_path}",
                "webhook_events": f"POST {config.webhook_path}",
                "health_live": "GET /health/live",
                "health_ready": "GET /health/ready",
                "config_info": "GET /config/info",
            },
        }

    @app.get("/config/info")
    async def config_info():
        """Get non-sensitive configuration info."""
        return config.public_info()

    app.state.config = config
    return app


settings = RelayConfig.from_env()
configure_logging(settings.log_level)
app = create_app(settings)


if __name__ == "__main__":
    import uvicorn

    # uvicorn exits non-zero when the port cannot be bound
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
