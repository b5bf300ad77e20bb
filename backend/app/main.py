# backend/app/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.app.api.auth import router as auth_router
from backend.app.api.emails import router as emails_router
from backend.app.deps import get_settings
from gmail_inbox.config.log_setup import configure_logging

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    if not settings.oauth_configured:
        logger.warning("GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET are not set in .env")

    app = FastAPI(title="gmail-inbox API")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(auth_router)
    app.include_router(emails_router, prefix="/api")
    return app


app = create_app()


def run() -> None:
    import uvicorn

    settings = get_settings()
    logger.info("Backend server running on http://localhost:%d", settings.port)
    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
