import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Environment is loaded by Pydantic Settings (see socialhub.core.settings).
from socialhub.api import register_routes
from socialhub.core.dependencies import (
    get_conversation_store,
    get_group_service,
    get_notification_service,
    get_story_service,
    get_user_account_service,
)
from socialhub.core.exceptions import register_exception_handlers
from socialhub.core.logging import setup_logging
from socialhub.core.settings import settings

# Initialize logging early so all modules inherit the handlers/level
setup_logging()

logger = logging.getLogger(__name__)

_INDEXED_SERVICES = (
    ("Conversation", get_conversation_store),
    ("Group", get_group_service),
    ("Notification", get_notification_service),
    ("Story", get_story_service),
    ("User", get_user_account_service),
)


def create_app() -> FastAPI:
    app = FastAPI(title="SocialHub API")
    register_exception_handlers(app)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_routes(app)

    @app.on_event("startup")
    def _ensure_indexes_on_startup() -> None:
        """Ensure Mongo indexes exist once at boot.

        Best-effort: logs a warning on failure but does not block app startup.
        """
        for label, provider in _INDEXED_SERVICES:
            try:
                provider().ensure_indexes()
                logger.info("%s indexes ensured", label)
            except Exception as exc:  # pragma: no cover - external dependency
                logger.warning("Failed to ensure %s indexes: %s", label, exc)

    logger.info("SocialHub API initialized")
    return app


app = create_app()
