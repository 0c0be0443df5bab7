"""
Application entry point.

Configures logging and Sentry, then delegates to the app factory.
"""

import logging

from clinicbot.config.settings import get_settings
from clinicbot.core.app_factory import create_app
from clinicbot.integrations.monitoring import configure_sentry

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)

configure_sentry(settings)

app = create_app(settings)

if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting application in {settings.ENVIRONMENT} mode")
    uvicorn.run(
        "clinicbot.main:app",
        host="0.0.0.0",
        port=8001,
        reload=settings.DEBUG,
    )
