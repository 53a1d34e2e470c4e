import logging

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration

from contapyme.core.config import settings

logger = logging.getLogger(__name__)

_initialized = False


def init_monitoring() -> None:
    """Initialise Sentry once per process when a DSN is configured."""
    global _initialized
    if _initialized:
        return
    dsn = settings.SENTRY_DSN
    if dsn:
        sentry_sdk.init(
            dsn=dsn,
            integrations=[FastApiIntegration()],
            traces_sample_rate=0.1,
            profiles_sample_rate=0.0,
            environment=settings.ENV,
            release=f"contapyme-backend@{settings.ENV}",
        )
        logger.info("Sentry initialized")
    _initialized = True
