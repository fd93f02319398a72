"""Logging setup and Logfire instrumentation."""

import logging
from logging.config import dictConfig

import logfire

from docstore import __version__
from docstore.config import Settings

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    """Configure root logging from settings. Safe to call more than once."""
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": settings.logging.format,
                    "datefmt": settings.logging.datefmt,
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "root": {"level": settings.logging.level, "handlers": ["console"]},
            # Driver heartbeat and topology messages are noisy below WARNING
            "loggers": {"pymongo": {"level": "WARNING"}},
        }
    )


def initialize_logfire(settings: Settings) -> bool:
    """
    Initialize Logfire and instrument the MongoDB driver.

    Must be called once at application startup, before the first
    MongoContext is created, so the command listener is registered on
    every client.

    Instruments:
    - PyMongo commands (Motor runs on top of PyMongo)
    - Python logging (bridged to Logfire)

    Returns:
        True if Logfire was configured, False if disabled or unavailable.
    """
    if not settings.logfire_token:
        logger.warning("Logfire token not set - observability disabled")
        return False

    try:
        logfire.configure(
            token=settings.logfire_token,
            service_name="docstore",
            service_version=__version__,
            environment=settings.environment,
        )

        logfire.instrument_pymongo()

        logging.getLogger().addHandler(logfire.LogfireLoggingHandler())

        logger.info("Logfire tracking initialized")
        return True

    except Exception as e:
        # Observability is optional; the store keeps working without it
        logger.warning(f"Failed to initialize Logfire: {e}")
        return False
