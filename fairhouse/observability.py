"""Logfire setup for the CLI host."""

import logging

import logfire

from fairhouse import __version__
from fairhouse.config import Settings

logger = logging.getLogger(__name__)


def initialize_logfire(settings: Settings) -> None:
    """
    Configure Logfire once per process.

    Engine operations open ``settlement.*`` spans whether or not a token is
    set; without one they stay local. With a token, spans, pydantic
    validation and stdlib log records are exported under the ``fairhouse``
    service.

    Args:
        settings: Application settings carrying the Logfire token
    """
    if not settings.logfire_token:
        logfire.configure(send_to_logfire=False, console=False)
        logger.warning("LOGFIRE_TOKEN not set - traces stay local")
        return

    try:
        logfire.configure(
            token=settings.logfire_token,
            service_name="fairhouse",
            service_version=__version__,
            environment=settings.environment,
        )
        logfire.instrument_pydantic()
        logging.getLogger().addHandler(logfire.LogfireLoggingHandler())
        logger.info(f"✓ Logfire export enabled ({settings.environment})")

    except Exception as e:
        logger.warning(f"Failed to initialize Logfire: {e}")
