"""Process-wide setup that runs once, before the application is created.

Logging is configured before the message catalogues are loaded so that catalogue
loading is already rendered with the final structlog configuration.
"""

from dotenv import load_dotenv

from src.core.config.settings import settings
from src.core.logging import configure_logging, logger
from src.utils.i18n import setup_i18n


def initialize_application() -> None:
    """Load ``.env`` into the process, configure logging, load translations.

    Real environment variables always win over ``.env`` values.
    """
    load_dotenv(override=False)

    configure_logging(log_level=settings.LOG_LEVEL, json_logs=settings.LOG_JSON)

    setup_i18n()

    logger.info(
        "gate_configured",
        supported_locales=settings.SUPPORTED_LOCALES,
        default_locale=settings.DEFAULT_LOCALE,
        rate_limit_rules=len(settings.RATE_LIMIT_RULES),
        protected_paths=len(settings.PROTECTED_PATHS),
        admin_paths=len(settings.ADMIN_PATHS),
        protected_api_paths=len(settings.PROTECTED_API_PATHS),
    )
