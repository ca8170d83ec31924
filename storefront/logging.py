import logging
import logging.config
import os

LOGGING_CONF = os.path.join(os.path.dirname(__file__), "logging.conf")


def setup_logging(level: str = "INFO", log_dir: str = "logs"):
    """Configures the root logger from logging.conf (console + rotating file)."""
    # Ensure logs directory exists
    os.makedirs(log_dir, exist_ok=True)

    logging.config.fileConfig(
        LOGGING_CONF,
        defaults={"logfilename": os.path.join(log_dir, "storefront.log").replace("\\", "/")},
        disable_existing_loggers=False,
    )
    logging.getLogger().setLevel(level.upper())
