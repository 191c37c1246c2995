"""Logging helpers shared by the services and the API."""
import logging

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Manual status overrides are written here so they can be routed separately
AUDIT_LOGGER_NAME = "fulfillment.audit"


def get_logger(name: str) -> logging.Logger:
    """Module logger with a stream handler attached on first use."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(LOG_FORMAT)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger


def get_audit_logger() -> logging.Logger:
    """Logger for administrative actions that bypass normal rules."""
    return get_logger(AUDIT_LOGGER_NAME)


def configure_logging(level: int = logging.INFO) -> None:
    """Configure root logging for the application process."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
