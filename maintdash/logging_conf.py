import logging
import sys


def configure_logging(level: str = "INFO") -> None:
    """Configures the root logger for the dashboard."""
    numeric_level = getattr(logging, str(level).upper(), None)
    invalid = not isinstance(numeric_level, int)
    if invalid:
        numeric_level = logging.INFO

    # Format: "2026-10-17 10:00:00 [INFO] maintdash.periods: Resolved month..."
    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # streamlit reruns the script on every interaction
    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    root_logger.addHandler(handler)

    logging.getLogger("streamlit").setLevel(logging.WARNING)

    if invalid:
        logging.getLogger(__name__).warning("Invalid log level: %s, defaulting to INFO", level)
