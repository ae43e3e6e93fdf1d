import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(log_level_str: str = "INFO") -> None:
    """Configure console logging for the application.

    Safe to call more than once; the handler is only installed the first time.
    """
    log_level = getattr(logging, log_level_str.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    if not any(getattr(h, "_psyche7", False) for h in root_logger.handlers):
        log_handler = logging.StreamHandler(sys.stderr)
        log_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        log_handler._psyche7 = True  # type: ignore[attr-defined]
        root_logger.addHandler(log_handler)
    root_logger.debug("Logging configured with level: %s", logging.getLevelName(log_level))
