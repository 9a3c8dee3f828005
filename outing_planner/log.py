# outing_planner/log.py
import logging
import os


def get_logger(name: str) -> logging.Logger:
    """Return a module logger with the service-wide stream handler and level."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
        logger.addHandler(handler)
    level = os.getenv("OUTING_PLANNER_LOG_LEVEL", "INFO").upper()
    logger.setLevel(getattr(logging, level, logging.INFO))
    logger.propagate = False
    return logger
