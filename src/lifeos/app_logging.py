"""Logging setup for the API process."""

import logging

LOGGER_NAME = "lifeos"


def configure_logging(level: str = "INFO") -> None:
    """Attach one stream handler to the ``lifeos`` logger and set its level.

    Repeated calls only change the level, so app factories can call this freely.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.upper())
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    logger.addHandler(handler)
    logger.propagate = False
