import logging
from typing import Union


class LoggingConstants:
    NAME_WIDTH = 16
    FORMAT = "%(asctime)s.%(msecs)03d %(levelname)-7s %(name)-{width}s %(message)s"
    DATE_FORMAT = "%H:%M:%S"
    DEFAULT_LEVEL = logging.INFO


def setup_logging(level: Union[int, str] = LoggingConstants.DEFAULT_LEVEL) -> None:
    if isinstance(level, str):
        level = getattr(logging, level.upper(), LoggingConstants.DEFAULT_LEVEL)
    logging.basicConfig(
        level=level,
        format=LoggingConstants.FORMAT.format(width=LoggingConstants.NAME_WIDTH),
        datefmt=LoggingConstants.DATE_FORMAT,
    )
