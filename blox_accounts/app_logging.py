import logging
from pythonjsonlogger.json import JsonFormatter


def setup_logger(level: int = logging.INFO, json: bool = True) -> None:
    logHandler = logging.StreamHandler()
    if json:
        formatter = JsonFormatter(
            '%(asctime)s %(levelname)s %(name)s %(message)s',
            rename_fields={'levelname': 'level', 'asctime': 'timestamp'}
        )
    else:
        formatter = logging.Formatter(
            '%(asctime)s %(levelname)s %(name)s %(message)s'
        )
    logHandler.setFormatter(formatter)
    logger = logging.getLogger()
    logger.addHandler(logHandler)
    logger.setLevel(level)
