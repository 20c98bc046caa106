import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path


def create_file_handler(log_file, formatter: logging.Formatter, max_bytes: int = 10_000_000,
                        backup_count: int = 5) -> RotatingFileHandler:
    Path(log_file).parent.mkdir(exist_ok=True, parents=True)
    handler = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
    handler.setFormatter(formatter)
    return handler


def setup_logger(level: str = "INFO", fmt: str = '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
                 datefmt: str = None, log_file=None):
    """Корневой логгер: консоль и, если задан файл, ротация по размеру"""
    logger = logging.getLogger()
    logger.setLevel(getattr(logging, level))
    formatter = logging.Formatter(fmt, datefmt=datefmt)

    for handler in list(logger.handlers):
        if getattr(handler, "_dailytrack", False):
            logger.removeHandler(handler)
            handler.close()

    handlers = [logging.StreamHandler()]
    if log_file is not None:
        handlers.append(create_file_handler(log_file, formatter))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler._dailytrack = True
        logger.addHandler(handler)
    return logger
