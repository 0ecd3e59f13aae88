"""
Loguru configuration.

Installed through Django's ``LOGGING_CONFIG`` hook, so it runs once during
``django.setup()`` with the ``LOGGING`` dict from settings. Standard library
loggers (django, rest_framework, ...) are intercepted and routed to loguru.
"""

import logging
import sys
from pathlib import Path

from loguru import logger


LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


class InterceptHandler(logging.Handler):
    """Forward standard library log records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def configure_logging(options: dict) -> None:
    """
    Configure loguru sinks and intercept standard logging.

    Args:
        options: The ``LOGGING`` settings dict. Recognised keys are
            ``level``, ``file_path``, ``rotation``, ``retention`` and
            ``serialize``. An empty ``file_path`` disables the file sink.
    """
    level = str(options.get('level', 'INFO')).upper()

    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT, colorize=True)

    file_path = options.get('file_path')
    if file_path:
        path = Path(file_path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            logger.add(
                path,
                level=level,
                format=LOG_FORMAT,
                rotation=options.get('rotation', '1 day'),
                retention=options.get('retention', '7 days'),
                serialize=options.get('serialize', False),
                enqueue=True,
                backtrace=True,
                diagnose=False,
                encoding='utf-8',
            )
        except OSError as e:
            logger.error(f"Failed to set up file logging at {path}: {e}")

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in ('django', 'django.request', 'django.server', 'django.db.backends'):
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False

    logger.debug(f"Loguru logging configured at level {level}")
