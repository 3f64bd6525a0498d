import logging
import os
from collections import OrderedDict
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

import structlog

DEFAULT_LOG_DIR = os.path.join(os.path.expanduser("~"), ".cache", "inkwell", "logs")


def setup_logger(
    name: str = "inkwell",
    *,
    log_dir: Optional[str] = None,
    logger_level: int | str = logging.DEBUG,
    stream_level: int | str = logging.ERROR,
    add_stream_handler: bool = True,
    file_level: int | str = logging.DEBUG,
    add_file_handler: bool = True,
    propagate: bool = False,
    max_bytes: int = 10 * 1024 * 1024,  # 10 MB
    backup_count: int = 5,
    json_logs: bool = True,
) -> structlog.stdlib.BoundLogger:
    """Configure and initialize structured logging for Inkwell components.

    Sets up a rotating file handler and a console handler on the stdlib logger
    ``name`` and returns a structlog BoundLogger writing through it. The log file
    defaults to ~/.cache/inkwell/logs/{name}.log.

    Args:
        name: Logger name, defaults to "inkwell".
        log_dir: Custom directory for the log file.
        logger_level: Overall logger level.
        stream_level: StreamHandler level (e.g., ERROR).
        add_stream_handler: Whether to add a stream handler.
        file_level: FileHandler level (e.g., DEBUG).
        add_file_handler: Whether to add a file handler.
        propagate: Whether the logger should propagate messages to ancestor loggers.
        max_bytes: Maximum size in bytes before rotating the log file.
        backup_count: Number of backup files to retain.
        json_logs: Render JSON if True; otherwise use the structlog console renderer.

    Returns:
        structlog.stdlib.BoundLogger: Configured logger instance.
    """
    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="ISO"),
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _enforce_key_order_processor(["timestamp", "event", "level", "logger", "duration_ms"]),
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    stdlib_logger = logging.getLogger(name)
    stdlib_logger.handlers.clear()
    stdlib_logger.setLevel(logger_level)
    stdlib_logger.propagate = propagate

    if add_stream_handler:
        stream_handler = logging.StreamHandler()
        stream_handler.setLevel(stream_level)
        stream_handler.setFormatter(logging.Formatter("%(message)s"))
        stdlib_logger.addHandler(stream_handler)

    if add_file_handler:
        log_file_path = os.path.join(log_dir or DEFAULT_LOG_DIR, f"{name}.log")
        os.makedirs(Path(log_file_path).parent, exist_ok=True)
        file_handler = RotatingFileHandler(filename=log_file_path, maxBytes=max_bytes, backupCount=backup_count)
        file_handler.setLevel(file_level)
        file_handler.setFormatter(logging.Formatter("%(message)s"))
        stdlib_logger.addHandler(file_handler)

    return structlog.get_logger(name)


def _enforce_key_order_processor(key_order: list[str]):
    def _processor(_logger, _method_name, event_dict):
        ordered = OrderedDict()
        for key in key_order:
            if key in event_dict:
                ordered[key] = event_dict.pop(key)
        for k in sorted(event_dict.keys()):
            ordered[k] = event_dict[k]
        return ordered

    return _processor


def get_logger(name: str | None = "inkwell", **kwargs) -> structlog.stdlib.BoundLogger:
    """Create or retrieve a named logger under the ``inkwell`` hierarchy.

    Child loggers propagate to the ``inkwell`` root logger and carry no handlers
    of their own; the root is configured on first use.

    Example:
        .. code-block:: python

            from inkwell.logger import get_logger

            logger = get_logger("resolvers.posts")
            logger.info("post created", post_id="6650f0c2a1b2c3d4e5f60718")
    """
    if not name:
        name = "inkwell"
    full_name = name if name.startswith("inkwell") else f"inkwell.{name}"

    root = logging.getLogger("inkwell")
    if full_name == "inkwell":
        return setup_logger("inkwell", **kwargs)
    if not root.handlers:
        setup_logger("inkwell", **kwargs)

    child = logging.getLogger(full_name)
    child.propagate = True
    return structlog.get_logger(full_name)
