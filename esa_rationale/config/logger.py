"""Service logging: one stream handler plus a rotating debug file.

Everything hangs off the ``uvicorn.error`` logger so request logs and
pipeline logs share handlers when served by uvicorn.
"""

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from esa_rationale.config.settings import Settings, settings

_BASE_LOGGER_NAME = "uvicorn.error"
_CONFIGURED = False


def _level(name: str, fallback: int) -> int:
    level = logging.getLevelName((name or "").strip().upper())
    return level if isinstance(level, int) else fallback


def _file_handler(config: Settings) -> logging.Handler | None:
    log_dir = Path(config.LOG_DIR)
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        handler = TimedRotatingFileHandler(
            filename=str(log_dir / config.LOG_FILE_NAME),
            when=config.LOG_FILE_WHEN,
            interval=config.LOG_FILE_INTERVAL,
            backupCount=max(config.LOG_FILE_BACKUP_COUNT, 0),
            encoding=config.LOG_FILE_ENCODING,
        )
    except (OSError, ValueError) as exc:
        logging.getLogger(_BASE_LOGGER_NAME).warning(
            "[logger] debug file disabled at '%s': %s", log_dir, exc
        )
        return None
    handler.setLevel(_level(config.LOG_FILE_LEVEL, logging.DEBUG))
    return handler


def configure_logging(config: Settings | None = None) -> None:
    global _CONFIGURED
    if _CONFIGURED:
        return

    config = config or settings
    base_logger = logging.getLogger(_BASE_LOGGER_NAME)
    base_logger.setLevel(_level(config.LOG_LEVEL, logging.INFO))

    handlers: list[logging.Handler] = []
    if not base_logger.handlers:
        handlers.append(logging.StreamHandler())
        base_logger.propagate = False
    file_handler = _file_handler(config)
    if file_handler is not None:
        handlers.append(file_handler)

    formatter = logging.Formatter(config.LOG_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        base_logger.addHandler(handler)

    _CONFIGURED = True


def get_logger(name: str | None = None) -> logging.Logger:
    configure_logging()
    base_logger = logging.getLogger(_BASE_LOGGER_NAME)
    if not name:
        return base_logger
    return base_logger.getChild(name)


def log_stage(logger: logging.Logger, stage: str, text: str, **fields) -> None:
    """Log a pipeline stage result as ``[stage] k=v ... chars=N`` plus a clipped body."""
    text = text or ""
    limit = settings.LOG_TRUNCATE
    context = " ".join(f"{key}={value}" for key, value in fields.items())
    body = text if len(text) <= limit else f"{text[:limit]} ...[truncated {len(text) - limit} chars]"
    logger.info("[%s] %s chars=%d\n%s", stage, context, len(text), body or "[EMPTY]")
