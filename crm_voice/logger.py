"""
Logging System

Per-module loggers for the voice pipeline. Output goes to stdout and/or a
log file according to the ``logging.*`` config section.
"""

import logging
import os
import sys
from pathlib import Path

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Set by interactive frontends that print responses to stdout
FILE_ONLY_ENV = "CRM_VOICE_LOG_FILE_ONLY"
DEFAULT_FILE_ONLY_PATH = "logs/crm_voice.log"


def _output_settings(config):
    """Resolve (level, log file, console flag) from config and environment."""
    get = config.get if config else (lambda key, default=None: default)

    level = getattr(logging, str(get("logging.level", "INFO")).upper(), logging.INFO)
    log_file = get("logging.file")
    console = bool(get("logging.console", True))

    if os.environ.get(FILE_ONLY_ENV):
        console = False
        if not log_file:
            fallback = Path(get("logging.file_only_path") or DEFAULT_FILE_ONLY_PATH)
            log_file = str(fallback if fallback.is_absolute() else Path.cwd() / fallback)

    return level, log_file, console


class Logger:
    """Cache of configured crm_voice loggers, one per module name."""

    _loggers = {}

    @classmethod
    def get_logger(cls, name: str, config=None) -> logging.Logger:
        """
        Return the logger for ``name``, attaching handlers on first use.

        Args:
            name: Logger name (usually __name__)
            config: Configuration object (optional)
        """
        cached = cls._loggers.get(name)
        if cached is not None:
            return cached

        logger = logging.getLogger(name)
        if not logger.handlers:
            cls._attach_handlers(logger, config)

        cls._loggers[name] = logger
        return logger

    @classmethod
    def _attach_handlers(cls, logger: logging.Logger, config) -> None:
        level, log_file, console = _output_settings(config)
        logger.setLevel(level)
        formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

        handlers = []
        if console:
            handlers.append(logging.StreamHandler(sys.stdout))
        if log_file:
            Path(log_file).parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(log_file))

        for handler in handlers:
            handler.setLevel(level)
            handler.setFormatter(formatter)
            logger.addHandler(handler)

        logger.propagate = False

    @classmethod
    def reset(cls) -> None:
        """Drop cached loggers and their handlers (used when config changes)."""
        for logger in cls._loggers.values():
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
                handler.close()
        cls._loggers.clear()


def get_logger(name: str, config=None) -> logging.Logger:
    """Shortcut for Logger.get_logger()."""
    return Logger.get_logger(name, config)
