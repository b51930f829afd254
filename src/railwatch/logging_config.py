"""
Centralized logging configuration for the monitor process.

``setup_logging`` configures the root logger once per process with:
- Console output on stdout (technical format, or bare messages in user-friendly mode)
- Optional file output to ``<log_directory>/<service_name>.log``
- A fresh log file on each start unless ``LOG_APPEND=1``
"""

import logging
import logging.handlers
import sys
import threading
from pathlib import Path
from typing import Optional, Union

from .config import env_bool, env_str

_config_lock = threading.Lock()
_MODULE_LOGGER = logging.getLogger(__name__)
_TECHNICAL_FORMAT = "%(asctime)s%(msecs)03d - %(name)s - %(levelname)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_NOISY_LOGGERS = ("urllib3", "asyncio", "aiohttp", "aiohttp.access", "redis", "redis.connection", "redis.asyncio")


def _close_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        try:
            handler.close()
        except OSError as exc:  # Best-effort cleanup operation  # policy_guard: allow-silent-handler
            _MODULE_LOGGER.debug("Handler close failed for logger '%s': %s", logger.name, exc)


def _should_skip_logging_configuration(root_logger: logging.Logger, service_name: Optional[str]) -> bool:
    if not root_logger.handlers:
        return False
    has_console = any(
        isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler)
        for handler in root_logger.handlers
    )
    if not service_name:
        return has_console
    has_file = any(isinstance(handler, logging.FileHandler) for handler in root_logger.handlers)
    return has_console and has_file


def _build_console_handler(user_friendly: bool) -> logging.Handler:
    if user_friendly:
        formatter = logging.Formatter("%(message)s")
    else:
        formatter = logging.Formatter(_TECHNICAL_FORMAT, _DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(logging.WARNING if user_friendly else logging.DEBUG)
    return console_handler


def _resolve_log_directory(log_directory: Optional[Union[str, Path]]) -> Path:
    if log_directory is not None:
        return Path(log_directory).expanduser()
    configured = env_str("RAILWATCH_LOG_DIR")
    if configured:
        return Path(configured).expanduser()
    return Path.cwd() / "logs"


def _configure_file_handler(service_name: Optional[str], log_directory: Optional[Union[str, Path]]) -> Optional[logging.Handler]:
    if not service_name:
        return None

    logs_dir = _resolve_log_directory(log_directory)
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_path = logs_dir / f"{service_name}.log"
    file_mode = "a" if env_bool("LOG_APPEND", or_value=False) else "w"

    file_handler = logging.handlers.WatchedFileHandler(log_path, mode=file_mode)
    file_handler.setFormatter(logging.Formatter(_TECHNICAL_FORMAT, _DATE_FORMAT))
    file_handler.setLevel(logging.INFO)
    return file_handler


def _suppress_noisy_third_parties() -> None:
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def setup_logging(
    service_name: Optional[str] = None,
    user_friendly: bool = False,
    log_directory: Optional[Union[str, Path]] = None,
) -> None:
    """Configure logging for the application"""

    with _config_lock:
        root_logger = logging.getLogger()
        if _should_skip_logging_configuration(root_logger, service_name):
            return

        _close_handlers(root_logger)
        root_logger.handlers = []
        root_logger.addHandler(_build_console_handler(user_friendly))

        file_handler = _configure_file_handler(service_name, log_directory)
        if file_handler:
            root_logger.addHandler(file_handler)

        root_logger.setLevel(logging.INFO)
        _suppress_noisy_third_parties()


__all__ = ["setup_logging"]
