"""Logging for retrofx.

Modules log to ``retrofx.<module>`` loggers. Warnings (rejected input,
failed writes, bad environment settings) go to stderr. Debug records
(skipped ``?fx=`` tokens, truncated renders, template draws) are only
emitted with ``RETROFX_DEBUG`` set, to stderr and to ``retrofx.log``.
Failures reported through ``report_failure`` always append their traceback
to ``retrofx.log`` under ``RETROFX_LOG_DIR``.
"""

from __future__ import annotations

import logging
import os
import sys
import traceback
from datetime import datetime
from pathlib import Path

LOG_DIR_ENV = "RETROFX_LOG_DIR"
DEBUG_ENV = "RETROFX_DEBUG"
LOG_FILE_NAME = "retrofx.log"

_LOGGER = logging.getLogger("retrofx.logging")
_PACKAGE_LOGGER = "retrofx"
_CONSOLE_HANDLER = "retrofx.console"
_DEBUG_FILE_HANDLER = "retrofx.debug-file"
_CONSOLE_FORMAT = "retrofx %(levelname)s %(name)s: %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_FALSE_VALUES = frozenset({"", "0", "false", "no", "off"})


def debug_enabled() -> bool:
    return os.environ.get(DEBUG_ENV, "").strip().lower() not in _FALSE_VALUES


def get_log_dir() -> Path:
    configured = os.environ.get(LOG_DIR_ENV)
    if configured:
        return Path(configured).expanduser()
    return Path.home() / ".cache" / "retrofx" / "logs"


def get_log_path() -> Path:
    return get_log_dir() / LOG_FILE_NAME


def _owned_handlers(logger: logging.Logger) -> list[logging.Handler]:
    names = (_CONSOLE_HANDLER, _DEBUG_FILE_HANDLER)
    return [handler for handler in logger.handlers if handler.get_name() in names]


def _debug_file_handler() -> logging.Handler | None:
    try:
        get_log_dir().mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        _LOGGER.warning("Debug log file disabled: %s", exc)
        return None
    handler = logging.FileHandler(get_log_path(), encoding="utf-8", delay=True)
    handler.set_name(_DEBUG_FILE_HANDLER)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT))
    return handler


def configure_logging(*, force: bool = False, verbose: bool | None = None) -> logging.Logger:
    """Install retrofx's handlers on the ``retrofx`` logger.

    Later calls leave existing handlers alone unless ``force`` is set.
    ``verbose`` overrides ``RETROFX_DEBUG``. The stderr handler is skipped
    when the host application has already configured the root logger.
    """
    logger = logging.getLogger(_PACKAGE_LOGGER)
    owned = _owned_handlers(logger)
    if owned and not force:
        return logger
    for handler in owned:
        logger.removeHandler(handler)
        handler.close()

    chatty = debug_enabled() if verbose is None else verbose
    logger.setLevel(logging.DEBUG if chatty else logging.WARNING)

    if force or not logging.getLogger().handlers:
        console = logging.StreamHandler(stream=sys.stderr)
        console.set_name(_CONSOLE_HANDLER)
        console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
        logger.addHandler(console)

    if chatty:
        file_handler = _debug_file_handler()
        if file_handler is not None:
            logger.addHandler(file_handler)

    # caplog and host handlers on the root logger still see retrofx records.
    logger.propagate = True
    return logger


def log_exception(context: str, exc: BaseException) -> Path | None:
    """Append ``exc`` and its traceback to the retrofx log file."""

    path = get_log_path()
    stamp = datetime.now().isoformat(timespec="seconds")
    lines = traceback.format_exception(type(exc), exc, exc.__traceback__)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as handle:
            handle.write(f"[{stamp}] {context} failed: {type(exc).__name__}: {exc}\n")
            handle.writelines(lines)
            handle.write("\n")
    except OSError as log_exc:
        _LOGGER.warning("Could not write %s: %s", path, log_exc)
        return None
    return path


def report_failure(logger: logging.Logger, context: str, exc: BaseException) -> Path | None:
    """Warn about a failed operation and record its traceback in the log file."""

    logger.warning("%s failed: %s", context, exc, exc_info=debug_enabled())
    return log_exception(context, exc)
