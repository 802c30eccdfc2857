"""Centralized logging configuration for the ``memo_finetune`` package.

Two public helpers:

- ``configure_logging(...)``: attach a single ``StreamHandler`` to the package
  root logger (``"memo_finetune"``). Called once by the CLI at startup.
- ``get_logger(name)``: acquire a logger by name, attaching a ``NullHandler``
  to the package root logger until the CLI (or a host application) configures
  real handlers.

Library modules never attach handlers of their own; they call
``get_logger("memo_finetune.<module>")`` and nothing else.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "memo_finetune"
_LEVEL_ENV = "MEMO_FINETUNE_LOG_LEVEL"
_DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_handler: logging.Handler | None = None


def _level_from_name(name: str) -> int | None:
    name = name.strip().upper()
    if name.isdigit():
        return int(name)
    numeric = getattr(logging, name, None)
    return numeric if isinstance(numeric, int) else None


def _parse_level(level: int | str | None) -> int:
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        parsed = _level_from_name(level)
        if parsed is not None:
            return parsed
    # Env override when ``level`` is missing or unrecognized
    env_val = os.getenv(_LEVEL_ENV)
    if env_val:
        parsed = _level_from_name(env_val)
        if parsed is not None:
            return parsed
    return logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> None:
    """Configure the package root logger.

    Calling this again replaces the handler installed by the previous call, so
    repeated CLI invocations in one process (tests) do not stack handlers.

    Parameters
    ----------
    level:
        ``int`` or level name (``"DEBUG"``). ``None`` falls back to
        ``MEMO_FINETUNE_LOG_LEVEL`` and then to ``INFO``.
    fmt:
        Optional format string.
    stream:
        Output stream; defaults to the current ``sys.stderr``.
    """

    global _handler

    logger = logging.getLogger(_PKG_LOGGER_NAME)
    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler) or h is _handler:
            logger.removeHandler(h)

    resolved = _parse_level(level)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT))

    logger.setLevel(resolved)
    logger.addHandler(handler)
    # Avoid double emission via the root logger.
    logger.propagate = False
    _handler = handler


def get_logger(name: str) -> logging.Logger:
    """Return a logger by name with library-safe defaults."""

    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if _handler is None and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger"]
