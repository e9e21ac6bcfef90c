# SPDX-License-Identifier: LGPL-3.0-or-later
# regsettings/core/logger.py
"""
Logging helpers for regsettings.

The package never installs handlers; applications configure ``logging`` as
they like. Records may carry a ``ctx`` dict (see ``Log.bind``) with the
settings class and property they concern.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Tuple

PROJECT_LOGGER = "regsettings"

# Below DEBUG: one record per discovered/mapped property.
TRACE = 5
if not hasattr(logging, "TRACE"):
    logging.TRACE = TRACE  # type: ignore[attr-defined]
    logging.addLevelName(TRACE, "TRACE")


def _logger_trace(self: logging.Logger, msg: str, *args, **kwargs) -> None:
    if self.isEnabledFor(TRACE):
        self._log(TRACE, msg, args, **kwargs)


if not hasattr(logging.Logger, "trace"):
    logging.Logger.trace = _logger_trace  # type: ignore[attr-defined]

Ctx = Mapping[str, Any]


def _merge_ctx(base: Optional[Ctx], extra: Optional[Ctx]) -> Dict[str, Any]:
    out: Dict[str, Any] = dict(base or {})
    out.update(extra or {})
    return out


class ContextLoggerAdapter(logging.LoggerAdapter):
    """
    Adapter that attaches a persistent ``ctx`` dict to every record.

    ``extra={"ctx": {...}}`` at the call site is merged on top.
    """

    def __init__(self, logger: logging.Logger, ctx: Optional[Ctx] = None):
        super().__init__(logger, extra={"ctx": dict(ctx or {})})

    def process(self, msg: Any, kwargs: Dict[str, Any]) -> Tuple[Any, Dict[str, Any]]:
        extra = kwargs.get("extra") or {}
        extra["ctx"] = _merge_ctx(self.extra.get("ctx"), extra.get("ctx"))
        kwargs["extra"] = extra
        return msg, kwargs

    def bind(self, **ctx: Any) -> "ContextLoggerAdapter":
        return ContextLoggerAdapter(self.logger, _merge_ctx(self.extra.get("ctx"), ctx))


class Log:
    @staticmethod
    def get(name: Optional[str] = None) -> logging.Logger:
        """Project logger, or a child of it (``Log.get("stores")``)."""
        if not name or name == PROJECT_LOGGER:
            return logging.getLogger(PROJECT_LOGGER)
        if name.startswith(PROJECT_LOGGER + "."):
            return logging.getLogger(name)
        return logging.getLogger(f"{PROJECT_LOGGER}.{name}")

    @staticmethod
    def bind(logger: logging.Logger, **ctx: Any) -> ContextLoggerAdapter:
        return ContextLoggerAdapter(logger, ctx)

    @staticmethod
    def trace(logger: logging.Logger, msg: str, *args: Any, **ctx: Any) -> None:
        if ctx:
            logger.trace(msg, *args, extra={"ctx": ctx})  # type: ignore[attr-defined]
        else:
            logger.trace(msg, *args)  # type: ignore[attr-defined]
