# SPDX-License-Identifier: LGPL-3.0-or-later
# gpupkg/core/logger.py
"""
Logging setup for the gpupkg CLI.

Console lines look like

    14:02:11 ✅ INFO     🔎 Discovering partition-capable GPUs ... gpu=RTX 3060

with the level colored (termcolor) when stderr is a terminal. --log-json
switches every handler to one JSON object per line.
"""
from __future__ import annotations

import datetime as _dt
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from termcolor import colored as _colored

TRACE = 5
if logging.getLevelName(TRACE) != "TRACE":
    logging.addLevelName(TRACE, "TRACE")


def _logger_trace(self: logging.Logger, msg: str, *args, **kwargs) -> None:
    if self.isEnabledFor(TRACE):
        self._log(TRACE, msg, args, **kwargs)


if not hasattr(logging.Logger, "trace"):
    logging.Logger.trace = _logger_trace  # type: ignore[attr-defined]

_LEVELS = {
    # levelname: (emoji, color)
    "TRACE": ("🧬", "cyan"),
    "DEBUG": ("🔍", "blue"),
    "INFO": ("✅", "green"),
    "WARNING": ("⚠️", "yellow"),
    "ERROR": ("💥", "red"),
    "CRITICAL": ("🧨", "red"),
}


def is_tty(stream: Any = None) -> bool:
    stream = sys.stderr if stream is None else stream
    isatty = getattr(stream, "isatty", None)
    return bool(isatty()) if callable(isatty) else False


def c(text: str, color: Optional[str] = None, attrs: Optional[List[str]] = None, *, enable: bool = True) -> str:
    if not enable or not color:
        return text
    return _colored(text, color=color, attrs=attrs or [])


def _ctx_suffix(ctx: Optional[Mapping[str, Any]]) -> str:
    if not ctx:
        return ""
    return " " + " ".join(f"{k}={str(v).replace(chr(10), ' ')}" for k, v in sorted(ctx.items()))


class ContextLoggerAdapter(logging.LoggerAdapter):
    """
    Logger that appends bound key=value pairs to every line.

        log = Log.bind(logger, gpu="NVIDIA GeForce RTX 3060")
        log.info("Staging")
    """

    def __init__(self, logger: logging.Logger, ctx: Optional[Mapping[str, Any]] = None):
        super().__init__(logger, {"ctx": dict(ctx or {})})

    def process(self, msg: Any, kwargs: Dict[str, Any]) -> Tuple[Any, Dict[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        extra["ctx"] = {**self.extra["ctx"], **(extra.get("ctx") or {})}
        kwargs["extra"] = extra
        return msg, kwargs


class EmojiFormatter(logging.Formatter):
    def __init__(self, *, color: bool = True, detailed: bool = False):
        super().__init__()
        self.color = color
        self.detailed = detailed

    def format(self, record: logging.LogRecord) -> str:
        emoji, color = _LEVELS.get(record.levelname, ("•", None))
        use_color = self.color and is_tty()

        ts = _dt.datetime.fromtimestamp(record.created)
        stamp = ts.strftime("%H:%M:%S.%f")[:-3] if self.detailed else ts.strftime("%H:%M:%S")
        level = c(f"{record.levelname:<8}", color, enable=use_color)

        msg = record.getMessage()
        if record.levelno >= logging.WARNING:
            msg = c(msg, color, ["bold"], enable=use_color)

        where = f" [{record.name} {record.module}:{record.lineno}]" if self.detailed else ""
        line = f"{stamp} {emoji} {level}{where} {msg}{_ctx_suffix(getattr(record, 'ctx', None))}"
        if record.exc_info:
            line += "\n" + "\n".join("  " + ln for ln in self.formatException(record.exc_info).splitlines())
        return line


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        obj: Dict[str, Any] = {
            "ts": _dt.datetime.fromtimestamp(record.created, tz=_dt.timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "pid": os.getpid(),
        }
        ctx = getattr(record, "ctx", None)
        if ctx:
            obj["ctx"] = {str(k): str(v) for k, v in ctx.items()}
        if record.exc_info:
            obj["traceback"] = self.formatException(record.exc_info)
        return json.dumps(obj, ensure_ascii=False)


class Log:
    @staticmethod
    def _level_from_flags(verbose: int, quiet: int) -> int:
        # -q WARNING, -qq ERROR, -vv DEBUG, -vvv TRACE; quiet wins
        if quiet >= 2:
            return logging.ERROR
        if quiet == 1:
            return logging.WARNING
        if verbose >= 3:
            return TRACE
        if verbose >= 2:
            return logging.DEBUG
        return logging.INFO

    @staticmethod
    def bind(logger: logging.Logger, **ctx: Any) -> ContextLoggerAdapter:
        return ContextLoggerAdapter(logger, ctx)

    @staticmethod
    def step(logger: logging.Logger, msg: str) -> None:
        logger.info("➡️  %s", msg)

    @staticmethod
    def ok(logger: logging.Logger, msg: str) -> None:
        logger.info("✅ %s", msg)

    @staticmethod
    def warn(logger: logging.Logger, msg: str) -> None:
        logger.warning("⚠️  %s", msg)

    @staticmethod
    def trace(logger: logging.Logger, msg: str, *args: Any) -> None:
        fn = getattr(logger, "trace", None)
        if callable(fn):
            fn(msg, *args)

    @staticmethod
    def setup(
        verbose: int = 0,
        log_file: Optional[str] = None,
        *,
        quiet: int = 0,
        color: bool = True,
        logger_name: str = "gpupkg",
        json_logs: bool = False,
    ) -> logging.Logger:
        """
        Configure and return the project logger.

        Handlers from a previous setup() are replaced, so calling it twice
        (tests, embedding) does not duplicate lines. The log file always gets
        the detailed, uncolored format.
        """
        logger = logging.getLogger(logger_name)
        logger.propagate = False
        level = Log._level_from_flags(verbose, quiet)
        logger.setLevel(level)

        for h in list(logger.handlers):
            logger.removeHandler(h)
            h.close()

        console = logging.StreamHandler(stream=sys.stderr)
        console.setFormatter(JsonFormatter() if json_logs else EmojiFormatter(color=color, detailed=verbose >= 3))
        logger.addHandler(console)

        if log_file:
            fp = Path(log_file).expanduser().resolve()
            fp.parent.mkdir(parents=True, exist_ok=True)
            fh = logging.FileHandler(fp, encoding="utf-8")
            fh.setFormatter(JsonFormatter() if json_logs else EmojiFormatter(color=False, detailed=True))
            logger.addHandler(fh)

        for h in logger.handlers:
            h.setLevel(level)

        logger.debug("Logger initialized (level=%s, pid=%s)", logging.getLevelName(level), os.getpid())
        return logger
