from __future__ import annotations

import logging
import logging.handlers
import sys
from contextvars import ContextVar, Token
from pathlib import Path
from typing import Tuple

# (session id, "METHOD /path") of the request being served
_request_ctx: ContextVar[Tuple[str, str]] = ContextVar("lecturequiz_request", default=("", ""))

QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access", "multipart", "python_multipart")


def short_sid(sid: str) -> str:
    return sid[:8] if sid else "-"


def bind_request(*, sid: str = "", route: str = "") -> Token:
    return _request_ctx.set((sid or "", route or ""))


def bind_session(sid: str) -> None:
    """Attach a session id to the current request once it is known."""
    _, route = _request_ctx.get()
    _request_ctx.set((sid or "", route))


def reset_request(token: Token) -> None:
    _request_ctx.reset(token)


class RequestContextFilter(logging.Filter):
    """Stamps `sid` and `route` on every record so quiz activity can be traced per browser."""

    def filter(self, record: logging.LogRecord) -> bool:
        sid, route = _request_ctx.get()
        record.sid = short_sid(sid)
        record.route = route or "-"
        return True


class _ConsoleFormatter(logging.Formatter):
    LEVEL_TAGS = {
        logging.DEBUG: ("\033[90m", "DBG"),
        logging.INFO: ("\033[94m", "INF"),
        logging.WARNING: ("\033[93m", "WRN"),
        logging.ERROR: ("\033[91m", "ERR"),
        logging.CRITICAL: ("\033[95m", "CRT"),
    }
    RESET = "\033[0m"

    def __init__(self, *, color: bool = True):
        super().__init__(fmt="%(message)s")
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        color, tag = self.LEVEL_TAGS.get(record.levelno, ("", record.levelname[:3]))
        if self.color:
            tag = f"{color}{tag}{self.RESET}"

        msg = f"{tag} {record.getMessage()}"
        sid = getattr(record, "sid", "-")
        if sid != "-":
            msg = f"{msg}  [{sid} {getattr(record, 'route', '-')}]"
        if record.exc_info:
            msg = f"{msg}\n{self.formatException(record.exc_info)}"
        return msg


class _DropServerNoise(logging.Filter):
    DROP_SUBSTRINGS = (
        "GET /static/",
        "GET /favicon.ico",
        "GET /health",
        "Waiting for application startup",
        "Waiting for application shutdown",
    )

    def filter(self, record: logging.LogRecord) -> bool:
        msg = record.getMessage()
        return not any(s in msg for s in self.DROP_SUBSTRINGS)


def setup_logging(
    *,
    log_dir: str = "logs",
    log_file: str = "lecturequiz.log",
    console_level: str = "INFO",
    file_level: str = "DEBUG",
) -> Path:
    """
    Console: colored level tag plus the short session id and route of the
    request being served. File: rotating, full context on every line.
    Returns the log file path.
    """
    Path(log_dir).mkdir(parents=True, exist_ok=True)
    log_path = Path(log_dir) / log_file

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    for h in list(root.handlers):
        root.removeHandler(h)

    ctx = RequestContextFilter()

    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(getattr(logging, console_level.upper(), logging.INFO))
    ch.setFormatter(_ConsoleFormatter(color=sys.stdout.isatty()))
    ch.addFilter(ctx)
    ch.addFilter(_DropServerNoise())
    root.addHandler(ch)

    fh = logging.handlers.RotatingFileHandler(
        filename=str(log_path),
        maxBytes=5 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    fh.setLevel(getattr(logging, file_level.upper(), logging.DEBUG))
    fh.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s %(levelname)-8s sid=%(sid)s %(route)s | %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    fh.addFilter(ctx)
    root.addHandler(fh)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root.debug("Logging initialized. log_path=%s", log_path.resolve())
    return log_path
