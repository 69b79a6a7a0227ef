"""Log setup shared by the collector and the scraper.

The collector writes one JSON object per line to stdout, tagged with the
request it belongs to. Both processes also write a plain-text file per run
under ``LOG_DIR``.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from flask import g, has_app_context, has_request_context, request

REQUEST_FIELDS = ("request_id", "path", "method", "remote_addr")

PLAIN_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
PLAIN_DATEFMT = '%Y-%m-%d %H:%M:%S'

# Framework loggers that should reach the run file through root
_ROUTED_LOGGERS = ("werkzeug", "flask.app")

# Attributes every LogRecord carries; anything else arrived via ``extra=``
_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


def _request_context() -> Dict[str, Any]:
    fields: Dict[str, Any] = dict.fromkeys(REQUEST_FIELDS)
    if has_app_context():
        fields["request_id"] = g.get("request_id")
    if has_request_context():
        fields["path"] = request.path
        fields["method"] = request.method
        fields["remote_addr"] = request.headers.get("X-Forwarded-For", request.remote_addr)
    return fields


class RequestContextFilter(logging.Filter):
    """Stamp each record with the collector request it was logged under."""

    def filter(self, record: logging.LogRecord) -> bool:
        for name, value in _request_context().items():
            setattr(record, name, value)
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per record.

    Fields passed through ``extra=`` (``track_count``, ``record_index`` and
    the like) are emitted next to the request fields.
    """

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: Dict[str, Any] = {
            "timestamp": stamp.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in REQUEST_FIELDS:
            payload[name] = getattr(record, name, None)
        for name, value in vars(record).items():
            if name not in _STANDARD_ATTRS and name not in payload:
                payload[name] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _has_json_stdout(root: logging.Logger) -> bool:
    return any(isinstance(h.formatter, JsonFormatter) for h in root.handlers)


def configure_structured_logging(app) -> None:
    """Add the JSON stdout handler to the root logger unless it is already there."""
    root = logging.getLogger()
    if _has_json_stdout(root):
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    handler.addFilter(RequestContextFilter())
    root.addHandler(handler)
    app.logger.debug("Structured stdout logging enabled")


def _run_log_path(log_dir: str) -> str:
    os.makedirs(log_dir, exist_ok=True)
    return os.path.join(log_dir, datetime.now().strftime("log-%Y-%m-%d-%H-%M-%S"))


def configure_logging(log_dir: str, *, level: str = "INFO", enable_console: bool = False) -> str:
    """Point root logging at a fresh run file and return its path.

    A previous run file handler is replaced, never stacked. The JSON stdout
    handler, when present, is left alone. ``enable_console`` adds a
    WARNING-and-above stderr handler in the plain format.
    """
    log_path = _run_log_path(log_dir)
    plain = logging.Formatter(fmt=PLAIN_FORMAT, datefmt=PLAIN_DATEFMT)

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for handler in [h for h in root.handlers if isinstance(h, logging.FileHandler)]:
        root.removeHandler(handler)
        handler.close()

    run_file = logging.FileHandler(log_path, encoding='utf-8')
    run_file.setFormatter(plain)
    root.addHandler(run_file)

    if enable_console:
        console = logging.StreamHandler()
        console.setLevel(logging.WARNING)
        console.setFormatter(plain)
        root.addHandler(console)

    for name in _ROUTED_LOGGERS:
        routed = logging.getLogger(name)
        routed.handlers.clear()
        routed.propagate = True

    return log_path
