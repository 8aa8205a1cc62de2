"""Structured logging.

structlog runs on top of the standard ``logging`` tree so that uvicorn and
the Cassandra driver end up in the same sinks as application events:

* stdout: key-value console output, or JSON when ``LOG_FORMAT=json``
* ``<log_dir>/<app_name>.log``: every record at ``LOG_LEVEL`` as JSON
* ``<log_dir>/<app_name>.error.log``: errors only, as JSON

Both files rotate by size.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, Any

import orjson
import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from coursehub.core.context import get_context


if TYPE_CHECKING:
    from coursehub.config.settings import Settings


REDACTED = "[redacted]"

_SECRET_MARKERS = ("password", "secret", "token", "authorization")

_QUIET_LOGGERS = ("uvicorn.access", "cassandra", "httpx")


def bind_request_context(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add the current request and user ids unless the event sets them."""
    for key, value in get_context().items():
        event_dict.setdefault(key, value)
    return event_dict


def _redact(key: str, value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _redact(k, v) for k, v in value.items()}
    if isinstance(value, str) and any(m in key.lower() for m in _SECRET_MARKERS):
        return REDACTED
    return value


def redact_secrets(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Replace values of credential-looking keys, including nested ones."""
    return {key: _redact(key, value) for key, value in event_dict.items()}


def _orjson_dumps(obj: Any, **_: Any) -> str:
    # UUIDs and datetimes are native to orjson; anything else falls back to str
    return orjson.dumps(obj, default=str).decode()


def build_processors(settings: "Settings") -> list[Processor]:
    """Processors shared by structlog and foreign (stdlib) records."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        bind_request_context,
        redact_secrets,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if settings.log_include_caller_info:
        processors.append(
            structlog.processors.CallsiteParameterAdder(
                {
                    structlog.processors.CallsiteParameter.MODULE,
                    structlog.processors.CallsiteParameter.FUNC_NAME,
                    structlog.processors.CallsiteParameter.LINENO,
                }
            )
        )
    return processors


def _json_processors() -> list[Processor]:
    return [
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(serializer=_orjson_dumps),
    ]


HandlerSpec = tuple[logging.Handler, list[Processor]]


def _handlers(settings: "Settings", log_dir: Path) -> list[HandlerSpec]:
    if settings.log_format == "json":
        console_chain = _json_processors()
    else:
        console_chain = [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(settings.log_level)
    handlers: list[HandlerSpec] = [(console, console_chain)]

    log_dir.mkdir(parents=True, exist_ok=True)
    for suffix, level in ((".log", settings.log_level), (".error.log", "ERROR")):
        rotating = RotatingFileHandler(
            log_dir / f"{settings.app_name}{suffix}",
            maxBytes=settings.log_file_max_bytes,
            backupCount=settings.log_file_backup_count,
            encoding="utf-8",
        )
        rotating.setLevel(level)
        handlers.append((rotating, _json_processors()))
    return handlers


def configure_structlog(settings: "Settings", log_dir: Path | str | None = None) -> None:
    """Route structlog and stdlib logging to the console and log files.

    Safe to call more than once; earlier root handlers are replaced.
    """
    processors = build_processors(settings)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(settings.log_level)

    for handler, renderers in _handlers(settings, Path(log_dir or "logs")):
        handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                foreign_pre_chain=processors,
                processors=[
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    *renderers,
                ],
            )
        )
        root.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=[*processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
