"""structlog setup for plotkit renders.

Every event can carry three correlation keys:

- ``run_id``: one render, as named by :class:`~plotkit.canvas.Pipeline`.
- ``source``: the GeoJSON file being ingested.
- ``object_index``: the fitted object being hatched and clipped.

A skipped file or object can then be traced back from a batch log. Output
is JSON lines for batch renders or colored console text for ``plotkit -v``.
"""

import logging
import sys
from collections.abc import MutableMapping
from contextvars import ContextVar
from typing import Any, cast

import structlog
from structlog.types import Processor

from plotkit.config import settings

# Worker threads start with empty values; the pipeline re-sets run_id there.
_run_id: ContextVar[str | None] = ContextVar("run_id", default=None)
_source: ContextVar[str | None] = ContextVar("source", default=None)
_object_index: ContextVar[int | None] = ContextVar("object_index", default=None)


def set_correlation_context(
    run_id: str | None = None,
    source: str | None = None,
    object_index: int | None = None,
) -> None:
    """Attach render, file or object keys to later events in this context.

    Arguments left as None keep their current value, so the ingest loop can
    move ``source`` from file to file without touching ``run_id``.

    Args:
        run_id: Render name, e.g. ``render_20240101_120000``.
        source: Path of the input file being ingested.
        object_index: Position of the object in the fitted scene.
    """
    if run_id is not None:
        _run_id.set(run_id)
    if source is not None:
        _source.set(source)
    if object_index is not None:
        _object_index.set(object_index)


def clear_correlation_context() -> None:
    """Drop every correlation key, e.g. between two renders."""
    _run_id.set(None)
    _source.set(None)
    _object_index.set(None)


def _add_correlation_ids(
    logger: logging.Logger,
    method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Copy whichever correlation keys are set into ``event_dict``."""
    _ = logger, method_name
    run_id = _run_id.get()
    source = _source.get()
    object_index = _object_index.get()

    if run_id is not None:
        event_dict["run_id"] = run_id
    if source is not None:
        event_dict["source"] = source
    if object_index is not None:
        event_dict["object_index"] = object_index

    return event_dict


def configure_logging(
    level: str | None = None,
    log_format: str | None = None,
) -> None:
    """Route plotkit's structlog events through stdlib logging on stdout.

    Safe to call more than once; each CLI command calls it with the level
    picked from ``-v``.

    Args:
        level: Level name such as ``"INFO"``. Defaults to
            ``LOG_LEVEL``.
        log_format: ``"console"`` or ``"json"``. Defaults to
            ``LOG_FORMAT``.
    """
    level = level or settings.LOG_LEVEL
    log_format = log_format or settings.LOG_FORMAT

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _add_correlation_ids,
    ]

    if log_format == "json":
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # force=True replaces handlers left by an earlier command in the same process
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper()),
        force=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return the structlog logger for a plotkit module, usually ``__name__``."""
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
