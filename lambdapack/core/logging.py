"""Structured logging via structlog.

Configures structlog once at host startup. Packager modules log through
`logging.getLogger(__name__)`; a `ProcessorFormatter` on the root logger
runs those records through the same processors and renderer.

Renderer selection:
  debug=True  — `ConsoleRenderer` with colours for local development.
  debug=False — `JSONRenderer` for machine-parseable logs in CI.

ContextVar injection:
  The `function` and `stage` of the packaging run in progress are injected
  into every line, stdlib records included. Concurrent runs in separate
  threads or tasks each see their own values.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar

import structlog

_function_var: ContextVar[str] = ContextVar("function", default="")
_stage_var: ContextVar[str] = ContextVar("stage", default="")

# Marks the root handler installed here so reconfiguring replaces it
_HANDLER_MARKER = "_lambdapack_handler"


def bind_run_context(function: str, stage: str = "") -> None:
    """Set the function name and stage for the current packaging run."""
    _function_var.set(function)
    _stage_var.set(stage)


def clear_run_context() -> None:
    _function_var.set("")
    _stage_var.set("")


def get_run_context() -> dict[str, str]:
    return {"function": _function_var.get(), "stage": _stage_var.get()}


def _inject_context_vars(
    logger: logging.Logger,
    method: str,
    event_dict: dict,
) -> dict:
    """Structlog processor: inject function and stage from ContextVars."""
    function = _function_var.get()
    stage = _stage_var.get()
    if function:
        event_dict["function"] = function
    if stage:
        event_dict["stage"] = stage
    return event_dict


def configure_structlog(debug: bool = True) -> None:
    """Configure structlog for the process lifetime.

    Calling multiple times is safe — structlog is idempotent.
    """
    shared_processors: list = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        _inject_context_vars,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if debug:
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG),
        context_class=dict,
        logger_factory=structlog.WriteLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[structlog.stdlib.add_logger_name] + shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    setattr(handler, _HANDLER_MARKER, True)

    root = logging.getLogger()
    for existing in list(root.handlers):
        if getattr(existing, _HANDLER_MARKER, False):
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if debug else logging.INFO)
