"""Log routing for the basketctl CLI.

Everything goes to stderr so stdout stays reserved for command results.
Stdlib loggers (``logging.getLogger(__name__)`` throughout the package)
and structlog loggers share one ``ProcessorFormatter`` pipeline, rendered
either for a terminal or as JSON lines (``--log-json``).
"""

from __future__ import annotations

import logging
import sys

import structlog

# Libraries whose DEBUG chatter (SQL echo, event loop internals) never helps
# when diagnosing a cart or stock problem.
_QUIET_LOGGERS = ("sqlalchemy", "asyncio", "pluggy")

_PRE_CHAIN: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
]


def _final_processors(log_json: bool) -> list[structlog.types.Processor]:
    if log_json:
        # Stock lookup failures log with exc_info; keep the traceback as data.
        return [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    return [
        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
        structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
    ]


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Install the stderr handler and set basketctl's level.

    ``verbose`` opens basketctl's own loggers down to DEBUG; everything
    else stays at WARNING. Safe to call repeatedly.
    """
    structlog.configure(
        processors=[*_PRE_CHAIN, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_PRE_CHAIN,
            processors=_final_processors(log_json),
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger("basketctl").setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
