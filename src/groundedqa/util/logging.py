from __future__ import annotations

import logging
import sys
from pathlib import Path

import structlog

from groundedqa.util.yaml import load_yaml_config

# chatty per-request loggers of the HTTP and vendor SDK clients
_QUIET_LOGGERS = ("httpx", "httpcore", "openai", "botocore", "urllib3")


def configure_logging(json_output: bool = True, log_level: str = "INFO") -> None:
    """Route structlog events through the stdlib root logger as JSON or console lines."""
    shared_processors: list[structlog.types.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.contextvars.merge_contextvars,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
    )
    formatter = structlog.stdlib.ProcessorFormatter(processor=renderer)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)


def configure_logging_from_file(config_path: Path) -> None:
    """Apply the ``logging`` section of an observability YAML file.

    A missing file or section falls back to JSON output at INFO.
    """
    logging_config = load_yaml_config(config_path).get("logging") or {}
    configure_logging(
        json_output=bool(logging_config.get("json_output", True)),
        log_level=str(logging_config.get("log_level", "INFO")),
    )
