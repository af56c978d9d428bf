import logging
import sys
from typing import Any, Dict, Optional

import structlog


def _service_context(app_name: str, app_env: str):
    """Processor stamping every event with the service name and environment."""

    def processor(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
        event_dict.setdefault("service", app_name)
        event_dict.setdefault("env", app_env)
        return event_dict

    return processor


def init_logging(
    log_level: str = "INFO",
    app_name: Optional[str] = None,
    app_env: Optional[str] = None,
) -> structlog.BoundLogger:
    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )
    # urllib3 retries are already surfaced as provider events
    logging.getLogger("urllib3").setLevel(max(level, logging.WARNING))

    processors = [
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
    ]
    if app_name:
        processors.append(_service_context(app_name, app_env or ""))
    processors += [
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.dev.ConsoleRenderer() if level == logging.DEBUG else structlog.processors.JSONRenderer(),
    ]

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )

    return structlog.get_logger()
