import logging
import os
import json

__all__ = ["configure_logger", "CONTEXT_FIELDS"]

# ``extra`` keys promoted into JSON log lines when present on a record.
CONTEXT_FIELDS = ("form_id", "submission_id", "rule_id", "template_id", "field_id")


def configure_logger(name: str, level: str = "INFO") -> logging.Logger:
    """Return a logger configured with a standard formatter.

    The log level can be overridden via the ``LOG_LEVEL`` environment variable.
    When ``LOG_JSON`` is ``true`` logs are formatted as JSON and any of
    :data:`CONTEXT_FIELDS` passed through ``extra=`` are included. Both options
    may also be supplied via Parameter Store under the same names.
    """
    # late import to avoid a circular dependency during package init
    from .get_ssm import get_config

    logger = logging.getLogger(name)

    log_level = os.getenv("LOG_LEVEL") or get_config("LOG_LEVEL") or level
    level_const = getattr(logging, str(log_level).upper(), logging.INFO)
    logger.setLevel(level_const)

    class JsonFormatter(logging.Formatter):
        def format(self, record: logging.LogRecord) -> str:
            payload = {
                "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S%z"),
                "level": record.levelname,
                "logger": record.name,
                "message": record.getMessage(),
            }
            for key in CONTEXT_FIELDS:
                value = getattr(record, key, None)
                if value is not None:
                    payload[key] = value
            if record.exc_info:
                payload["exception"] = self.formatException(record.exc_info)
            return json.dumps(payload, default=str)

    json_flag = os.getenv("LOG_JSON") or get_config("LOG_JSON") or "false"
    if str(json_flag).lower() == "true":
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s %(levelname)s [%(name)s] %(message)s",
            "%Y-%m-%dT%H:%M:%S%z",
        )
    if not logger.handlers:
        logger.addHandler(logging.StreamHandler())
    for handler in logger.handlers:
        handler.setFormatter(formatter)
    return logger
