from __future__ import annotations
import io, json, os, logging
from logging.config import dictConfig
from logging import Filter

from searchcore.config.security import redact_bearer

DEFAULT_LEVEL = os.getenv("LOG_LEVEL", "INFO")


class ApiKeyRedactionFilter(Filter):
    """
    Filter that masks ``Bearer <key>`` values in log records.

    httpx logs request headers at DEBUG level, and our own error paths may
    echo an Authorization header; neither should leak a master key or a
    tenant token into the logs.
    """
    def filter(self, record):
        msg = record.getMessage()
        if "Bearer" in msg:
            record.msg = redact_bearer(msg)
            record.args = None
        return True

_STDOUT_ONLY = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "std": {"format": "%(asctime)s %(levelname)s %(name)s %(message)s"}
    },
    "handlers": {
        "stdout": {
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stdout",
            "formatter": "std",
            "level": DEFAULT_LEVEL,
            "filters": ["api_key_redaction"],
        }
    },
    "filters": {
        "api_key_redaction": {
            "()": "searchcore.logging_setup.ApiKeyRedactionFilter",
        }
    },
    "loggers": {
        # httpx/httpcore are chatty at INFO; keep them at WARNING unless asked
        "httpx": {"level": "WARNING"},
        "httpcore": {"level": "WARNING"},
    },
    "root": {"level": DEFAULT_LEVEL, "handlers": ["stdout"]},
}


def setup_logging(app_name: str = "", config_path_env: str = "SEARCHCORE_LOGCFG"):
    """
    Configure process logging for searchcore entrypoints (CLI, scripts).

    - If SEARCHCORE_LOGCFG points to a YAML/JSON dictConfig file, we load it.
    - Otherwise we apply a stdout-only config with API key redaction.

    Libraries embedding searchcore should not call this; they get plain
    ``logging.getLogger(__name__)`` loggers and configure handlers themselves.
    """
    cfg_path = os.getenv(config_path_env, "").strip()
    if cfg_path and os.path.exists(cfg_path):
        with open(cfg_path, "r", encoding="utf-8") as fh:
            text = fh.read()
        try:
            # Try JSON first
            dictConfig(json.loads(text))
        except json.JSONDecodeError:
            # Fall back to YAML
            import yaml  # pyright: ignore[reportMissingImports]
            dictConfig(yaml.safe_load(io.StringIO(text)))
        return

    dictConfig(_STDOUT_ONLY)
    if app_name:
        logging.getLogger(app_name).debug("Logging configured for %s", app_name)


def ensure_client_logger(module: str, level: str = "INFO") -> logging.Logger:
    """
    Get a logger for a searchcore module and set its level.

    Assumes ``setup_logging()`` has configured the root handler; messages
    propagate to it.

    Args:
        module (str): Logger name (e.g., "searchcore.client.task_poller")
        level (str): Log level (default: INFO)

    Returns:
        logging.Logger: Configured logger
    """
    logger = logging.getLogger(module)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.propagate = True
    return logger
