"""
Custom logging configuration that keeps secrets out of log output
"""

import logging
import logging.config
import re
from typing import Any, Dict, Iterable, Optional

# JWT-shaped tokens and 32-byte hex private keys
_TOKEN_PATTERN = re.compile(r"eyJ[\w-]+\.[\w-]+\.[\w-]*")
_PRIVATE_KEY_PATTERN = re.compile(r"\b(0x)?[0-9a-fA-F]{64}\b")

# Transaction and block hashes share the key's shape
_HASH_LABEL = re.compile(r"hash\W{0,4}$", re.IGNORECASE)


def _mask_key(match: "re.Match[str]") -> str:
    prefix = match.string[max(0, match.start() - 8):match.start()]
    if _HASH_LABEL.search(prefix):
        return match.group(0)
    return "<private-key>"


class SecretRedactionFilter(logging.Filter):
    """Filter that masks session tokens and private keys in log records."""

    def __init__(self, secrets: Optional[Iterable[str]] = None):
        super().__init__()
        # Known secret values are masked wherever they appear
        self.secrets = []
        for secret in secrets or []:
            if secret:
                self.secrets.append(secret)
                if secret.startswith("0x"):
                    self.secrets.append(secret[2:])

    def filter(self, record: logging.LogRecord) -> bool:
        """Rewrite the rendered message with secrets masked."""
        message = record.getMessage()
        redacted = message
        for secret in self.secrets:
            redacted = redacted.replace(secret, "<private-key>")
        redacted = _TOKEN_PATTERN.sub("<token>", redacted)
        redacted = _PRIVATE_KEY_PATTERN.sub(_mask_key, redacted)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True  # Never drop records, only mask them


def get_logging_config(level: str = "INFO", secrets: Optional[Iterable[str]] = None) -> Dict[str, Any]:
    """Get logging configuration with secret redaction."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "secret_redaction": {
                "()": SecretRedactionFilter,
                "secrets": list(secrets or []),
            }
        },
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            }
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout",
                "filters": ["secret_redaction"]
            }
        },
        "loggers": {
            "x1quest": {
                "handlers": ["default"],
                "level": level,
                "propagate": False
            },
            "httpx": {
                "handlers": ["default"],
                "level": "WARNING",
                "propagate": False
            }
        },
        "root": {
            "level": level,
            "handlers": ["default"]
        }
    }


def configure_logging(level: str = "INFO", secrets: Optional[Iterable[str]] = None) -> None:
    """Apply the package logging configuration."""
    logging.config.dictConfig(get_logging_config(level, secrets))
