"""
Secret handling for searchcore.

Keeps API keys and tenant tokens out of log output.
"""

import re
import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

_BEARER_RE = re.compile(r"(Bearer\s+)([A-Za-z0-9._\-]+)")


@dataclass
class SecurityConfig:
    """Security configuration settings."""
    mask_logs: bool = True
    max_key_length: int = 8  # Characters to show in logs


class SecurityManager:
    """Masks secrets before they reach logs or CLI output."""

    def __init__(self, config: Optional[SecurityConfig] = None):
        self.config = config or SecurityConfig()

    def mask_sensitive_data(self, data: Optional[str]) -> Optional[str]:
        """
        Mask sensitive data in logs.

        Args:
            data: The data to mask

        Returns:
            Masked version of the data
        """
        if not self.config.mask_logs or not data:
            return data

        if len(data) <= self.config.max_key_length:
            return "*" * len(data)

        return data[:self.config.max_key_length] + "*" * (len(data) - self.config.max_key_length)

    def redact_bearer(self, text: str) -> str:
        """Mask every ``Bearer <token>`` occurrence inside ``text``."""
        if not self.config.mask_logs or "Bearer" not in text:
            return text
        return _BEARER_RE.sub(lambda m: m.group(1) + self.mask_sensitive_data(m.group(2)), text)


_default_manager = SecurityManager()


def mask_key(key: Optional[str]) -> Optional[str]:
    return _default_manager.mask_sensitive_data(key)


def redact_bearer(text: str) -> str:
    return _default_manager.redact_bearer(text)
