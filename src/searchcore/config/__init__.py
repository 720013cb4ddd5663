from .client_config import ClientConfig, RetryConfig
from .security import SecurityConfig, SecurityManager, mask_key, redact_bearer

__all__ = [
    "ClientConfig",
    "RetryConfig",
    "SecurityConfig",
    "SecurityManager",
    "mask_key",
    "redact_bearer",
]
