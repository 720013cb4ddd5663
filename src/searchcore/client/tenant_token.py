"""
Tenant token generation.

A tenant token is an HS256-signed JWT carrying search rules, the uid of the
API key that signs it, and an optional expiry. The service verifies the
signature with that key and intersects the embedded rules with the key's own
permissions. Generation is purely local: no request is made.

Wire format::

    base64url(header) "." base64url(payload) "." base64url(HMAC-SHA256(secret, header "." payload))

with ``header = {"alg": "HS256", "typ": "JWT"}`` and
``payload = {"apiKeyUid": ..., "exp": <unix seconds, optional>, "searchRules": {...}}``.
JSON is compact with sorted keys, so identical inputs yield identical tokens.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import logging
import re
import time
from datetime import datetime
from typing import Any, Callable, Dict, Mapping, Optional, Union

from searchcore import metrics
from searchcore.config import ClientConfig
from searchcore.errors import (
    ExpiredTokenError,
    InvalidApiKeyUidError,
    MissingSearchRulesError,
    MissingSigningKeyError,
    TenantTokenError,
)
from searchcore.models.tenant_token import search_rules_payload

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
_HEADER = {"alg": ALGORITHM, "typ": "JWT"}
_UID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)

ExpiresAt = Union[datetime, int, float]


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64decode(segment: str) -> bytes:
    return base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))


def _json_segment(obj: Dict[str, Any]) -> str:
    return _b64encode(json.dumps(obj, sort_keys=True, separators=(",", ":")).encode("utf-8"))


def _sign(secret: str, signing_input: str) -> str:
    digest = hmac.new(secret.encode("utf-8"), signing_input.encode("ascii"), hashlib.sha256).digest()
    return _b64encode(digest)


def to_unix_seconds(expires_at: ExpiresAt) -> int:
    """Naive datetimes are local time, as ``datetime.timestamp`` reads them."""
    if isinstance(expires_at, datetime):
        return int(expires_at.timestamp())
    return int(expires_at)


def is_valid_key_uid(api_key_uid: Any) -> bool:
    return isinstance(api_key_uid, str) and bool(_UID_RE.match(api_key_uid))


def generate_tenant_token(api_key_uid: str,
                          search_rules: Optional[Mapping[str, Any]],
                          api_key: Optional[str] = None,
                          expires_at: Optional[ExpiresAt] = None,
                          *,
                          clock: Callable[[], float] = time.time) -> str:
    """
    Build a signed tenant token.

    Validation happens before any signing, in this order: signing key,
    search rules, expiry, key uid.

    Raises:
        MissingSigningKeyError: ``api_key`` is empty
        MissingSearchRulesError: ``search_rules`` is None or empty
        ExpiredTokenError: ``expires_at`` is not strictly in the future
        InvalidApiKeyUidError: ``api_key_uid`` is not a UUID
    """
    if not api_key:
        raise MissingSigningKeyError()
    if not search_rules:
        raise MissingSearchRulesError()

    exp = None
    if expires_at is not None:
        exp = to_unix_seconds(expires_at)
        if exp <= clock():
            raise ExpiredTokenError(expires_at)

    if not is_valid_key_uid(api_key_uid):
        raise InvalidApiKeyUidError(api_key_uid)

    payload: Dict[str, Any] = {
        "apiKeyUid": api_key_uid,
        "searchRules": search_rules_payload(search_rules),
    }
    if exp is not None:
        payload["exp"] = exp

    signing_input = f"{_json_segment(_HEADER)}.{_json_segment(payload)}"
    token = f"{signing_input}.{_sign(api_key, signing_input)}"

    metrics.TOKENS_ISSUED.inc()
    logger.debug(
        "Generated tenant token for key uid %s (signed with a %d-char key, %d rules, exp=%s)",
        api_key_uid, len(api_key), len(payload["searchRules"]), exp,
    )
    return token


def decode_tenant_token(token: str,
                        api_key: str,
                        *,
                        verify_exp: bool = True,
                        clock: Callable[[], float] = time.time) -> Dict[str, Any]:
    """
    Verify a tenant token with the signing key and return its payload.

    This mirrors the check the service performs; it is useful in tests and
    for services that mint tokens and want to inspect them.

    Raises:
        TenantTokenError: malformed token, bad signature or expired token
    """
    parts = token.split(".")
    if len(parts) != 3:
        raise TenantTokenError("Tenant token must have three segments")
    header_b64, payload_b64, signature = parts

    expected = _sign(api_key, f"{header_b64}.{payload_b64}")
    if not hmac.compare_digest(expected, signature):
        raise TenantTokenError("Tenant token signature mismatch")

    try:
        header = json.loads(_b64decode(header_b64))
        payload = json.loads(_b64decode(payload_b64))
    except ValueError as e:
        raise TenantTokenError(f"Tenant token is not valid JSON: {e}") from e

    if header.get("alg") != ALGORITHM:
        raise TenantTokenError(f"Unsupported token algorithm {header.get('alg')!r}")
    if verify_exp and "exp" in payload and payload["exp"] <= clock():
        raise ExpiredTokenError(payload["exp"])
    return payload


class TenantTokenGenerator:
    """Token generator bound to a client configuration's API key."""

    def __init__(self, config: ClientConfig, clock: Callable[[], float] = time.time):
        self.config = config
        self.clock = clock

    def generate(self,
                 api_key_uid: str,
                 search_rules: Optional[Mapping[str, Any]],
                 *,
                 api_key: Optional[str] = None,
                 expires_at: Optional[ExpiresAt] = None) -> str:
        """``api_key`` overrides the configured key as signing secret."""
        return generate_tenant_token(
            api_key_uid,
            search_rules,
            api_key or self.config.api_key,
            expires_at,
            clock=self.clock,
        )
