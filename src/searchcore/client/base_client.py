#!/usr/bin/env python3
"""
Base HTTP client for searchcore

This module provides the transport every searchcore client builds on: an
``httpx.AsyncClient`` with a circuit breaker, retry with exponential backoff
for idempotent reads, and mapping of HTTP/transport failures onto the
``searchcore.errors`` hierarchy.
"""

import time
import random
import asyncio
import logging
from typing import Callable, Any, Optional, Dict, Tuple, Type, Union
from enum import Enum

import httpx  # pyright: ignore[reportMissingImports]

from searchcore.config import ClientConfig, RetryConfig
from searchcore.errors import (
    ApiError,
    CircuitOpenError,
    CommunicationError,
    RequestTimeoutError,
)
from searchcore import metrics

logger = logging.getLogger(__name__)

ExceptionTypes = Union[Type[BaseException], Tuple[Type[BaseException], ...]]


class CircuitState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    """Simple circuit breaker for calls to the search service."""

    def __init__(self,
                 failure_threshold: int = 5,
                 recovery_timeout: float = 30.0,
                 expected_exception: ExceptionTypes = CommunicationError,
                 name: str = "search"):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.expected_exception = expected_exception
        self.name = name

        self.failure_count = 0
        self.last_failure_time: Optional[float] = None
        self.state = CircuitState.CLOSED

        # Metrics
        self.total_calls = 0
        self.successful_calls = 0
        self.failed_calls = 0
        self.circuit_opens = 0

    async def call(self, func: Callable, *args, **kwargs) -> Any:
        """Execute a coroutine function with circuit breaker protection."""
        self.total_calls += 1

        if self.state == CircuitState.OPEN:
            if time.monotonic() - self.last_failure_time > self.recovery_timeout:
                self.state = CircuitState.HALF_OPEN
                logger.info("Circuit breaker %s transitioning to HALF_OPEN", self.name)
            else:
                self.failed_calls += 1
                raise CircuitOpenError(f"Circuit breaker {self.name} is OPEN")

        try:
            result = await func(*args, **kwargs)
        except self.expected_exception:
            self._on_failure()
            raise
        # Anything else (e.g. a 4xx ApiError) means the service answered:
        # it propagates without counting against the circuit.
        self._on_success()
        return result

    def _on_success(self):
        self.successful_calls += 1
        self.failure_count = 0

        if self.state == CircuitState.HALF_OPEN:
            self.state = CircuitState.CLOSED
            logger.info("Circuit breaker %s transitioning to CLOSED", self.name)

    def _on_failure(self):
        self.failed_calls += 1
        self.failure_count += 1
        self.last_failure_time = time.monotonic()

        if self.failure_count >= self.failure_threshold or self.state == CircuitState.HALF_OPEN:
            if self.state != CircuitState.OPEN:
                self.state = CircuitState.OPEN
                self.circuit_opens += 1
                metrics.CIRCUIT_OPENS.labels(service=self.name).inc()
                logger.warning(
                    "Circuit breaker %s opened after %d failures", self.name, self.failure_count
                )

    def get_state(self) -> dict:
        """Get current circuit breaker state."""
        return {
            "state": self.state.value,
            "failure_count": self.failure_count,
            "total_calls": self.total_calls,
            "successful_calls": self.successful_calls,
            "failed_calls": self.failed_calls,
            "circuit_opens": self.circuit_opens,
            "success_rate": self.successful_calls / self.total_calls if self.total_calls > 0 else 0.0
        }


def is_retryable(exc: BaseException) -> bool:
    """Transport failures and 5xx answers are worth another attempt; 4xx are not."""
    if isinstance(exc, CircuitOpenError):
        return False
    if isinstance(exc, CommunicationError):
        return True
    return isinstance(exc, ApiError) and exc.status_code >= 500


async def retry_with_backoff(func: Callable,
                             config: Optional[RetryConfig] = None,
                             *args, **kwargs) -> Any:
    """Execute a coroutine function with exponential backoff retry."""
    if config is None:
        config = RetryConfig()

    for attempt in range(config.max_attempts):
        try:
            return await func(*args, **kwargs)
        except Exception as e:
            if attempt == config.max_attempts - 1 or not is_retryable(e):
                raise

            delay = min(
                config.base_delay * (config.exponential_base ** attempt),
                config.max_delay
            )
            if config.jitter:
                delay *= (0.5 + random.random() * 0.5)

            logger.warning("Attempt %d failed: %s, retrying in %.2fs", attempt + 1, e, delay)
            await asyncio.sleep(delay)

    raise RuntimeError("retry_with_backoff exhausted without a result")  # max_attempts < 1


def _decode_body(response: httpx.Response) -> Any:
    if response.status_code == 204 or not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class BaseServiceClient:
    """Base HTTP client with circuit breaker and retry logic for the search service."""

    def __init__(self,
                 config: ClientConfig,
                 service_name: str = "search",
                 circuit_breaker: Optional[CircuitBreaker] = None,
                 http: Optional[httpx.AsyncClient] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self.service_name = service_name
        self.base_url = config.host
        self.timeout = config.timeout
        self.retry_config = config.retry
        self.circuit_breaker = circuit_breaker or CircuitBreaker(
            failure_threshold=config.failure_threshold,
            recovery_timeout=config.recovery_timeout,
            name=service_name,
        )
        self._owns_http = http is None

        timeout = config.timeout
        self.http = http or httpx.AsyncClient(
            base_url=self.base_url,
            headers=config.get_headers(),
            transport=transport,
            timeout=httpx.Timeout(
                connect=min(timeout, 5.0),  # Connection timeout
                read=timeout,               # Read timeout
                write=min(timeout, 5.0),    # Write timeout
                pool=min(timeout, 5.0)      # Pool timeout
            )
        )

    async def issue(self,
                    method: str,
                    path: str,
                    *,
                    json: Any = None,
                    params: Optional[Dict[str, Any]] = None,
                    headers: Optional[Dict[str, str]] = None) -> Tuple[int, Any]:
        """
        Send one HTTP request and return ``(status_code, body)``.

        Raises:
            CommunicationError: no response was received
            RequestTimeoutError: the transport timeout elapsed
            ApiError: the service answered with a non-2xx status
        """
        method = method.upper()
        started = time.perf_counter()
        try:
            response = await self.http.request(method, path, json=json, params=params, headers=headers)
        except httpx.TimeoutException as e:
            metrics.HTTP_REQUESTS.labels(method=method, outcome="timeout").inc()
            logger.warning("HTTP timeout for %s %s %s: %s", self.service_name, method, path, e.__class__.__name__)
            raise RequestTimeoutError(f"{method} {path} timed out: {e}", method=method, path=path) from e
        except httpx.TransportError as e:
            metrics.HTTP_REQUESTS.labels(method=method, outcome="transport_error").inc()
            logger.warning("HTTP transport error for %s %s %s: %s", self.service_name, method, path, e)
            raise CommunicationError(f"{method} {path} failed: {e}", method=method, path=path) from e
        finally:
            metrics.HTTP_LATENCY.labels(method=method).observe(time.perf_counter() - started)

        body = _decode_body(response)
        if response.is_error:
            metrics.HTTP_REQUESTS.labels(method=method, outcome="api_error").inc()
            logger.debug("%s %s -> %d %s", method, path, response.status_code, body)
            raise ApiError.from_response(response.status_code, body)

        metrics.HTTP_REQUESTS.labels(method=method, outcome="ok").inc()
        logger.debug("%s %s -> %d", method, path, response.status_code)
        return response.status_code, body

    async def _request(self, method: str, path: str, *, retry: bool = False, **kwargs) -> Any:
        async def _make_request():
            _, body = await self.issue(method, path, **kwargs)
            return body

        async def _guarded():
            return await self.circuit_breaker.call(_make_request)

        if retry and self.retry_config.max_attempts > 1:
            return await retry_with_backoff(_guarded, self.retry_config)
        return await _guarded()

    async def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None, *, retry: bool = True) -> Any:
        """GET is idempotent, so it is retried with backoff unless ``retry=False``."""
        return await self._request("GET", endpoint, params=params, retry=retry)

    async def post(self, endpoint: str, json: Any = None, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self._request("POST", endpoint, json=json, params=params)

    async def put(self, endpoint: str, json: Any = None, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self._request("PUT", endpoint, json=json, params=params)

    async def patch(self, endpoint: str, json: Any = None) -> Any:
        return await self._request("PATCH", endpoint, json=json)

    async def delete(self, endpoint: str) -> Any:
        return await self._request("DELETE", endpoint)

    def get_metrics(self) -> dict:
        """Get circuit breaker metrics."""
        return {
            "service": self.service_name,
            "base_url": self.base_url,
            "timeout": self.timeout,
            "circuit_breaker": self.circuit_breaker.get_state(),
        }

    async def close(self):
        """Close the HTTP client if this instance created it."""
        if self._owns_http and not self.http.is_closed:
            await self.http.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
