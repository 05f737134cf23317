"""Resilient remote calls against the workspace REST API.

This module wraps a single HTTP-style request with retry-with-backoff for
transient overload (HTTP 429) and classifies every other failure once, at
the call boundary. Upper layers only ever see decoded JSON bodies or one of
the RemoteError subclasses from wsops.core.errors.

The retry loop is a small bounded state machine driven by an injected
RetryPolicy, so tests can run it with a zero-delay sleep.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Mapping, Protocol

import requests

from wsops.core.auth import AuthError
from wsops.core.errors import NotFound, RemoteError, RetryExhausted

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = frozenset({"NOT_FOUND", "RESOURCE_DOES_NOT_EXIST"})


class CallOutcome(str, Enum):
    """
    Classification of a single remote response.

    Values:
        SUCCESS: 2xx response; the body is decoded and returned.
        TRANSIENT: Overload signal; the same call is retried.
        NOT_FOUND: The target does not exist.
        TERMINAL: Any other failure; surfaced immediately.
    """

    SUCCESS = "SUCCESS"
    TRANSIENT = "TRANSIENT"
    NOT_FOUND = "NOT_FOUND"
    TERMINAL = "TERMINAL"


class HttpResponse(Protocol):
    """The subset of `requests.Response` the caller relies on."""

    status_code: int
    content: bytes
    text: str

    def json(self) -> Any: ...


class Session(Protocol):
    """Interface for an authenticated session issuing workspace API requests."""

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Mapping[str, Any] | None = None,
    ) -> HttpResponse:
        """Send one request relative to the workspace API root."""
        ...


@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounded exponential backoff for transient overload.

    Attributes:
        max_attempts: Total attempts per call, including the first one.
        base_delay: Delay in seconds before the first retry.
        max_delay: Upper bound for any single delay.
        retry_statuses: HTTP statuses treated as transient.
        sleep: Function used to wait between attempts.
    """

    _MAX_ATTEMPTS_ENV = "WSOPS_MAX_ATTEMPTS"
    _BASE_DELAY_ENV = "WSOPS_RETRY_BASE_DELAY"
    _MAX_DELAY_ENV = "WSOPS_RETRY_MAX_DELAY"

    max_attempts: int = 5
    base_delay: float = 1.0
    max_delay: float = 30.0
    retry_statuses: frozenset[int] = frozenset({429})
    sleep: Callable[[float], None] = field(default=time.sleep, compare=False)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.base_delay < 0 or self.max_delay < 0:
            raise ValueError("retry delays must be >= 0")

    def backoff(self, attempt: int) -> float:
        """Return the delay after the given failed attempt (1-based)."""
        return min(self.base_delay * (2 ** (attempt - 1)), self.max_delay)

    @classmethod
    def from_env(cls, **overrides: Any) -> "RetryPolicy":
        """Build a policy from WSOPS_* environment overrides."""
        defaults = cls()
        values: dict[str, Any] = {
            "max_attempts": _env_number(
                cls._MAX_ATTEMPTS_ENV, int, defaults.max_attempts, minimum=1
            ),
            "base_delay": _env_number(
                cls._BASE_DELAY_ENV, float, defaults.base_delay, minimum=0
            ),
            "max_delay": _env_number(
                cls._MAX_DELAY_ENV, float, defaults.max_delay, minimum=0
            ),
        }
        values.update(overrides)
        return cls(**values)


def _env_number(name: str, kind: type, default: Any, *, minimum: float) -> Any:
    """Read a numeric env var, falling back to the default when unusable."""
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = kind(raw)
    except ValueError:
        return default
    return value if value >= minimum else default


def classify(status_code: int, error_code: str, policy: RetryPolicy) -> CallOutcome:
    """Decide the outcome of a response from its status and error code."""
    if 200 <= status_code < 300:
        return CallOutcome.SUCCESS
    if status_code in policy.retry_statuses:
        return CallOutcome.TRANSIENT
    if status_code == 404 and (not error_code or error_code in NOT_FOUND_CODES):
        return CallOutcome.NOT_FOUND
    return CallOutcome.TERMINAL


def _decode_body(response: HttpResponse) -> Any:
    """Decode a JSON body, returning None when the body is empty or not JSON."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


def _retry_after(response: HttpResponse, cap: float) -> float | None:
    """Seconds from a numeric Retry-After header, capped; None if absent or unusable."""
    headers = getattr(response, "headers", None) or {}
    raw = headers.get("Retry-After")
    if raw is None:
        return None
    try:
        seconds = float(raw)
    except (TypeError, ValueError):
        return None
    if not seconds >= 0:
        return None
    return min(seconds, cap)


def _error_fields(response: HttpResponse, body: Any) -> tuple[str, str]:
    """Extract (error_code, message) from an error response."""
    if isinstance(body, Mapping):
        code = str(body.get("error_code") or "")
        message = str(body.get("message") or "")
        if message:
            return code, message
    else:
        code = ""
    text = (response.text or "").strip() if response.content else ""
    message = f"HTTP {response.status_code}"
    if text:
        message = f"{message}: {text}"
    return code, message


class RemoteCaller:
    """
    Retrying wrapper around a workspace API session.

    The remote API is assumed idempotent for every operation issued through
    this caller (import with overwrite, status, list, export, delete).
    """

    def __init__(self, session: Session, policy: RetryPolicy | None = None):
        self.session = session
        self.policy = policy or RetryPolicy()

    def call(
        self,
        method: str,
        path: str,
        query: Mapping[str, Any] | None = None,
        body: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Issue a call and return its decoded JSON body.

        Args:
            method: HTTP method (GET, POST).
            path: API path relative to the API root, e.g. `/workspace/list`.
            query: Optional query string parameters.
            body: Optional JSON request body.

        Returns:
            The decoded response body (empty dict for an empty body).

        Raises:
            NotFound: The target does not exist.
            RetryExhausted: Overload persisted for every allowed attempt.
            RemoteError: Any other rejection, a transport failure
                (TRANSPORT_ERROR) or unusable credentials (UNAUTHENTICATED).
        """
        attempt = 0
        while True:
            attempt += 1
            logger.debug("%s %s attempt=%d query=%s", method, path, attempt, query)
            try:
                response = self.session.request(method, path, params=query, json=body)
            except requests.RequestException as exc:
                raise RemoteError("TRANSPORT_ERROR", str(exc)) from exc
            except AuthError as exc:
                raise RemoteError("UNAUTHENTICATED", str(exc)) from exc

            payload = _decode_body(response)
            code, message = ("", "")
            if not 200 <= response.status_code < 300:
                code, message = _error_fields(response, payload)
            outcome = classify(response.status_code, code, self.policy)

            if outcome is CallOutcome.SUCCESS:
                return payload if isinstance(payload, dict) else {}
            if outcome is CallOutcome.NOT_FOUND:
                raise NotFound(code or "NOT_FOUND", message, response.status_code)
            if outcome is CallOutcome.TERMINAL:
                raise RemoteError(code, message, response.status_code)

            if attempt >= self.policy.max_attempts:
                raise RetryExhausted(
                    attempt,
                    f"{method} {path} still overloaded after {attempt} attempts: "
                    f"{message}",
                    response.status_code,
                )
            delay = _retry_after(response, self.policy.max_delay)
            if delay is None:
                delay = self.policy.backoff(attempt)
            logger.warning(
                "%s %s returned %d, retrying in %.1fs (attempt %d/%d)",
                method,
                path,
                response.status_code,
                delay,
                attempt,
                self.policy.max_attempts,
            )
            self.policy.sleep(delay)
