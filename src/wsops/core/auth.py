"""Authentication helpers for the Databricks workspace API.

This module resolves Databricks unified authentication (profiles from
~/.databrickscfg or environment variables) and builds the explicit session
handle that every workspace call goes through. The host URL is normalized
to avoid malformed API URLs.
"""

from __future__ import annotations

import re
from typing import Any, Mapping

import requests
from databricks.sdk.core import Config

USER_AGENT = "wsops/0.1"
API_PREFIX = "/api/2.0"


class AuthError(RuntimeError):
    """Raised when Databricks authentication fails."""


def _format_auth_error(message: str, profile: str | None) -> str:
    """Return a user-friendly auth error message."""
    login_match = re.search(r"databricks auth login ([^\s]+)", message)
    if login_match:
        cmd = "databricks auth login"
        if profile:
            cmd = f"{cmd} --profile {profile}"
        return (
            "Databricks authentication failed. Your refresh token is invalid.\n"
            f"Re-authenticate with:\n  $ {cmd}"
        )
    return f"Databricks authentication failed: {message}"


def _sanitize_host(host: str | None) -> str | None:
    """
    Normalize a Databricks host URL.

    - Removes query strings (e.g. '?o=123456789')
    - Removes trailing slashes
    """
    if not host:
        return host
    host = host.split("?", 1)[0]
    return host.rstrip("/")


def get_config(profile: str | None = None) -> Config:
    """
    Resolve Databricks configuration for a profile (or the default chain).

    Raises:
        AuthError: If the configuration cannot be resolved.
    """
    try:
        cfg = Config(profile=profile) if profile else Config()
    except ValueError as exc:
        raise AuthError(_format_auth_error(str(exc), profile)) from exc
    cfg.host = _sanitize_host(cfg.host)
    return cfg


class WorkspaceSession:
    """
    Authenticated HTTP session bound to one workspace.

    Paths passed to `request` are relative to `<host>/api/2.0`. Credentials
    are resolved per request through the SDK config, so refreshed tokens are
    picked up transparently.
    """

    def __init__(self, config: Config, http: requests.Session | None = None):
        if not config.host:
            raise AuthError("Databricks authentication failed: no host configured")
        self.config = config
        self.base_url = f"{_sanitize_host(config.host)}{API_PREFIX}"
        self.http = http or requests.Session()

    def _headers(self) -> dict[str, str]:
        try:
            headers = dict(self.config.authenticate())
        except ValueError as exc:
            raise AuthError(_format_auth_error(str(exc), self.config.profile)) from exc
        headers.setdefault("User-Agent", USER_AGENT)
        headers.setdefault("Content-Type", "application/json")
        return headers

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Mapping[str, Any] | None = None,
    ) -> requests.Response:
        """Send one request relative to the workspace API root."""
        return self.http.request(
            method,
            f"{self.base_url}{path}",
            params=params,
            json=json,
            headers=self._headers(),
        )


def get_session(profile: str | None = None) -> WorkspaceSession:
    """Create a workspace session for a profile (or the default auth chain)."""
    return WorkspaceSession(get_config(profile))
