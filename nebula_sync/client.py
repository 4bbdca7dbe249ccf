"""HTTP client for the Pi-hole API."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlsplit, urlunsplit

import requests

from .model import (
    AuthRequest,
    AuthSession,
    ConfigResponse,
    PatchConfigRequest,
    PiHole,
    PostTeleporterRequest,
)
from .version import user_agent

_log = logging.getLogger(__name__)


class PiHoleError(Exception):
    """Raised when a call to a Pi-hole fails."""


@dataclass
class Auth:
    """The session obtained by authenticating against a Pi-hole."""

    sid: str = field(default="", repr=False)
    csrf: str = field(default="", repr=False)
    validity: int = 0
    valid: bool = False

    def verify(self) -> None:
        """Raise PiHoleError unless the session is valid."""
        if not self.valid:
            raise PiHoleError("invalid sid found")


def _compact_json(data: Any) -> str:
    return json.dumps(data, separators=(",", ":"))


class PiHoleClient:
    """Talks to one Pi-hole over its REST API."""

    def __init__(self, pihole: PiHole, session: requests.Session | None = None) -> None:
        self.pihole = pihole
        self.auth = Auth()
        self._session = session if session is not None else requests.Session()

    def __str__(self) -> str:
        return self.pihole.url or ""

    def __repr__(self) -> str:
        return f"PiHoleClient({self})"

    def api_path(self, target: str) -> str:
        """Return the full URL of ``target`` below the ``api`` path of the Pi-hole."""
        parts = urlsplit(str(self))
        segments = [
            segment
            for piece in (parts.path, "api", target)
            for segment in piece.split("/")
            if segment
        ]
        path = "/" + "/".join(segments)
        if target.endswith("/"):
            path += "/"
        return urlunsplit((parts.scheme, parts.netloc, path, parts.query, parts.fragment))

    def _require_auth(self) -> None:
        try:
            self.auth.verify()
        except PiHoleError as exc:
            raise PiHoleError(f"{self}: {exc}") from exc

    def _send(
        self,
        method: str,
        target: str,
        *,
        authenticated: bool = True,
        headers: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> tuple[str, requests.Response]:
        url = self.api_path(target)
        all_headers = {"User-Agent": user_agent()}
        if authenticated:
            all_headers["sid"] = self.auth.sid
        all_headers.update(headers or {})
        try:
            response = self._session.request(method, url, headers=all_headers, **kwargs)
        except requests.RequestException as exc:
            raise PiHoleError(f"{url}: {exc}") from exc
        if not 200 <= response.status_code <= 299:
            raise PiHoleError(f"{url}: unexpected status code: {response.status_code}")
        return url, response

    @staticmethod
    def _json(url: str, response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise PiHoleError(f"{url}: {exc}") from exc

    def post_auth(self) -> None:
        """Authenticate with the password and store the session."""
        _log.debug("PostAuth: %s", self)
        body = _compact_json(AuthRequest(self.pihole.password).to_dict())
        url, response = self._send(
            "POST",
            "/auth",
            authenticated=False,
            headers={"Content-Type": "application/json"},
            data=body,
        )
        data = self._json(url, response)
        session = AuthSession.from_dict(data.get("session") if isinstance(data, dict) else None)
        self.auth = Auth(
            sid=session.sid,
            csrf=session.csrf,
            validity=session.validity,
            valid=session.valid,
        )
        self.auth.verify()

    def delete_session(self) -> None:
        """Invalidate the current session on the Pi-hole."""
        _log.debug("Delete session: %s", self)
        self._require_auth()
        if not self.auth.sid:
            _log.debug("Trying to delete empty session")
            return
        self._send("DELETE", "auth")

    def get_version(self) -> dict[str, Any]:
        """Return the version information reported by the Pi-hole."""
        _log.debug("Get version: %s", self)
        self._require_auth()
        url, response = self._send("GET", "info/version")
        data = self._json(url, response)
        if not isinstance(data, dict):
            raise PiHoleError(f"{url}: unexpected version response")
        return data

    def get_teleporter(self) -> bytes:
        """Download the teleporter archive."""
        _log.debug("Get teleporter: %s", self)
        self._require_auth()
        _, response = self._send("GET", "teleporter")
        return response.content

    def post_teleporter(
        self, payload: bytes, teleporter_request: PostTeleporterRequest | None
    ) -> None:
        """Upload a teleporter archive, optionally restricting what is imported."""
        _log.debug("Post teleporter: %s payload=%s", self, teleporter_request)
        self._require_auth()
        files = {"file": ("config.zip", payload, "application/octet-stream")}
        data = {}
        if teleporter_request is not None:
            data["import"] = _compact_json(teleporter_request.to_dict())
        self._send("POST", "teleporter", files=files, data=data)

    def get_config(self) -> ConfigResponse:
        """Return the configuration of the Pi-hole."""
        _log.debug("Get config: %s", self)
        self._require_auth()
        url, response = self._send("GET", "config")
        data = self._json(url, response)
        if not isinstance(data, dict):
            raise PiHoleError(f"{url}: unexpected config response")
        return ConfigResponse(config=dict(data.get("config") or {}))

    def patch_config(self, patch_request: PatchConfigRequest) -> None:
        """Apply a partial configuration to the Pi-hole."""
        _log.debug("Patch config: %s payload=%s", self, patch_request)
        self._require_auth()
        self._send("PATCH", "config", data=_compact_json(patch_request.to_dict()))

    def post_run_gravity(self) -> None:
        """Ask the Pi-hole to rebuild its gravity database."""
        _log.debug("Post run gravity: %s", self)
        self._require_auth()
        self._send("POST", "action/gravity")