"""Pi-hole targets and the request and response bodies of its API."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping
from urllib.parse import urlsplit

_log = logging.getLogger(__name__)

_SEPARATOR = "|"


def _checked_url(uri: str) -> str:
    try:
        parts = urlsplit(uri)
        parts.port  # validates the port part
    except ValueError as exc:
        raise ValueError(f"parse url: {exc}") from exc
    return uri


@dataclass
class PiHole:
    """A Pi-hole instance: its base URL and API password."""

    url: str | None
    password: str = field(default_factory=str, repr=False)

    def __str__(self) -> str:
        return f"{{Url:{self.url}}}"

    @classmethod
    def parse(cls, value: str) -> "PiHole":
        """Parse ``<url>|<password>``; the password may itself contain ``|``."""
        uri, sep, password = value.partition(_SEPARATOR)
        if not sep:
            raise ValueError("invalid pihole format")
        return cls(url=_checked_url(uri), password=password)


def new_pihole(host: str, password: str) -> PiHole:
    """Build a PiHole, logging and leaving the URL unset if ``host`` is invalid."""
    try:
        url: str | None = _checked_url(host)
    except ValueError as exc:
        _log.error("Error parsing host %s: %s", host, exc)
        url = None
    return PiHole(url=url, password=password)


@dataclass
class AuthRequest:
    password: str = field(repr=False)

    def to_dict(self) -> dict[str, Any]:
        return {"password": self.password}


@dataclass
class AuthSession:
    """The ``session`` object of an authentication response."""

    valid: bool = False
    totp: bool = False
    sid: str = ""
    csrf: str = ""
    validity: int = 0
    message: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "AuthSession":
        data = data or {}
        return cls(
            valid=bool(data.get("valid", False)),
            totp=bool(data.get("totp", False)),
            sid=data.get("sid") or "",
            csrf=data.get("csrf") or "",
            validity=int(data.get("validity") or 0),
            message=data.get("message") or "",
        )


@dataclass
class PostGravityRequest:
    group: bool = False
    adlist: bool = False
    adlist_by_group: bool = False
    domainlist: bool = False
    domainlist_by_group: bool = False
    client: bool = False
    client_by_group: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "group": self.group,
            "adlist": self.adlist,
            "adlist_by_group": self.adlist_by_group,
            "domainlist": self.domainlist,
            "domainlist_by_group": self.domainlist_by_group,
            "client": self.client,
            "client_by_group": self.client_by_group,
        }


@dataclass
class PostTeleporterRequest:
    config: bool = False
    dhcp_leases: bool = False
    gravity: PostGravityRequest = field(default_factory=PostGravityRequest)

    def to_dict(self) -> dict[str, Any]:
        return {
            "config": self.config,
            "dhcp_leases": self.dhcp_leases,
            "gravity": self.gravity.to_dict(),
        }


@dataclass
class PatchConfig:
    dns: dict[str, Any] | None = None
    dhcp: dict[str, Any] | None = None
    ntp: dict[str, Any] | None = None
    resolver: dict[str, Any] | None = None
    database: dict[str, Any] | None = None
    misc: dict[str, Any] | None = None
    debug: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "dns": self.dns,
            "dhcp": self.dhcp,
            "ntp": self.ntp,
            "resolver": self.resolver,
            "database": self.database,
            "misc": self.misc,
            "debug": self.debug,
        }


@dataclass
class PatchConfigRequest:
    config: PatchConfig = field(default_factory=PatchConfig)

    def to_dict(self) -> dict[str, Any]:
        return {"config": self.config.to_dict()}


@dataclass
class ConfigResponse:
    config: dict[str, Any] = field(default_factory=dict)

    def get(self, key: str) -> dict[str, Any] | None:
        """Return the config section ``key``, or None with a warning if absent."""
        if key not in self.config:
            _log.warning("Missing key (%s) in config response", key)
            return None
        value = self.config[key]
        if not isinstance(value, dict):
            raise TypeError(f"config section {key!r} is not an object")
        return value