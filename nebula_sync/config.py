"""Settings read from the environment: targets, HTTP client and sync options."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from typing import Any, Mapping

import requests
from dotenv import dotenv_values

from .filter import FilterType
from .model import PiHole

_log = logging.getLogger(__name__)

_TRUE = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE = frozenset({"0", "f", "F", "FALSE", "false", "False"})
_LEGACY_OCTAL = re.compile(r"[+-]?0[0-7_]+")

_SECTIONS = ("dns", "dhcp", "ntp", "resolver", "database", "misc", "debug")
_GRAVITY_PREFIX = "GRAVITYSETTINGS"


class ConfigError(ValueError):
    """Raised when the environment does not describe a valid configuration."""


def _environ(environ: Mapping[str, str] | None) -> Mapping[str, str]:
    return os.environ if environ is None else environ


def _lookup(environ: Mapping[str, str], *keys: str) -> str | None:
    for key in keys:
        if key in environ:
            return environ[key]
    return None


def _parse_bool(key: str, text: str) -> bool:
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigError(f"assigning {key}: converting {text!r} to type bool")


def _parse_int(key: str, text: str) -> int:
    if text and text == text.strip():
        try:
            return int(text, 0)
        except ValueError:
            if _LEGACY_OCTAL.fullmatch(text):
                return int(text, 8)
    raise ConfigError(f"assigning {key}: converting {text!r} to type int64")


def _get_bool(
    environ: Mapping[str, str], key: str, *aliases: str, default: bool = False, required: bool = False
) -> bool:
    text = _lookup(environ, *aliases, key)
    if text is None:
        if required:
            raise ConfigError(f"required key {key} missing value")
        return default
    return _parse_bool(key, text)


def _get_int(environ: Mapping[str, str], key: str, *, default: int) -> int:
    text = environ.get(key)
    if text is None:
        return default
    return _parse_int(key, text)


def _get_list(environ: Mapping[str, str], key: str) -> list[str] | None:
    text = environ.get(key)
    if text is None:
        return None
    return text.split(",") if text else []


class _TimeoutSession(requests.Session):
    """A session that applies a default timeout to every request."""

    def __init__(self, timeout: float | None) -> None:
        super().__init__()
        self.timeout = timeout

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:  # type: ignore[override]
        kwargs.setdefault("timeout", self.timeout)
        return super().request(method, url, **kwargs)


@dataclass
class Client:
    """HTTP client settings."""

    skip_tls_verification: bool = False
    retry_delay: int = 1
    timeout: int = 20

    def new_http_session(self) -> requests.Session:
        """Create a session honouring the TLS and timeout settings."""
        session = _TimeoutSession(float(self.timeout) if self.timeout > 0 else None)
        session.verify = not self.skip_tls_verification
        return session


@dataclass
class GravitySettings:
    """Which gravity parts a teleporter import carries over."""

    dhcp_leases: bool = False
    group: bool = False
    adlist: bool = False
    adlist_by_group: bool = False
    domainlist: bool = False
    domainlist_by_group: bool = False
    client: bool = False
    client_by_group: bool = False


@dataclass
class ConfigFilter:
    type: FilterType
    keys: list[str]


@dataclass
class ConfigSetting:
    enabled: bool
    filter: ConfigFilter | None = None


@dataclass
class ConfigSettings:
    dns: ConfigSetting
    dhcp: ConfigSetting
    ntp: ConfigSetting
    resolver: ConfigSetting
    database: ConfigSetting
    webserver: ConfigSetting
    files: ConfigSetting
    misc: ConfigSetting
    debug: ConfigSetting


def new_config_setting(
    enabled: bool, included: list[str] | None = None, excluded: list[str] | None = None
) -> ConfigSetting:
    """Build a setting; an include list takes precedence over an exclude list."""
    if included is not None:
        config_filter: ConfigFilter | None = ConfigFilter(FilterType.INCLUDE, included)
    elif excluded is not None:
        config_filter = ConfigFilter(FilterType.EXCLUDE, excluded)
    else:
        config_filter = None
    return ConfigSetting(enabled=enabled, filter=config_filter)


@dataclass
class RawConfigSettings:
    """Config-section settings as read from the environment, before validation."""

    dns: bool = False
    dns_include: list[str] | None = None
    dns_exclude: list[str] | None = None
    dhcp: bool = False
    dhcp_include: list[str] | None = None
    dhcp_exclude: list[str] | None = None
    ntp: bool = False
    ntp_include: list[str] | None = None
    ntp_exclude: list[str] | None = None
    resolver: bool = False
    resolver_include: list[str] | None = None
    resolver_exclude: list[str] | None = None
    database: bool = False
    database_include: list[str] | None = None
    database_exclude: list[str] | None = None
    webserver: bool = False
    files: bool = False
    misc: bool = False
    misc_include: list[str] | None = None
    misc_exclude: list[str] | None = None
    debug: bool = False
    debug_include: list[str] | None = None
    debug_exclude: list[str] | None = None

    def _sections(self) -> list[tuple[str, bool, list[str] | None, list[str] | None]]:
        return [
            ("dns", self.dns, self.dns_include, self.dns_exclude),
            ("dhcp", self.dhcp, self.dhcp_include, self.dhcp_exclude),
            ("ntp", self.ntp, self.ntp_include, self.ntp_exclude),
            ("resolver", self.resolver, self.resolver_include, self.resolver_exclude),
            ("database", self.database, self.database_include, self.database_exclude),
            ("misc", self.misc, self.misc_include, self.misc_exclude),
            ("debug", self.debug, self.debug_include, self.debug_exclude),
        ]

    def validate(self) -> None:
        """Raise ConfigError if a section has both an include and an exclude list."""
        for name, _, include, exclude in self._sections():
            if include is not None and exclude is not None:
                raise ConfigError(f"{name}: INCLUDE/EXCLUDE must be mutually exclusive")

    def parse(self) -> ConfigSettings:
        """Validate and turn the raw values into ConfigSettings."""
        self.validate()
        settings = {
            name: new_config_setting(enabled, include, exclude)
            for name, enabled, include, exclude in self._sections()
        }
        return ConfigSettings(
            webserver=new_config_setting(self.webserver),
            files=new_config_setting(self.files),
            **settings,
        )


@dataclass
class Sync:
    """How and when to synchronise."""

    full_sync: bool = False
    cron: str | None = None
    run_gravity: bool = False
    gravity_settings: GravitySettings | None = None
    config_settings: ConfigSettings | None = None
    success_webhook_url: str = ""
    failure_webhook_url: str = ""


@dataclass
class Config:
    """The complete configuration."""

    primary: PiHole
    replicas: list[PiHole] = field(default_factory=list)
    client: Client | None = None
    sync: Sync | None = None

    @classmethod
    def load(cls, environ: Mapping[str, str] | None = None) -> "Config":
        """Read targets, client and sync settings from ``environ`` (default: os.environ)."""
        env = _environ(environ)
        primary, replicas = load_targets(env)
        client = load_client(env)
        sync = load_sync(env)
        return cls(primary=primary, replicas=replicas, client=client, sync=sync)


def load_client(environ: Mapping[str, str] | None = None) -> Client:
    """Read the CLIENT_* settings."""
    env = _environ(environ)
    try:
        return Client(
            skip_tls_verification=_get_bool(env, "CLIENT_SKIP_TLS_VERIFICATION"),
            retry_delay=_get_int(env, "CLIENT_RETRY_DELAY_SECONDS", default=1),
            timeout=_get_int(env, "CLIENT_TIMEOUT_SECONDS", default=20),
        )
    except ConfigError as exc:
        raise ConfigError(f"client env vars: {exc}") from exc


def _load_gravity_settings(env: Mapping[str, str]) -> GravitySettings:
    def flag(key: str) -> bool:
        return _get_bool(env, key, f"{_GRAVITY_PREFIX}_{key}")

    return GravitySettings(
        dhcp_leases=flag("SYNC_GRAVITY_DHCP_LEASES"),
        group=flag("SYNC_GRAVITY_GROUP"),
        adlist=flag("SYNC_GRAVITY_AD_LIST"),
        adlist_by_group=flag("SYNC_GRAVITY_AD_LIST_BY_GROUP"),
        domainlist=flag("SYNC_GRAVITY_DOMAIN_LIST"),
        domainlist_by_group=flag("SYNC_GRAVITY_DOMAIN_LIST_BY_GROUP"),
        client=flag("SYNC_GRAVITY_CLIENT"),
        client_by_group=flag("SYNC_GRAVITY_CLIENT_BY_GROUP"),
    )


def load_sync(environ: Mapping[str, str] | None = None) -> Sync:
    """Read the sync settings, including gravity and config-section settings."""
    env = _environ(environ)
    try:
        full_sync = _get_bool(env, "FULL_SYNC", required=True)
        cron = env.get("CRON")
        run_gravity = _get_bool(env, "RUN_GRAVITY")
        gravity_settings = _load_gravity_settings(env)
        success_url = env.get("SYNC_SUCCESS_WEBHOOK_URL", "")
        failure_url = env.get("SYNC_FAILURE_WEBHOOK_URL", "")
    except ConfigError as exc:
        raise ConfigError(f"sync env vars: {exc}") from exc

    try:
        config_settings = load_config_settings(env)
    except ConfigError as exc:
        raise ConfigError(f"load config settings: {exc}") from exc

    return Sync(
        full_sync=full_sync,
        cron=cron,
        run_gravity=run_gravity,
        gravity_settings=gravity_settings,
        config_settings=config_settings,
        success_webhook_url=success_url,
        failure_webhook_url=failure_url,
    )


def load_raw_config_settings(environ: Mapping[str, str] | None = None) -> RawConfigSettings:
    """Read the SYNC_CONFIG_* settings without validating them."""
    env = _environ(environ)
    values: dict[str, Any] = {}
    for section in _SECTIONS:
        key = f"SYNC_CONFIG_{section.upper()}"
        values[section] = _get_bool(env, key)
        values[f"{section}_include"] = _get_list(env, f"{key}_INCLUDE")
        values[f"{section}_exclude"] = _get_list(env, f"{key}_EXCLUDE")
    return RawConfigSettings(**values)


def load_config_settings(environ: Mapping[str, str] | None = None) -> ConfigSettings:
    """Read and validate the SYNC_CONFIG_* settings."""
    try:
        raw = load_raw_config_settings(environ)
    except ConfigError as exc:
        raise ConfigError(f"config settings env vars: {exc}") from exc
    return raw.parse()


def _read_target_file(path: str) -> str:
    try:
        with open(path, encoding="utf-8") as stream:
            return stream.read().strip()
    except OSError as exc:
        raise ConfigError(str(exc)) from exc


def _parse_target(value: str) -> PiHole:
    try:
        return PiHole.parse(value)
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc


def _target_value(env: Mapping[str, str], name: str) -> str:
    path = env.get(f"{name}_FILE", "")
    if path:
        return _read_target_file(path)
    value = env.get(name, "")
    if value:
        return value
    raise ConfigError(f"missing required env: {name}/{name}_FILE")


def load_primary(environ: Mapping[str, str] | None = None) -> PiHole:
    """Read the primary from PRIMARY_FILE or, failing that, PRIMARY."""
    return _parse_target(_target_value(_environ(environ), "PRIMARY"))


def load_replicas(environ: Mapping[str, str] | None = None) -> list[PiHole]:
    """Read the comma-separated replicas from REPLICAS_FILE or, failing that, REPLICAS."""
    value = _target_value(_environ(environ), "REPLICAS")
    return [_parse_target(item) for item in value.split(",")]


def load_targets(environ: Mapping[str, str] | None = None) -> tuple[PiHole, list[PiHole]]:
    """Read the primary and the replicas."""
    env = _environ(environ)
    return load_primary(env), load_replicas(env)


def load_env_file(filename: str) -> None:
    """Load variables from a dotenv file; variables already set are kept."""
    _log.debug("Loading envs from file: %s", filename)
    try:
        with open(filename, encoding="utf-8") as stream:
            values = dotenv_values(stream=stream)
    except OSError as exc:
        raise ConfigError(str(exc)) from exc
    for key, value in values.items():
        if value is not None:
            os.environ.setdefault(key, value)