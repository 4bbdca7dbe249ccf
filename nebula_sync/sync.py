"""Synchronisation of a primary Pi-hole onto its replicas."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from functools import partial
from typing import Any, Iterable, Iterator

from . import retry
from .config import (
    Client,
    ConfigSetting,
    ConfigSettings,
    GravitySettings,
    Sync,
    new_config_setting,
)
from .filter import by_type
from .model import (
    ConfigResponse,
    PatchConfig,
    PatchConfigRequest,
    PostGravityRequest,
    PostTeleporterRequest,
)

_log = logging.getLogger(__name__)

_SECTIONS = ("dns", "dhcp", "ntp", "resolver", "database", "misc", "debug")


class SyncError(Exception):
    """Raised when a stage of a sync fails."""


@contextmanager
def _stage(label: str) -> Iterator[None]:
    try:
        yield
    except Exception as exc:
        raise SyncError(f"{label}: {exc}") from exc


class Target:
    """A primary Pi-hole and the replicas that follow it."""

    def __init__(self, primary: Any, replicas: Iterable[Any], client: Client | None = None) -> None:
        self.primary = primary
        self.replicas = list(replicas)
        self.client = client

    def full_sync(self, sync: Sync) -> None:
        """Copy all gravity data and every config section to the replicas."""
        self._run(
            lambda: self._steps(
                new_full_sync_gravity_settings(), new_full_sync_config_settings(), sync.run_gravity
            ),
            "full",
        )

    def selective_sync(self, sync: Sync) -> None:
        """Copy only what the sync settings select to the replicas."""
        self._run(
            lambda: self._steps(sync.gravity_settings, sync.config_settings, sync.run_gravity),
            "selective",
        )

    def _run(self, step: Any, mode: str) -> None:
        _log.info("Running sync (mode=%s, replicas=%d)", mode, len(self.replicas))
        try:
            with _stage("authenticate"):
                self.authenticate()
            step()
        except Exception as exc:
            _log.error("Error during sync: %s", exc)
            raise
        finally:
            self.delete_sessions()

    def _steps(
        self,
        gravity_settings: GravitySettings | None,
        config_settings: ConfigSettings | None,
        run_gravity: bool,
    ) -> None:
        with _stage("sync teleporters"):
            self.sync_teleporters(gravity_settings)
        with _stage("sync configs"):
            if config_settings is None:
                raise SyncError("no config settings")
            self.sync_configs(config_settings)
        if run_gravity:
            with _stage("run gravity"):
                self.run_gravity()

    def authenticate(self) -> None:
        """Authenticate the primary, then every replica with retries."""
        _log.info("Authenticating clients...")
        self.primary.post_auth()
        for replica in self.replicas:
            retry.fixed(replica.post_auth, retry.ATTEMPTS_POST_AUTH)

    def delete_sessions(self) -> None:
        """Invalidate all sessions; failures are only logged."""
        _log.info("Invalidating sessions...")
        try:
            self.primary.delete_session()
        except Exception:
            _log.warning("Failed to invalidate session for target: %s", self.primary)
        for replica in self.replicas:
            try:
                retry.fixed(replica.delete_session, retry.ATTEMPTS_DELETE_SESSION)
            except Exception:
                _log.warning("Failed to invalidate session for target: %s", replica)

    def sync_teleporters(self, gravity_settings: GravitySettings | None) -> None:
        """Copy the primary's teleporter archive to every replica."""
        _log.info("Syncing teleporters...")
        payload = self.primary.get_teleporter()
        request = (
            create_post_teleporter_request(gravity_settings) if gravity_settings is not None else None
        )
        for replica in self.replicas:
            retry.fixed(
                partial(replica.post_teleporter, payload, request), retry.ATTEMPTS_POST_TELEPORTER
            )

    def sync_configs(self, config_settings: ConfigSettings) -> None:
        """Patch every replica with the selected parts of the primary's config."""
        _log.info("Syncing configs...")
        config_response = self.primary.get_config()
        request = create_patch_config_request(config_settings, config_response)
        for replica in self.replicas:
            retry.fixed(partial(replica.patch_config, request), retry.ATTEMPTS_PATCH_CONFIG)

    def run_gravity(self) -> None:
        """Rebuild gravity on the primary, then on every replica."""
        _log.info("Running gravity...")
        self.primary.post_run_gravity()
        for replica in self.replicas:
            retry.fixed(replica.post_run_gravity, retry.ATTEMPTS_POST_RUN_GRAVITY)


def new_full_sync_config_settings() -> ConfigSettings:
    """Config settings of a full sync: everything but webserver and files."""
    return ConfigSettings(
        dns=new_config_setting(True),
        dhcp=new_config_setting(True),
        ntp=new_config_setting(True),
        resolver=new_config_setting(True),
        database=new_config_setting(True),
        webserver=new_config_setting(False),
        files=new_config_setting(False),
        misc=new_config_setting(True),
        debug=new_config_setting(True),
    )


def new_full_sync_gravity_settings() -> GravitySettings:
    """Gravity settings of a full sync: everything."""
    return GravitySettings(
        dhcp_leases=True,
        group=True,
        adlist=True,
        adlist_by_group=True,
        domainlist=True,
        domainlist_by_group=True,
        client=True,
        client_by_group=True,
    )


def create_patch_config_request(
    config_settings: ConfigSettings, config_response: ConfigResponse
) -> PatchConfigRequest:
    """Build the patch request from the enabled, filtered config sections."""
    sections = {
        name: filter_patch_config_request(getattr(config_settings, name), config_response.get(name))
        for name in _SECTIONS
    }
    return PatchConfigRequest(config=PatchConfig(**sections))


def filter_patch_config_request(
    setting: ConfigSetting, data: dict[str, Any] | None
) -> dict[str, Any] | None:
    """Return the section to send, or None when the setting is disabled."""
    if not setting.enabled:
        return None
    if setting.filter is not None:
        try:
            return by_type(setting.filter.type, setting.filter.keys, data or {})
        except ValueError as exc:
            _log.warning("Unable to filter json object: %s", exc)
            return None
    return data


def create_post_teleporter_request(gravity: GravitySettings) -> PostTeleporterRequest:
    """Build the teleporter import selection; the config part is never imported."""
    return PostTeleporterRequest(
        config=False,
        dhcp_leases=gravity.dhcp_leases,
        gravity=PostGravityRequest(
            group=gravity.group,
            adlist=gravity.adlist,
            adlist_by_group=gravity.adlist_by_group,
            domainlist=gravity.domainlist,
            domainlist_by_group=gravity.domainlist_by_group,
            client=gravity.client,
            client_by_group=gravity.client_by_group,
        ),
    )