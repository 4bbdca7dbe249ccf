"""The sync service: one sync now, then optionally on a cron schedule."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from . import retry
from .client import PiHoleClient
from .config import Config
from .scheduler import parse_cron, run_cron
from .sync import Target
from .version import VERSION
from .webhook import WebhookClient

_log = logging.getLogger(__name__)


class Service:
    """Runs syncs of a target and reports their outcome to webhooks."""

    def __init__(self, target: Any, conf: Config, webhook: Any) -> None:
        self.target = target
        self.conf = conf
        self.webhook = webhook

    @classmethod
    def from_environment(cls, environ: Mapping[str, str] | None = None) -> "Service":
        """Build a service from the environment (default: os.environ)."""
        conf = Config.load(environ)
        assert conf.client is not None and conf.sync is not None
        session = conf.client.new_http_session()
        retry.init(conf.client)

        primary = PiHoleClient(conf.primary, session)
        replicas = [PiHoleClient(replica, session) for replica in conf.replicas]
        return cls(
            target=Target(primary, replicas),
            conf=conf,
            webhook=WebhookClient(conf.sync.success_webhook_url, conf.sync.failure_webhook_url),
        )

    def run(self) -> None:
        """Sync once; with a cron spec, keep syncing on that schedule."""
        _log.info("Starting nebula-sync %s", VERSION)
        _log.debug("Settings: %s", self.conf)

        self._do_sync()

        if self.conf.sync is not None and self.conf.sync.cron is not None:
            self._start_cron(self.conf.sync.cron)

    def _scheduled_sync(self) -> None:
        try:
            self._do_sync()
        except Exception as exc:
            _log.error("Sync failed: %s", exc)

    def _do_sync(self) -> None:
        sync = self.conf.sync
        try:
            if sync is not None and sync.full_sync:
                self.target.full_sync(sync)
            else:
                self.target.selective_sync(sync)
        except Exception:
            try:
                self.webhook.failure()
            except Exception as webhook_exc:
                _log.error("Failed to send failure webhook: %s", webhook_exc)
            raise

        _log.info("Sync completed")
        try:
            self.webhook.success()
        except Exception as webhook_exc:
            _log.error("Failed to send success webhook: %s", webhook_exc)

    def _start_cron(self, spec: str) -> None:
        try:
            parse_cron(spec)
        except ValueError as exc:
            raise ValueError(f"cron job: {exc}") from exc
        run_cron(spec, self._scheduled_sync)