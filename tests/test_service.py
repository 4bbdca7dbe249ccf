import pytest

from nebula_sync.config import ConfigError
from nebula_sync.config import Config, Sync
from nebula_sync.model import PiHole
from nebula_sync.service import Service


class FakeTarget:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def full_sync(self, sync):
        self.calls.append(("full_sync", sync))
        if self.error is not None:
            raise self.error

    def selective_sync(self, sync):
        self.calls.append(("selective_sync", sync))
        if self.error is not None:
            raise self.error


class FakeWebhook:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def success(self):
        self.calls.append("success")
        if self.error is not None:
            raise self.error

    def failure(self):
        self.calls.append("failure")
        if self.error is not None:
            raise self.error


def make_config(full_sync, cron=None):
    return Config(primary=PiHole(url=None), replicas=[], sync=Sync(full_sync=full_sync, cron=cron))


def test_run_full():
    conf = make_config(True)
    target = FakeTarget()
    webhook = FakeWebhook()
    Service(target=target, conf=conf, webhook=webhook).run()
    assert target.calls == [("full_sync", conf.sync)]


def test_run_selective():
    conf = make_config(False)
    target = FakeTarget()
    webhook = FakeWebhook()
    Service(target=target, conf=conf, webhook=webhook).run()
    assert target.calls == [("selective_sync", conf.sync)]


def test_run_webhook_success():
    conf = make_config(False)
    target = FakeTarget()
    webhook = FakeWebhook()
    Service(target=target, conf=conf, webhook=webhook).run()
    assert target.calls == [("selective_sync", conf.sync)]
    assert webhook.calls == ["success"]


def test_run_webhook_failure():
    conf = make_config(False)
    sync_error = RuntimeError("sync failed")
    target = FakeTarget(error=sync_error)
    webhook = FakeWebhook()
    with pytest.raises(RuntimeError) as info:
        Service(target=target, conf=conf, webhook=webhook).run()
    assert info.value is sync_error
    assert target.calls == [("selective_sync", conf.sync)]
    assert webhook.calls == ["failure"]


def test_run_webhook_error_does_not_affect_result():
    conf = make_config(True)
    target = FakeTarget()
    webhook = FakeWebhook(error=RuntimeError("webhook failed"))
    Service(target=target, conf=conf, webhook=webhook).run()
    assert target.calls == [("full_sync", conf.sync)]
    assert webhook.calls == ["success"]


def test_failure_webhook_error_keeps_sync_error():
    conf = make_config(True)
    sync_error = RuntimeError("sync failed")
    webhook = FakeWebhook(error=RuntimeError("webhook failed"))
    with pytest.raises(RuntimeError) as info:
        Service(target=FakeTarget(error=sync_error), conf=conf, webhook=webhook).run()
    assert info.value is sync_error
    assert webhook.calls == ["failure"]


def test_invalid_cron_fails_after_first_sync():
    conf = make_config(True, cron="not a cron")
    target = FakeTarget()
    with pytest.raises(ValueError, match="cron job"):
        Service(target=target, conf=conf, webhook=FakeWebhook()).run()
    assert len(target.calls) == 1


def test_from_environment():
    environ = {
        "PRIMARY": "http://localhost:1337|asdf",
        "REPLICAS": "http://localhost:1338|qwerty,http://localhost:1339|foobar",
        "FULL_SYNC": "true",
        "CLIENT_RETRY_DELAY_SECONDS": "0",
        "SYNC_SUCCESS_WEBHOOK_URL": "http://hooks.example.com/ok",
    }
    service = Service.from_environment(environ)
    assert str(service.target.primary) == "http://localhost:1337"
    assert [str(replica) for replica in service.target.replicas] == [
        "http://localhost:1338",
        "http://localhost:1339",
    ]
    assert service.conf.sync.full_sync is True
    assert service.webhook.success_webhook_url == "http://hooks.example.com/ok"
    assert service.webhook.failure_webhook_url == ""


def test_from_environment_missing_primary():
    with pytest.raises(ConfigError, match="PRIMARY"):
        Service.from_environment({"REPLICAS": "http://localhost:1338|qwerty", "FULL_SYNC": "true"})