import logging

import pytest

from nebula_sync.logs import LevelFilter, init


@pytest.fixture(autouse=True)
def restore_logger():
    logger = logging.getLogger("nebula_sync")
    saved = (logger.level, list(logger.handlers), logger.propagate)
    yield
    logger.setLevel(saved[0])
    logger.handlers[:] = saved[1]
    logger.propagate = saved[2]


def test_init_info(monkeypatch):
    monkeypatch.setenv("NS_DEBUG", "false")
    assert init().level == logging.INFO


def test_init_debug(monkeypatch):
    monkeypatch.setenv("NS_DEBUG", "true")
    assert init().level == logging.DEBUG


def test_init_unset(monkeypatch):
    monkeypatch.delenv("NS_DEBUG", raising=False)
    assert init().level == logging.INFO


def test_init_invalid_value_warns(monkeypatch, capsys):
    monkeypatch.setenv("NS_DEBUG", "maybe")
    logger = init()
    assert logger.level == logging.INFO
    assert "NS_DEBUG" in capsys.readouterr().out


def test_levels_routed_to_streams(monkeypatch, capsys):
    monkeypatch.setenv("NS_DEBUG", "false")
    logger = init()
    logger.info("hello-info")
    logger.error("hello-error")
    logger.debug("hello-debug")
    captured = capsys.readouterr()
    assert "hello-info" in captured.out
    assert "hello-info" not in captured.err
    assert "hello-error" in captured.err
    assert "hello-error" not in captured.out
    assert "hello-debug" not in captured.out


def test_level_filter():
    level_filter = LevelFilter([logging.INFO])
    info = logging.LogRecord("x", logging.INFO, __file__, 1, "m", None, None)
    error = logging.LogRecord("x", logging.ERROR, __file__, 1, "m", None, None)
    assert level_filter.filter(info) is True
    assert level_filter.filter(error) is False