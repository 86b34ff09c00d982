"""Unit tests for environment-driven configuration."""

import importlib
import logging

import pytest

from pathsampler import config as cfg


@pytest.fixture
def package_logger():
    logger = logging.getLogger("pathsampler")
    level = logger.level
    yield logger
    logger.setLevel(level)


@pytest.fixture
def reload_config(monkeypatch):
    def _reload(**env):
        for name, value in env.items():
            monkeypatch.setenv(name, value)
        return importlib.reload(cfg)

    yield _reload
    monkeypatch.undo()
    importlib.reload(cfg)


class TestTraceSwitch:
    def test_env_enables_trace_level(self, package_logger, reload_config):
        package_logger.setLevel(logging.NOTSET)
        reloaded = reload_config(PATHSAMPLER_TRACE="1")

        assert reloaded.TRACE_ENABLED
        assert package_logger.level == cfg.TRACE
        assert logging.getLogger("pathsampler.sampler").isEnabledFor(cfg.TRACE)

    def test_env_off_leaves_level_alone(self, package_logger, reload_config):
        package_logger.setLevel(logging.WARNING)
        reloaded = reload_config(PATHSAMPLER_TRACE="0")

        assert not reloaded.TRACE_ENABLED
        assert package_logger.level == logging.WARNING

    def test_explicit_enable(self, package_logger):
        package_logger.setLevel(logging.INFO)
        cfg.apply_trace_level(True)
        assert package_logger.level == cfg.TRACE


def test_env_bool_optional(monkeypatch):
    monkeypatch.setenv("PATHSAMPLER_TEST_FLAG", "off")
    assert cfg._env_bool_optional("PATHSAMPLER_TEST_FLAG") is False
    monkeypatch.setenv("PATHSAMPLER_TEST_FLAG", "maybe")
    assert cfg._env_bool_optional("PATHSAMPLER_TEST_FLAG") is None
    monkeypatch.delenv("PATHSAMPLER_TEST_FLAG")
    assert cfg._env_bool_optional("PATHSAMPLER_TEST_FLAG") is None
