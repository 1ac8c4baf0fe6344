"""
配置测试
"""

import pytest
from pydantic import ValidationError

from core.config import ExecutionConfig, Settings, get_settings, reload_settings


class TestSettings:
    def test_defaults(self):
        settings = Settings()

        assert settings.POLL_INTERVAL == 0.5
        assert settings.RUN_TIMEOUT == 3600
        assert settings.DEFAULT_PORT == 3000
        assert settings.MIN_NODES == 1
        assert settings.MAX_NODES == 1000
        assert settings.WORKER_SERVICE_NAME == "WorkerService"
        assert settings.SHARED_DIR is None

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("POLL_INTERVAL", "0.1")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = Settings()
        assert settings.POLL_INTERVAL == 0.1
        assert settings.LOG_LEVEL == "DEBUG"

    def test_properties_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "conductor.properties").write_text("DEFAULT_PORT=4000\nMAX_NODES=8\n")

        settings = Settings()
        assert settings.DEFAULT_PORT == 4000
        assert settings.MAX_NODES == 8

    @pytest.mark.parametrize(
        "overrides",
        [
            {"DEFAULT_PORT": 80},
            {"LOG_LEVEL": "LOUD"},
            {"RETRY_JITTER": -1},
            {"MIN_NODES": 0},
            {"MIN_NODES": 5, "MAX_NODES": 2},
            {"MAX_WORKERS": 0},
        ],
    )
    def test_invalid_values(self, overrides):
        with pytest.raises(ValidationError):
            Settings(**overrides)

    def test_reload(self, monkeypatch):
        first = get_settings()
        assert get_settings() is first

        monkeypatch.setenv("RUN_TIMEOUT", "12")
        reloaded = reload_settings()
        assert reloaded.RUN_TIMEOUT == 12

        monkeypatch.delenv("RUN_TIMEOUT")
        reload_settings()


class TestExecutionConfig:
    def test_from_settings(self):
        config = ExecutionConfig.from_settings(
            Settings(RETRY_BASE_DELAY=0.5, MAX_ACQUIRE_RETRIES=7, SHARED_DIR="/mnt/shared")
        )

        assert config.RETRY_BASE_DELAY == 0.5
        assert config.MAX_ACQUIRE_RETRIES == 7
        assert config.SHARED_DIR == "/mnt/shared"

    def test_is_immutable(self):
        config = ExecutionConfig()
        with pytest.raises(AttributeError):
            config.POLL_INTERVAL = 1.0
