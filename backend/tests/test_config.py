"""Tests for settings parsing."""

import pytest
from pydantic import ValidationError

from filedeck.config import Settings
from filedeck.services import DEV_DEVICE_ID, create_browser
from filedeck.services.device_commands import HttpDeviceCommands, InMemoryDeviceCommands


class TestSettings:
    def test_defaults(self):
        s = Settings(_env_file=None)
        assert s.initial_path == "/sdcard/"
        assert s.max_concurrent_transfers == 0
        assert s.is_dev_mode is True

    def test_initial_path_gets_trailing_slash(self):
        assert Settings(_env_file=None, initial_path="/data/local/tmp").initial_path == "/data/local/tmp/"

    def test_cors_from_comma_string(self):
        s = Settings(_env_file=None, cors_origins="http://a, http://b")
        assert s.cors_origins == ["http://a", "http://b"]

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("FILEDECK_DEVICE_ID", "R58M12345")
        monkeypatch.setenv("FILEDECK_MAX_CONCURRENT_TRANSFERS", "2")
        s = Settings(_env_file=None)
        assert s.device_id == "R58M12345"
        assert s.max_concurrent_transfers == 2

    def test_negative_concurrency_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, max_concurrent_transfers=-1)


class TestCreateBrowser:
    def test_dev_mode_uses_in_memory_device(self):
        browser = create_browser(Settings(_env_file=None, mode="dev"))
        assert isinstance(browser._commands, InMemoryDeviceCommands)
        assert browser.device_id == DEV_DEVICE_ID

    def test_prod_mode_uses_bridge(self):
        browser = create_browser(Settings(_env_file=None, mode="prod", device_id="R58M12345"))
        assert isinstance(browser._commands, HttpDeviceCommands)
        assert browser.device_id == "R58M12345"
