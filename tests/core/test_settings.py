"""Tests for minutely.core.settings."""

from __future__ import annotations

from minutely.core.settings import MinutelyBaseSettings


class TestMinutelyBaseSettings:
    def test_defaults(self):
        s = MinutelyBaseSettings(_env_file=None)
        assert s.host == "0.0.0.0"
        assert s.port == 3000
        assert s.debug is False
        assert s.json_logs is None

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("MINUTELY_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("MINUTELY_JSON_LOGS", "true")
        s = MinutelyBaseSettings(_env_file=None)
        assert s.log_level == "DEBUG"
        assert s.json_logs is True

    def test_env_file(self, tmp_path):
        env = tmp_path / ".env"
        env.write_text("MINUTELY_PORT=4000\nUNRELATED=1\n")
        assert MinutelyBaseSettings(_env_file=env).port == 4000
