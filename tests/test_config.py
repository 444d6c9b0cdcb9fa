"""Tests for gridthrottle.config - environment variable loading and validation."""

import os
from datetime import timedelta

import pytest

from gridthrottle.config import (
    DEFAULT_CPUFREQ_ROOT,
    DEFAULT_TIMEZONE,
    DEFAULT_WSDL_URL,
    MAX_LOOKBACK,
    load_config,
    parse_lookback,
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Ensure gridthrottle env vars are cleared between tests."""
    for var in [
        "HOURS",
        "WSDL",
        "MARKET_TIMEZONE",
        "CPUFREQ_ROOT",
        "CPU_COUNT",
        "REQUEST_TIMEOUT_SECONDS",
        "LOG_LEVEL",
    ]:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def env_path(tmp_path):
    # Non-existent file so load_dotenv doesn't pick up a real .env
    return str(tmp_path / "nonexistent.env")


class TestParseLookback:
    def test_unset_defaults_to_three_hours(self):
        assert parse_lookback(None) == timedelta(hours=-3)
        assert parse_lookback("") == timedelta(hours=-3)
        assert parse_lookback("   ") == timedelta(hours=-3)

    def test_bare_integer_is_hours(self):
        assert parse_lookback("-2") == timedelta(hours=-2)

    def test_duration_string(self):
        assert parse_lookback("-3h") == timedelta(hours=-3)
        assert parse_lookback("-1h30m") == timedelta(minutes=-90)
        assert parse_lookback("-45m") == timedelta(minutes=-45)

    def test_positive_value_is_negated(self):
        assert parse_lookback("4") == timedelta(hours=-4)
        assert parse_lookback("+2h") == timedelta(hours=-2)

    def test_zero_is_kept(self):
        assert parse_lookback("0") == timedelta(0)

    @pytest.mark.parametrize(
        "raw", ["-99999999999999", "-99999999999999h", "-90000000", "9999999999999999999999s"],
    )
    def test_out_of_range_falls_back(self, raw):
        assert parse_lookback(raw) == timedelta(hours=-3)

    def test_longest_accepted_lookback(self):
        assert parse_lookback(f"-{MAX_LOOKBACK.days * 24}h") == -MAX_LOOKBACK
        assert parse_lookback(f"-{MAX_LOOKBACK.days * 24 + 1}") == timedelta(hours=-3)

    @pytest.mark.parametrize("raw", ["abc", "-3x", "h", "-", "3h-2m", "1.5.2h"])
    def test_unparsable_falls_back(self, raw):
        assert parse_lookback(raw) == timedelta(hours=-3)


class TestLoadConfig:
    def test_defaults(self, env_path):
        cfg = load_config(env_path)
        assert cfg.lookback == timedelta(hours=-3)
        assert cfg.wsdl_url == DEFAULT_WSDL_URL
        assert cfg.timezone == DEFAULT_TIMEZONE
        assert cfg.cpufreq_root == DEFAULT_CPUFREQ_ROOT
        assert cfg.cpu_count == (os.cpu_count() or 1)
        assert cfg.request_timeout == 30.0
        assert cfg.log_level == "INFO"

    def test_overrides(self, monkeypatch, env_path):
        monkeypatch.setenv("HOURS", "-5h")
        monkeypatch.setenv("WSDL", "http://localhost:9999/svc")
        monkeypatch.setenv("MARKET_TIMEZONE", "Europe/Prague")
        monkeypatch.setenv("CPUFREQ_ROOT", "/tmp/cpu")
        monkeypatch.setenv("CPU_COUNT", "8")
        monkeypatch.setenv("REQUEST_TIMEOUT_SECONDS", "2.5")
        cfg = load_config(env_path)
        assert cfg.lookback == timedelta(hours=-5)
        assert cfg.wsdl_url == "http://localhost:9999/svc"
        assert cfg.timezone == "Europe/Prague"
        assert cfg.cpufreq_root == "/tmp/cpu"
        assert cfg.cpu_count == 8
        assert cfg.request_timeout == 2.5

    def test_unparsable_hours_does_not_raise(self, monkeypatch, env_path):
        monkeypatch.setenv("HOURS", "yesterday")
        cfg = load_config(env_path)
        assert cfg.lookback == timedelta(hours=-3)

    def test_bad_cpu_count(self, monkeypatch, env_path):
        monkeypatch.setenv("CPU_COUNT", "many")
        with pytest.raises(ValueError, match="CPU_COUNT"):
            load_config(env_path)

    def test_log_level_normalised(self, monkeypatch, env_path):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert load_config(env_path).log_level == "DEBUG"

    def test_bad_log_level(self, monkeypatch, env_path):
        monkeypatch.setenv("LOG_LEVEL", "verbose")
        with pytest.raises(ValueError, match="LOG_LEVEL"):
            load_config(env_path)

    def test_bad_timeout(self, monkeypatch, env_path):
        monkeypatch.setenv("REQUEST_TIMEOUT_SECONDS", "-1")
        with pytest.raises(ValueError, match="REQUEST_TIMEOUT_SECONDS"):
            load_config(env_path)

    def test_reads_env_file(self, monkeypatch, tmp_path):
        # load_dotenv writes straight into os.environ; keep it out of other tests
        monkeypatch.setattr(os, "environ", dict(os.environ))
        env_file = tmp_path / ".env"
        env_file.write_text("HOURS=-6h\nWSDL=http://example.test/svc\n")
        cfg = load_config(str(env_file))
        assert cfg.lookback == timedelta(hours=-6)
        assert cfg.wsdl_url == "http://example.test/svc"
