import pytest

from report_limiter.config import ConfigError, load_settings, parse_duration, parse_threshold


@pytest.mark.parametrize(
    ("raw", "seconds"),
    [
        ("30s", 30.0),
        ("1m30s", 90.0),
        ("250ms", 0.25),
        ("1.5h", 5400.0),
        ("0", 0.0),
        ("-2s", -2.0),
    ],
)
def test_parse_duration(raw, seconds):
    assert parse_duration(raw) == pytest.approx(seconds)


@pytest.mark.parametrize("raw", ["", "30", "abc", "10 s", "5d", "s"])
def test_parse_duration_rejects_garbage(raw):
    with pytest.raises(ConfigError):
        parse_duration(raw)


def test_parse_threshold():
    assert parse_threshold("3") == 3
    assert parse_threshold(" 12 ") == 12
    with pytest.raises(ConfigError):
        parse_threshold("three")
    with pytest.raises(ConfigError):
        parse_threshold("0")


def test_load_settings_from_mapping():
    loaded = load_settings(
        {
            "REPORT_THRESHOLD": "7",
            "REPORT_TTL": "2m",
            "PORT": "9000",
            "LOG_LEVEL": "debug",
            "ENABLE_PROMETHEUS_METRICS": "false",
        }
    )

    assert loaded.threshold == 7
    assert loaded.ttl_seconds == 120.0
    assert loaded.port == 9000
    assert loaded.log_level == "DEBUG"
    assert loaded.enable_prometheus_metrics is False


def test_load_settings_defaults():
    loaded = load_settings({})
    assert loaded.port == 8080
    assert loaded.threshold == 5
    assert loaded.ttl_seconds == 30.0


def test_load_settings_rejects_zero_ttl():
    with pytest.raises(ConfigError):
        load_settings({"REPORT_TTL": "0s"})


def test_explicit_threshold_and_ttl_skip_environment_values():
    loaded = load_settings({"REPORT_THRESHOLD": "many", "REPORT_TTL": "bogus"}, threshold=2, ttl_seconds=1.5)
    assert loaded.threshold == 2
    assert loaded.ttl_seconds == 1.5


def test_settings_have_no_environment_profile():
    loaded = load_settings({"ENV": "production"})
    assert not hasattr(loaded, "env")
    assert not hasattr(loaded, "is_production")
