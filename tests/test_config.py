import pytest

from kb_ke_util.config import (DEFAULT_AUTH_URL, DEFAULT_URL, ConnectionConfig,
                               is_plain_http, parse_timeout_ms)


def test_defaults_are_safe():
    cfg = ConnectionConfig()
    assert cfg.url == DEFAULT_URL
    assert cfg.auth_url == DEFAULT_AUTH_URL
    assert cfg.read_timeout_ms is None
    assert cfg.read_timeout_s is None
    assert cfg.insecure_http_allowed is False
    assert cfg.all_ssl_certificates_trusted is False
    assert cfg.streaming_mode is False
    assert cfg.service_version is None


def test_from_env(monkeypatch):
    monkeypatch.setenv("KB_KE_UTIL_URL", "http://localhost:5000")
    monkeypatch.setenv("KB_KE_UTIL_AUTH_URL", "https://auth.local/services/auth")
    monkeypatch.setenv("KB_KE_UTIL_TIMEOUT_MS", "1500")
    monkeypatch.setenv("KB_KE_UTIL_INSECURE_HTTP", "true")
    monkeypatch.setenv("KB_KE_UTIL_TRUST_ALL_CERTS", "1")
    monkeypatch.setenv("KB_KE_UTIL_STREAMING", "no")
    monkeypatch.setenv("KB_KE_UTIL_SERVICE_VERSION", "dev")

    cfg = ConnectionConfig.from_env()
    assert cfg.url == "http://localhost:5000"
    assert cfg.auth_url == "https://auth.local/services/auth"
    assert cfg.read_timeout_ms == 1500
    assert cfg.read_timeout_s == 1.5
    assert cfg.insecure_http_allowed is True
    assert cfg.all_ssl_certificates_trusted is True
    assert cfg.streaming_mode is False
    assert cfg.service_version == "dev"


def test_from_env_rejects_bad_scheme(monkeypatch):
    monkeypatch.setenv("KB_KE_UTIL_URL", "ftp://nope")
    with pytest.raises(ValueError):
        ConnectionConfig.from_env()


def test_with_overrides_ignores_unknown_and_none():
    base = ConnectionConfig(url="https://a.example/svc", service_version="beta")
    cfg = ConnectionConfig.with_overrides(base, url="https://b.example/svc", auth_url=None, bogus=1)
    assert cfg.url == "https://b.example/svc"
    assert cfg.auth_url == base.auth_url
    assert cfg.service_version == "beta"
    assert cfg is not base


def test_snapshot_is_independent():
    cfg = ConnectionConfig(read_timeout_ms=100)
    snap = cfg.snapshot()
    cfg.read_timeout_ms = 200
    assert snap.read_timeout_ms == 100


@pytest.mark.parametrize("raw,expected", [(None, None), ("", None), (0, None), ("0", None), (250, 250), (" 7 ", 7), (1500.0, 1500)])
def test_parse_timeout_ms(raw, expected):
    assert parse_timeout_ms(raw) == expected


def test_negative_timeout_rejected():
    with pytest.raises(ValueError):
        parse_timeout_ms(-1)
    with pytest.raises(ValueError):
        ConnectionConfig(read_timeout_ms=-5)


@pytest.mark.parametrize("raw", [True, False, 1.5, "1.5", "soon"])
def test_non_integral_timeout_rejected(raw):
    with pytest.raises(ValueError):
        parse_timeout_ms(raw)


def test_is_plain_http():
    assert is_plain_http("HTTP://host/x")
    assert not is_plain_http("https://host/x")
