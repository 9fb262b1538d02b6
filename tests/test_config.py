"""Tests for client configuration resolution."""

import pytest

from safecomms import DEFAULT_BASE_URL, ClientConfig, ConfigurationError, SafeCommsClient, resolve_config
from safecomms.config import load_config_file


def test_defaults_with_explicit_key():
    config = resolve_config(api_key="sk-1")
    assert config.api_key == "sk-1"
    assert config.base_url == DEFAULT_BASE_URL
    assert config.timeout == 30.0


def test_missing_key_raises():
    with pytest.raises(ConfigurationError, match="SAFECOMMS_API_KEY"):
        resolve_config()


def test_client_without_key_raises():
    with pytest.raises(ConfigurationError):
        SafeCommsClient()


@pytest.mark.parametrize("key", ["", "   "])
def test_blank_key_raises(key):
    with pytest.raises(ConfigurationError):
        ClientConfig(api_key=key)


def test_trailing_slash_stripped():
    config = ClientConfig(api_key="sk-1", base_url="https://example.test/api/")
    assert config.base_url == "https://example.test/api"


def test_bad_scheme_raises():
    with pytest.raises(ConfigurationError, match="http"):
        ClientConfig(api_key="sk-1", base_url="ftp://example.test")


def test_non_positive_timeout_raises():
    with pytest.raises(ConfigurationError):
        ClientConfig(api_key="sk-1", timeout=0)


def test_environment_fallback(monkeypatch):
    monkeypatch.setenv("SAFECOMMS_API_KEY", "sk-env")
    monkeypatch.setenv("SAFECOMMS_BASE_URL", "http://localhost:8080")
    monkeypatch.setenv("SAFECOMMS_TIMEOUT", "5")

    config = resolve_config()

    assert config.api_key == "sk-env"
    assert config.base_url == "http://localhost:8080"
    assert config.timeout == 5.0


def test_arguments_beat_environment(monkeypatch):
    monkeypatch.setenv("SAFECOMMS_API_KEY", "sk-env")
    monkeypatch.setenv("SAFECOMMS_BASE_URL", "http://localhost:8080")

    config = resolve_config(api_key="sk-arg", base_url="https://override.test", timeout=2)

    assert config.api_key == "sk-arg"
    assert config.base_url == "https://override.test"
    assert config.timeout == 2.0


def test_invalid_timeout_env(monkeypatch):
    monkeypatch.setenv("SAFECOMMS_TIMEOUT", "soon")
    with pytest.raises(ConfigurationError, match="SAFECOMMS_TIMEOUT"):
        resolve_config(api_key="sk-1")


def test_config_file_is_lowest_priority(monkeypatch, tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("api_key: sk-file\nbase_url: https://file.test\ntimeout: 12\nunused: 1\n")
    monkeypatch.setenv("SAFECOMMS_CONFIG", str(path))
    monkeypatch.setenv("SAFECOMMS_BASE_URL", "https://env.test")

    config = resolve_config()

    assert config.api_key == "sk-file"
    assert config.base_url == "https://env.test"
    assert config.timeout == 12.0


def test_load_config_file_ignores_unknown_keys(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("api_key: sk-file\ncolor: blue\n")
    assert load_config_file(path) == {"api_key": "sk-file"}


def test_missing_and_empty_config_files(tmp_path):
    assert load_config_file(tmp_path / "absent.yaml") == {}
    empty = tmp_path / "empty.yaml"
    empty.write_text("")
    assert load_config_file(empty) == {}


def test_malformed_config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("api_key: [unterminated\n")
    with pytest.raises(ConfigurationError, match="Failed to read config file"):
        load_config_file(path)


def test_config_file_must_be_mapping(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n")
    with pytest.raises(ConfigurationError, match="mapping"):
        load_config_file(path)


def test_config_is_frozen():
    config = ClientConfig(api_key="sk-1")
    with pytest.raises(AttributeError):
        config.api_key = "sk-2"  # type: ignore[misc]


def test_repr_omits_key():
    assert "sk-secret" not in repr(ClientConfig(api_key="sk-secret"))


def test_explicit_empty_key_does_not_fall_back_to_environment(monkeypatch):
    monkeypatch.setenv("SAFECOMMS_API_KEY", "sk-from-env")
    with pytest.raises(ConfigurationError):
        SafeCommsClient(api_key="")


def test_explicit_empty_base_url_does_not_fall_back_to_environment(monkeypatch):
    monkeypatch.setenv("SAFECOMMS_BASE_URL", "https://env.test")
    with pytest.raises(ConfigurationError):
        resolve_config(api_key="sk-1", base_url="")


def test_explicit_settings_skip_config_file(monkeypatch, tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("api_key: [oops\n")
    monkeypatch.setenv("SAFECOMMS_CONFIG", str(path))

    client = SafeCommsClient(api_key="sk-explicit", base_url="https://x.test")
    client.close()

    assert client.config.base_url == "https://x.test"
    with pytest.raises(ConfigurationError, match="Failed to read config file"):
        resolve_config()
