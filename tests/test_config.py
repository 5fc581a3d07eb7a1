import pytest

from linkup.config import DEFAULT_BASE_URL, ClientConfig, load_config
from linkup.errors import ConfigurationError


@pytest.fixture
def no_file(tmp_path):
    return tmp_path / "missing.yaml"


def test_defaults(no_file):
    config = load_config(no_file, environ={})
    assert config.api_key == ""
    assert config.base_url == DEFAULT_BASE_URL
    assert config.timeout == 30.0
    assert config.retry_policy.max_retries == 3
    assert config.retry_policy.min_delay == 0.25
    assert config.retry_policy.max_delay == 4.0


def test_base_url_trailing_slash_stripped():
    assert ClientConfig(base_url="http://localhost:8080/v1//").base_url == "http://localhost:8080/v1"


def test_yaml_file_loaded(tmp_path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        "api_key: from-file\nbase_url: http://file.test/\nmax_retries: 1\nmin_backoff: 0.5\n",
        encoding="utf-8",
    )
    config = load_config(config_file, environ={})
    assert config.api_key == "from-file"
    assert config.base_url == "http://file.test"
    assert config.retry_policy.max_retries == 1
    assert config.retry_policy.min_delay == 0.5


def test_env_overrides_file(tmp_path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("api_key: from-file\ntimeout: 10\n", encoding="utf-8")
    config = load_config(config_file, environ={
        "LINKUP_API_KEY": "from-env",
        "LINKUP_MAX_BACKOFF": "8",
    })
    assert config.api_key == "from-env"
    assert config.timeout == 10
    assert config.retry_policy.max_delay == 8.0


def test_overrides_win_and_none_is_ignored(no_file):
    config = load_config(
        no_file,
        environ={"LINKUP_USER_AGENT": "env-ua"},
        user_agent=None,
        base_url="http://override.test",
    )
    assert config.user_agent == "env-ua"
    assert config.base_url == "http://override.test"


def test_non_mapping_file_rejected(tmp_path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="mapping"):
        load_config(config_file, environ={})


def test_bad_env_value_rejected(no_file):
    with pytest.raises(ConfigurationError, match="LINKUP_MAX_RETRIES"):
        load_config(no_file, environ={"LINKUP_MAX_RETRIES": "many"})


def test_unknown_key_rejected(tmp_path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("api_kee: typo\n", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="api_kee"):
        load_config(config_file, environ={})


def test_max_backoff_below_min_rejected(no_file):
    with pytest.raises(ConfigurationError):
        load_config(no_file, environ={"LINKUP_MIN_BACKOFF": "2", "LINKUP_MAX_BACKOFF": "1"})


def test_non_positive_timeout_rejected():
    with pytest.raises(ConfigurationError):
        ClientConfig(timeout=0)
