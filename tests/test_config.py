"""Tests for configuration loading."""

import pytest

from recordpipe.config import (
    Config,
    ConfigValidationError,
    PipeConfig,
    RemoteConfig,
    StoreConfig,
    build_data_manager,
    build_pipeline,
    create_default_config,
    load_config,
)

SAMPLE_CONFIG = """
remote:
  base_url: "http://api.test:8080/api"
  token: "abc"
  timeout_seconds: 10
  max_retries: 1

stores:
  - name: tasks
    data_sync: true
  - name: users
    record_id: username
  - notes

pipes:
  - name: tasks
    endpoint: v1/tasks
  - name: users
    record_id: username
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("RECORDPIPE_BASE_URL", "RECORDPIPE_TOKEN", "RECORDPIPE_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)


class TestLoadConfig:
    """Tests for load_config()."""

    def test_missing_file_gives_defaults(self, config_file):
        config = load_config(config_file)

        assert config.remote == RemoteConfig()
        assert config.stores == []
        assert config.pipes == []

    def test_load_sample(self, config_file):
        config_file.write_text(SAMPLE_CONFIG)

        config = load_config(config_file)

        assert config.remote.base_url == "http://api.test:8080/api"
        assert config.remote.token == "abc"
        assert config.remote.timeout_seconds == 10
        assert config.remote.max_retries == 1
        assert [s.name for s in config.stores] == ["tasks", "users", "notes"]
        assert config.get_store("tasks").data_sync is True
        assert config.get_store("users").record_id == "username"
        assert config.get_pipe("tasks").endpoint == "v1/tasks"
        assert config.get_pipe("missing") is None

    def test_env_overrides(self, config_file, monkeypatch):
        config_file.write_text(SAMPLE_CONFIG)
        monkeypatch.setenv("RECORDPIPE_BASE_URL", "http://env.test")
        monkeypatch.setenv("RECORDPIPE_TOKEN", "env-token")
        monkeypatch.setenv("RECORDPIPE_TIMEOUT", "99")

        config = load_config(config_file)

        assert config.remote.base_url == "http://env.test"
        assert config.remote.token == "env-token"
        assert config.remote.timeout_seconds == 99

    def test_invalid_timeout_env_keeps_file_value(self, config_file, monkeypatch):
        config_file.write_text(SAMPLE_CONFIG)
        monkeypatch.setenv("RECORDPIPE_TIMEOUT", "soon")

        assert load_config(config_file).remote.timeout_seconds == 10

    def test_empty_file(self, config_file):
        config_file.write_text("")
        assert load_config(config_file) == Config()

    def test_non_mapping_document(self, config_file):
        config_file.write_text("- just\n- a list\n")

        with pytest.raises(ConfigValidationError):
            load_config(config_file)

    def test_invalid_section(self, config_file):
        config_file.write_text("stores: tasks\n")

        with pytest.raises(ConfigValidationError):
            load_config(config_file)

    def test_default_config_roundtrip(self, config_file):
        create_default_config(config_file)

        config = load_config(config_file)

        assert config.validate() == []
        assert config.get_store("tasks").data_sync is True
        assert config.get_pipe("tasks").endpoint == "tasks"


class TestValidate:
    """Tests for Config.validate()."""

    def test_valid(self):
        config = Config(
            remote=RemoteConfig(base_url="http://x"),
            stores=[StoreConfig(name="a")],
            pipes=[PipeConfig(name="a")],
        )
        assert config.validate() == []

    def test_pipes_need_base_url(self):
        config = Config(pipes=[PipeConfig(name="a")])
        errors = config.validate()
        assert any("base_url" in e for e in errors)

    def test_pipe_own_base_url(self):
        config = Config(pipes=[PipeConfig(name="a", base_url="http://x")])
        assert config.validate() == []

    def test_duplicate_names(self):
        config = Config(stores=[StoreConfig(name="a"), StoreConfig(name="a")])
        assert config.validate() == ["stores: duplicate name 'a'"]

    def test_bad_remote_values(self):
        config = Config(remote=RemoteConfig(timeout_seconds=0, max_retries=-1))
        errors = config.validate()
        assert "remote.timeout_seconds must be positive" in errors
        assert "remote.max_retries must be >= 0" in errors


class TestBuilders:
    """Tests for building registries from config."""

    def test_build_data_manager(self, config_file):
        config_file.write_text(SAMPLE_CONFIG)
        manager = build_data_manager(load_config(config_file))

        assert manager.names() == ["tasks", "users", "notes"]
        assert manager["tasks"].data_sync is True
        assert manager["users"].record_id == "username"

    def test_build_pipeline(self, config_file):
        config_file.write_text(SAMPLE_CONFIG)
        pipeline = build_pipeline(load_config(config_file))

        assert pipeline["tasks"].url == "http://api.test:8080/api/v1/tasks"
        assert pipeline["users"].url == "http://api.test:8080/api/users"
        assert pipeline["users"].record_id == "username"
        assert pipeline["tasks"].timeout == 10
        assert pipeline["tasks"].session.headers["Authorization"] == "Bearer abc"
