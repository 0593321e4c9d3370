import pytest
import yaml

from gojobs.config.loader import ConfigLoader
from gojobs.models.config import AppConfig, ScheduleConfig


CONFIG_YAML = """
log_level: DEBUG
timezone: Europe/Amsterdam
admin_secret: from-file
api:
  url: https://file.test/jobs
  key: file-key
  timeout: 10
cache:
  backend: file
  path: /tmp/gojobs-cache.json
  max_age_hours: 6
scheduler:
  enabled: false
  times: ["21:00", "09:30"]
server:
  port: 9000
"""


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(CONFIG_YAML, encoding="utf-8")
    return path


def test_defaults_without_file_or_environment(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config = ConfigLoader(environ={}).load()

    assert config.timezone == "Africa/Lagos"
    assert config.scheduler.times == [ScheduleConfig(13, 0)]
    assert config.cache.backend == "file"
    assert config.cache.path == ".job-cache.json"
    assert config.cache.max_age_hours == 13
    assert config.admin_secret == ""
    assert config.api.url == ""


def test_environment_only(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config = ConfigLoader(environ={
        "API_URL": "https://env.test/jobs",
        "API_KEY": '"env-key"',
        "ALLOWED_ORIGIN": "https://board.test",
        "CACHE_SECRET": "env-secret",
        "SCHEDULED_JOB_TIME": "08:00,20:00",
        "REDIS_PORT": "6380",
    }).load()

    assert config.api.url == "https://env.test/jobs"
    assert config.api.key == "env-key"
    assert config.api.origin == "https://board.test"
    assert config.admin_secret == "env-secret"
    assert config.scheduler.times == [ScheduleConfig(8, 0), ScheduleConfig(20, 0)]
    assert config.redis_port == 6380


def test_file_values(config_file):
    config = ConfigLoader(str(config_file), environ={}).load()

    assert config.log_level == "DEBUG"
    assert config.timezone == "Europe/Amsterdam"
    assert config.api.timeout == 10.0
    assert config.cache.max_age_hours == 6.0
    assert config.scheduler.enabled is False
    assert config.scheduler.times == [ScheduleConfig(9, 30), ScheduleConfig(21, 0)]
    assert config.port == 9000


def test_environment_overrides_file(config_file):
    config = ConfigLoader(str(config_file), environ={
        "API_KEY": "env-key",
        "CACHE_SECRET": "env-secret",
        "LOG_LEVEL": "WARNING",
        "API_URL": "",
    }).load()

    assert config.api.key == "env-key"
    assert config.admin_secret == "env-secret"
    assert config.log_level == "WARNING"
    assert config.api.url == "https://file.test/jobs"


def test_invalid_scheduled_time_falls_back_to_default(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config = ConfigLoader(environ={"SCHEDULED_JOB_TIME": "later"}).load()
    assert config.scheduler.times == [ScheduleConfig(13, 0)]


def test_default_file_is_picked_up_from_working_directory(config_file, monkeypatch):
    monkeypatch.chdir(config_file.parent)
    assert ConfigLoader(environ={}).load().timezone == "Europe/Amsterdam"


def test_explicit_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        ConfigLoader(str(tmp_path / "missing.yaml"), environ={}).load()


def test_invalid_log_level(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(ValueError):
        ConfigLoader(environ={"LOG_LEVEL": "LOUD"}).load()


def test_invalid_cache_backend(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(ValueError):
        ConfigLoader(environ={"CACHE_BACKEND": "memcached"}).load()


def test_malformed_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("api: [unclosed", encoding="utf-8")
    with pytest.raises(yaml.YAMLError):
        ConfigLoader(str(path), environ={}).load()


def test_non_mapping_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ValueError):
        ConfigLoader(str(path), environ={}).load()


def test_empty_yaml_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("", encoding="utf-8")
    assert ConfigLoader(str(path), environ={}).load() == AppConfig()


def test_unquoted_run_times_in_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("scheduler:\n  times: [21:00, 9:30]\n", encoding="utf-8")

    config = ConfigLoader(str(path), environ={}).load()

    assert config.scheduler.times == [ScheduleConfig(9, 30), ScheduleConfig(21, 0)]
