"""Tests for config hierarchy."""

import pytest

import imgcache.config.hierarchy as hierarchy
from imgcache.cache.manager import CacheManager
from imgcache.config.hierarchy import (
    _find_project_config,
    _load_env_vars,
    _load_yaml_config,
    load_config_hierarchy,
)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep the user's real config files and env out of these tests."""
    monkeypatch.setattr(hierarchy, "_GLOBAL_CONFIG_PATH", tmp_path / "global" / "config.yaml")
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    for env_key in hierarchy._ENV_MAP:
        monkeypatch.delenv(env_key, raising=False)
    return work


class TestLoadConfigHierarchy:
    def test_returns_defaults(self):
        config = load_config_hierarchy()
        assert config["sub_dir"] == "images"
        assert config["prefetch_workers"] is None

    def test_runtime_overrides(self):
        config = load_config_hierarchy(cache_root="/tmp/x", prefetch_workers=4)
        assert config["cache_root"] == "/tmp/x"
        assert config["prefetch_workers"] == 4

    def test_none_overrides_ignored(self):
        config = load_config_hierarchy(sub_dir=None)
        assert config["sub_dir"] == "images"

    def test_env_var_override(self, monkeypatch):
        monkeypatch.setenv("IMGCACHE_CACHE_ROOT", "/data/cache")
        config = load_config_hierarchy()
        assert config["cache_root"] == "/data/cache"

    def test_runtime_beats_env(self, monkeypatch):
        monkeypatch.setenv("IMGCACHE_SUB_DIR", "from-env")
        config = load_config_hierarchy(sub_dir="from-cli")
        assert config["sub_dir"] == "from-cli"

    def test_env_numbers_reach_manager(self, monkeypatch, tmp_path):
        monkeypatch.setenv("IMGCACHE_PREFETCH_WORKERS", "10")
        monkeypatch.setenv("IMGCACHE_TIMEOUT", "2.5")
        config = load_config_hierarchy(cache_root=str(tmp_path))
        assert config["prefetch_workers"] == "10"
        manager = CacheManager.from_config(config)
        assert manager.base_dir == tmp_path / "images"

    def test_project_config(self, isolated_config):
        (isolated_config / "imgcache.yaml").write_text("sub_dir: thumbs\ntimeout: 5\n")
        config = load_config_hierarchy()
        assert config["sub_dir"] == "thumbs"
        assert config["timeout"] == 5

    def test_project_config_found_upward(self, isolated_config, monkeypatch):
        (isolated_config / "imgcache.yaml").write_text("sub_dir: upward\n")
        nested = isolated_config / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)
        assert load_config_hierarchy()["sub_dir"] == "upward"

    def test_global_config_below_project(self, tmp_path, isolated_config):
        global_path = tmp_path / "global" / "config.yaml"
        global_path.parent.mkdir()
        global_path.write_text("sub_dir: global\nlog_level: DEBUG\n")
        (isolated_config / "imgcache.yaml").write_text("sub_dir: project\n")
        config = load_config_hierarchy()
        assert config["sub_dir"] == "project"
        assert config["log_level"] == "DEBUG"

    def test_env_beats_project(self, isolated_config, monkeypatch):
        (isolated_config / "imgcache.yaml").write_text("sub_dir: project\n")
        monkeypatch.setenv("IMGCACHE_SUB_DIR", "env")
        assert load_config_hierarchy()["sub_dir"] == "env"


class TestLoadYamlConfig:
    def test_loads_valid_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("key: value\n")
        assert _load_yaml_config(path) == {"key": "value"}

    def test_returns_none_for_missing(self, tmp_path):
        assert _load_yaml_config(tmp_path / "nonexistent.yaml") is None

    def test_returns_none_for_non_dict(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("- item1\n- item2\n")
        assert _load_yaml_config(path) is None

    def test_returns_none_for_broken_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("key: [unclosed\n")
        assert _load_yaml_config(path) is None


class TestFindProjectConfig:
    def test_none_without_file(self):
        assert _find_project_config() is None

    def test_directory_with_config_name_ignored(self, isolated_config):
        (isolated_config / "imgcache.yaml").mkdir()
        assert _find_project_config() is None


class TestLoadEnvVars:
    def test_only_set_vars_returned(self, monkeypatch):
        monkeypatch.setenv("IMGCACHE_LOG_LEVEL", "DEBUG")
        assert _load_env_vars() == {"log_level": "DEBUG"}

    def test_unrelated_vars_ignored(self, monkeypatch):
        monkeypatch.setenv("IMGCACHE_UNKNOWN", "x")
        assert _load_env_vars() == {}
