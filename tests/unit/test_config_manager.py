"""Unit tests for config_manager module."""

import pytest

from docsync.config_manager import ConfigError, ConfigManager, DocsyncConfig


class TestDocsyncConfig:
    """Tests for DocsyncConfig dataclass."""

    def test_default_values(self):
        config = DocsyncConfig()

        assert config.default_branch == "main"
        assert config.skip_patterns == ["*.md", "docs/**"]
        assert config.generator_command == "claude"
        assert config.autodoc_frequency == 5
        assert config.guard_env_var == "CLAUDE_HOOK_INTERNAL"

    def test_from_dict_partial(self):
        config = DocsyncConfig.from_dict({"default_branch": "develop"})

        assert config.default_branch == "develop"
        assert config.index_model == "haiku"  # Default

    def test_from_dict_ignores_unknown_keys(self):
        config = DocsyncConfig.from_dict({"nonsense": 1})

        assert config == DocsyncConfig()

    def test_invalid_frequency(self):
        with pytest.raises(ConfigError, match="autodoc_frequency"):
            DocsyncConfig.from_dict({"autodoc_frequency": 0})

    @pytest.mark.parametrize(
        ("key", "value"),
        [("log_level", 10), ("log_dir", ["logs"]), ("generator_command", True)],
    )
    def test_non_string_field(self, key, value):
        with pytest.raises(ConfigError, match=f"{key} must be a string"):
            DocsyncConfig.from_dict({key: value})

    def test_non_string_skip_pattern(self):
        with pytest.raises(ConfigError, match="skip_patterns"):
            DocsyncConfig.from_dict({"skip_patterns": ["*.md", 3]})

    def test_skip_rules(self):
        rules = DocsyncConfig(skip_patterns=["*.rst"], skip_marker="[nodoc]").skip_rules

        assert rules.patterns == ["*.rst"]
        assert rules.marker == "[nodoc]"
        assert rules.env_var == "DOCSYNC_SKIP_DOCS"


class TestConfigManager:
    """Tests for ConfigManager class."""

    def test_get_config_path_custom_not_exists(self, tmp_path):
        with pytest.raises(ConfigError, match="Config file not found"):
            ConfigManager.get_config_path(str(tmp_path / "missing.toml"))

    def test_get_config_path_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DOCSYNC_CONFIG", str(tmp_path / "env.toml"))

        assert ConfigManager.get_config_path() == tmp_path / "env.toml"

    def test_load_missing_uses_defaults(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DOCSYNC_CONFIG", str(tmp_path / "none.toml"))

        assert ConfigManager.load_config() == DocsyncConfig()

    def test_load_file(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text('default_branch = "trunk"\nskip_patterns = ["*.txt"]\n')

        config = ConfigManager.load_config(str(path))

        assert config.default_branch == "trunk"
        assert config.skip_patterns == ["*.txt"]

    def test_load_invalid_toml(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text("default_branch = \n")

        with pytest.raises(ConfigError, match="Failed to load config"):
            ConfigManager.load_config(str(path))

    def test_insecure_permissions_fixed(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text('default_branch = "main"\n')
        path.chmod(0o644)

        ConfigManager.load_config(str(path))

        assert path.stat().st_mode & 0o777 == 0o600

    def test_save_and_reload(self, tmp_path):
        path = tmp_path / "config.toml"
        ConfigManager.save_config(DocsyncConfig(index_model="sonnet"), str(path))

        assert ConfigManager.load_config(str(path)).index_model == "sonnet"
        assert path.stat().st_mode & 0o777 == 0o600

    def test_save_preserves_comments(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text('# my settings\ndefault_branch = "main"\n')

        ConfigManager.update_config(str(path), default_branch="develop")

        text = path.read_text()
        assert "# my settings" in text
        assert 'default_branch = "develop"' in text

    def test_update_unknown_key(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text("")

        with pytest.raises(ConfigError, match="Unknown config key"):
            ConfigManager.update_config(str(path), colour="blue")


class TestEnvOverrides:
    def test_frequency_and_generator(self):
        config = ConfigManager.apply_env_overrides(
            DocsyncConfig(),
            {"DOCSYNC_AUTODOC_FREQUENCY": "10", "DOCSYNC_GENERATOR": "/opt/claude"},
        )

        assert config.autodoc_frequency == 10
        assert config.generator_command == "/opt/claude"

    @pytest.mark.parametrize("value", ["0", "-3", "often"])
    def test_invalid_frequency_ignored(self, value):
        config = ConfigManager.apply_env_overrides(
            DocsyncConfig(), {"DOCSYNC_AUTODOC_FREQUENCY": value}
        )

        assert config.autodoc_frequency == 5
