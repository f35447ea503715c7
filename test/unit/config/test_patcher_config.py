"""Unit tests for configuration management functionality."""

import pytest
from pathlib import Path
import yaml

from armorsmith_patcher import ConfigurationError
from armorsmith_patcher.config.config_manager import ConfigManager


@pytest.fixture
def sample_config_data():
    """Sample configuration data for testing."""
    return {
        'log_level': 'debug',
        'patch': {
            'patch_file_name': 'ArmorPatch.esp',
            'ballistic_weave_only_for_clothes': False,
        },
        'data': {
            'overrides_directory': 'my_overrides',
            'slot_data_file': 'slots.csv',
            'guesses_file': 'reports/guesses.csv',
        },
    }


@pytest.fixture
def config_file_path(tmp_path):
    """Create a temporary config file path."""
    return tmp_path / "test_config.yaml"


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep environment overrides from leaking into tests."""
    for name in ("ARMORSMITH_PATCH_FILE", "ARMORSMITH_WEAVE_ONLY_CLOTHES",
                 "ARMORSMITH_OVERRIDES_DIR", "ARMORSMITH_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


def write_config(path, data):
    with open(path, 'w') as f:
        yaml.dump(data, f)


@pytest.mark.unit
class TestConfigManager:
    """Test cases for ConfigManager class."""

    def test_init_with_existing_file(self, mock_logger, sample_config_data, config_file_path):
        """Test ConfigManager initialization with existing config file."""
        write_config(config_file_path, sample_config_data)

        config_manager = ConfigManager(config_file_path, mock_logger)

        assert config_manager.config_path == config_file_path
        assert config_manager.config.log_level == 'DEBUG'
        assert config_manager.config.patch.patch_file_name == 'ArmorPatch.esp'
        assert config_manager.config.patch.ballistic_weave_only_for_clothes is False

    def test_init_with_nonexistent_file(self, mock_logger, tmp_path):
        """Test defaults when the config file does not exist."""
        config_manager = ConfigManager(tmp_path / "missing.yaml", mock_logger)

        assert config_manager.config.patch.patch_file_name == 'zPatch.esp'
        assert config_manager.config.patch.ballistic_weave_only_for_clothes is True
        assert config_manager.get_slot_data_path() is None
        mock_logger.warning.assert_called_once()

    def test_paths_resolved_against_config_directory(self, mock_logger, sample_config_data, config_file_path):
        """Test relative data paths are anchored at the config file."""
        write_config(config_file_path, sample_config_data)

        config_manager = ConfigManager(config_file_path, mock_logger)

        assert config_manager.get_overrides_directory() == config_file_path.parent / 'my_overrides'
        assert config_manager.get_slot_data_path() == config_file_path.parent / 'slots.csv'
        assert config_manager.get_guesses_path() == config_file_path.parent / 'reports' / 'guesses.csv'

    def test_absolute_paths_kept(self, mock_logger, config_file_path, tmp_path):
        """Test absolute data paths are used as given."""
        absolute = tmp_path / "elsewhere"
        write_config(config_file_path, {'data': {'overrides_directory': str(absolute)}})

        config_manager = ConfigManager(config_file_path, mock_logger)

        assert config_manager.get_overrides_directory() == absolute

    def test_env_overrides(self, mock_logger, sample_config_data, config_file_path, monkeypatch):
        """Test environment variables take precedence over the file."""
        write_config(config_file_path, sample_config_data)
        monkeypatch.setenv("ARMORSMITH_PATCH_FILE", "EnvPatch.esp")
        monkeypatch.setenv("ARMORSMITH_WEAVE_ONLY_CLOTHES", "yes")
        monkeypatch.setenv("ARMORSMITH_LOG_LEVEL", "warning")

        config = ConfigManager(config_file_path, mock_logger).config

        assert config.patch.patch_file_name == 'EnvPatch.esp'
        assert config.patch.ballistic_weave_only_for_clothes is True
        assert config.log_level == 'WARNING'

    def test_unknown_keys_ignored(self, mock_logger, config_file_path):
        """Test unrelated keys do not break loading."""
        write_config(config_file_path, {'patch': {'patch_file_name': 'A.esp', 'colour': 'red'}})

        config = ConfigManager(config_file_path, mock_logger).config

        assert config.patch.patch_file_name == 'A.esp'

    def test_reload(self, mock_logger, sample_config_data, config_file_path):
        """Test configuration reload picks up file changes."""
        write_config(config_file_path, sample_config_data)
        config_manager = ConfigManager(config_file_path, mock_logger)

        sample_config_data['patch']['patch_file_name'] = 'Reloaded.esp'
        write_config(config_file_path, sample_config_data)
        config_manager.reload()

        assert config_manager.config.patch.patch_file_name == 'Reloaded.esp'

    def test_packaged_default_config_loads(self, mock_logger):
        """Test the shipped default.yaml is valid."""
        default = Path(__file__).parent.parent.parent.parent / "config" / "default.yaml"

        config = ConfigManager(default, mock_logger).config

        assert config.patch.patch_file_name == 'zPatch.esp'
        assert config.data.slot_data_file is None


@pytest.mark.unit
class TestConfigValidation:
    """Test cases for configuration validation."""

    @pytest.mark.parametrize("data", [
        {'log_level': 'LOUD'},
        {'patch': {'patch_file_name': '  '}},
        {'patch': {'ballistic_weave_only_for_clothes': 'sometimes'}},
        {'data': {'guesses_file': ''}},
        {'patch': ['not', 'a', 'mapping']},
    ])
    def test_invalid_values_rejected(self, mock_logger, config_file_path, data):
        """Test invalid settings raise ConfigurationError."""
        write_config(config_file_path, data)

        with pytest.raises(ConfigurationError):
            ConfigManager(config_file_path, mock_logger)

    def test_non_mapping_file_rejected(self, mock_logger, config_file_path):
        """Test a YAML list at the top level is rejected."""
        config_file_path.write_text("- one\n- two\n", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            ConfigManager(config_file_path, mock_logger)

    def test_malformed_yaml_rejected(self, mock_logger, config_file_path):
        """Test YAML syntax errors raise ConfigurationError."""
        config_file_path.write_text("patch: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            ConfigManager(config_file_path, mock_logger)
