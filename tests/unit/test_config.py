"""Unit tests for InterviewMateConfig."""

import os

import pytest

from interviewmate.config import InterviewMateConfig


@pytest.mark.unit
class TestInterviewMateConfig:
    """Test cases for InterviewMateConfig."""

    def test_defaults_without_file(self):
        """Test built-in defaults are used when no path is given."""
        config = InterviewMateConfig()

        assert config.get('audio.sample_rate') == 16000
        assert config.get('conversation.duplicate_policy') == 'merge'
        assert config.get('shortcuts.toggle_recording') == ' '
        assert config.get_host_url() == 'http://127.0.0.1:8765'
        assert os.path.isabs(config.get('logging.file_path'))

    def test_file_overrides_and_merges(self, config_file):
        """Test file values win and missing keys fall back to defaults."""
        path = config_file(
            "host:\n"
            "  base_url: http://localhost:9000/\n"
            "audio:\n"
            "  sample_rate: 44100\n"
        )
        config = InterviewMateConfig(path)

        assert config.get_host_url() == 'http://localhost:9000'
        assert config.get('audio.sample_rate') == 44100
        assert config.get('audio.chunk_size') == 1024
        assert config.get('session.initial_speaker') == 'interviewee'

    def test_relative_log_path_resolves_against_config_dir(self, config_file, tmp_path):
        """Test relative log paths are anchored at the config file."""
        path = config_file("logging:\n  file_path: logs/app.log\n")
        config = InterviewMateConfig(path)

        assert config.get('logging.file_path') == str(tmp_path / "logs" / "app.log")

    def test_missing_file(self, tmp_path):
        """Test a missing config file is an error."""
        with pytest.raises(FileNotFoundError):
            InterviewMateConfig(str(tmp_path / "nope.yaml"))

    def test_empty_file(self, config_file):
        """Test an empty config file is rejected."""
        with pytest.raises(ValueError, match="empty"):
            InterviewMateConfig(config_file(""))

    def test_invalid_yaml(self, config_file):
        """Test malformed YAML is rejected."""
        with pytest.raises(ValueError, match="Invalid YAML"):
            InterviewMateConfig(config_file("host: [unclosed\n"))

    def test_non_mapping(self, config_file):
        """Test a top-level list is rejected."""
        with pytest.raises(ValueError, match="mapping"):
            InterviewMateConfig(config_file("- a\n- b\n"))

    def test_get_missing_key_returns_default(self):
        config = InterviewMateConfig()

        assert config.get('audio.missing', 'fallback') == 'fallback'
        assert config.get('audio.sample_rate.deeper') is None

    def test_set_creates_nested_keys(self):
        config = InterviewMateConfig()

        config.set('logging.level', 'DEBUG')
        config.set('new.section.value', 3)

        assert config.get('logging.level') == 'DEBUG'
        assert config.get('new.section.value') == 3

    def test_missing_host_url(self):
        config = InterviewMateConfig()
        config.set('host.base_url', '')

        with pytest.raises(ValueError):
            config.get_host_url()
