"""Tests for config and data directory resolution."""

from pathlib import Path

from rolodex.utils.paths import (
    CONFIG_DIR_ENV_VAR,
    DATA_DIR_ENV_VAR,
    DEFAULT_CONFIG_DIR,
    resolve_config_dir,
    resolve_data_dir,
)


def test_config_dir_default_lives_in_home():
    assert DEFAULT_CONFIG_DIR == Path.home() / ".rolodex"


class TestResolveConfigDir:
    """Precedence: argument, environment, default."""

    def test_argument_as_string(self, tmp_path):
        """A string argument is turned into a resolved Path."""
        assert resolve_config_dir(str(tmp_path)) == tmp_path.resolve()

    def test_argument_tilde_is_expanded(self):
        """A leading ~ points at the home directory."""
        expected = (Path.home() / "rolodex-conf").resolve()
        assert resolve_config_dir("~/rolodex-conf") == expected

    def test_environment_used_without_argument(self, tmp_path, monkeypatch):
        """ROLODEX_CONFIG_DIR applies when nothing is passed."""
        monkeypatch.setenv(CONFIG_DIR_ENV_VAR, str(tmp_path))
        assert resolve_config_dir() == tmp_path.resolve()

    def test_argument_beats_environment(self, tmp_path, monkeypatch):
        """An explicit directory wins over ROLODEX_CONFIG_DIR."""
        monkeypatch.setenv(CONFIG_DIR_ENV_VAR, "/somewhere/else")
        assert resolve_config_dir(tmp_path) == tmp_path.resolve()

    def test_empty_environment_falls_back(self, monkeypatch):
        """An empty ROLODEX_CONFIG_DIR is treated as unset."""
        monkeypatch.setenv(CONFIG_DIR_ENV_VAR, "")
        assert resolve_config_dir() == DEFAULT_CONFIG_DIR.resolve()

    def test_default(self, monkeypatch):
        """~/.rolodex when nothing else is set."""
        monkeypatch.delenv(CONFIG_DIR_ENV_VAR, raising=False)
        assert resolve_config_dir() == DEFAULT_CONFIG_DIR.resolve()


class TestResolveDataDir:
    """Precedence: argument, environment, current directory."""

    def test_argument(self, tmp_path):
        assert resolve_data_dir(tmp_path) == tmp_path.resolve()

    def test_environment(self, tmp_path, monkeypatch):
        """ROLODEX_DATA_DIR applies when nothing is passed."""
        monkeypatch.setenv(DATA_DIR_ENV_VAR, str(tmp_path))
        assert resolve_data_dir() == tmp_path.resolve()

    def test_current_directory(self, tmp_path, monkeypatch):
        """The working directory is the fallback."""
        monkeypatch.delenv(DATA_DIR_ENV_VAR, raising=False)
        monkeypatch.chdir(tmp_path)
        assert resolve_data_dir() == tmp_path.resolve()
