"""Tests for the env module."""

import pytest

from memos_cloud.plugins.memos import env


class TestParseBool:
    @pytest.mark.parametrize("value", ["1", "true", "TRUE", "yes", "y", "On", " on "])
    def test_truthy_tokens(self, value):
        assert env.parse_bool(value, False) is True

    @pytest.mark.parametrize("value", ["0", "false", "False", "no", "N", "off"])
    def test_falsy_tokens(self, value):
        assert env.parse_bool(value, True) is False

    @pytest.mark.parametrize("value", [None, "", "maybe", "2"])
    def test_unknown_uses_default(self, value):
        assert env.parse_bool(value, True) is True
        assert env.parse_bool(value, False) is False

    def test_real_booleans_pass_through(self):
        assert env.parse_bool(True, False) is True
        assert env.parse_bool(False, True) is False


class TestLoadEnvVar:
    def test_missing_everywhere(self):
        assert env.load_env_var(env.ENV_API_KEY) is None

    def test_process_environment(self, monkeypatch):
        monkeypatch.setenv(env.ENV_API_KEY, "from-env")
        assert env.load_env_var(env.ENV_API_KEY) == "from-env"

    def test_settings_file(self, tmp_path):
        settings_file = tmp_path / ".env"
        settings_file.write_text(
            'MEMOS_API_KEY="quoted-key"\n'
            "MEMOS_USER_ID='alice'\n"
            "MEMOS_BASE_URL=https://example.test/api/\n"
        )
        env.reset_env_cache(settings_file)

        assert env.load_env_var(env.ENV_API_KEY) == "quoted-key"
        assert env.load_env_var(env.ENV_USER_ID) == "alice"
        assert env.load_env_var(env.ENV_BASE_URL) == "https://example.test/api/"
        assert env.env_file_missing() is False

    def test_environment_wins_over_file(self, tmp_path, monkeypatch):
        settings_file = tmp_path / ".env"
        settings_file.write_text("MEMOS_USER_ID=from-file\n")
        env.reset_env_cache(settings_file)
        monkeypatch.setenv(env.ENV_USER_ID, "from-env")

        assert env.load_env_var(env.ENV_USER_ID) == "from-env"

    def test_empty_values_are_absent(self, tmp_path, monkeypatch):
        settings_file = tmp_path / ".env"
        settings_file.write_text("MEMOS_APP_ID=\n")
        env.reset_env_cache(settings_file)
        monkeypatch.setenv(env.ENV_AGENT_ID, "")

        assert env.load_env_var(env.ENV_APP_ID) is None
        assert env.load_env_var(env.ENV_AGENT_ID) is None

    def test_file_read_once(self, tmp_path):
        settings_file = tmp_path / ".env"
        settings_file.write_text("MEMOS_USER_ID=first\n")
        env.reset_env_cache(settings_file)
        assert env.load_env_var(env.ENV_USER_ID) == "first"

        settings_file.write_text("MEMOS_USER_ID=second\n")
        assert env.load_env_var(env.ENV_USER_ID) == "first"

    def test_missing_file_flag(self):
        assert env.env_file_missing() is True
        assert env.load_env_var(env.ENV_USER_ID) is None

    def test_env_file_path_follows_reset(self, tmp_path):
        target = tmp_path / "custom.env"
        env.reset_env_cache(target)
        assert env.env_file_path() == target

        env.reset_env_cache()
        assert env.env_file_path() == env.default_env_file_path()
