"""
test_config.py - 설정 로드 테스트

우선순위: 환경변수 > default.yaml > 코드 기본값
"""

from pathlib import Path

from src.app.config import (
    ENV_BOT_TOKEN,
    ENV_CHAT_ID,
    ENV_DRAFTS_PATH,
    ENV_SHEETS_URL,
    PROJECT_ROOT,
    build_settings,
    load_config,
)


class TestLoadConfig:
    """load_config 테스트."""

    def test_default_yaml(self, default_config_path: Path):
        config = load_config(default_config_path)

        assert config["pdf"] == {"page_width": 600, "page_height": 800, "margin": 20}
        assert config["drafts"]["path"] == "data/drafts.json"
        assert config["delivery"]["telegram"]["caption_template"] == "{client}"

    def test_missing_file_is_empty(self, tmp_path: Path):
        assert load_config(tmp_path / "nope.yaml") == {}


class TestBuildSettings:
    """build_settings 테스트."""

    def test_defaults_from_yaml(self, default_config_path: Path):
        settings = build_settings(load_config(default_config_path), env={})

        assert settings.delivery.sheets_url == ""
        assert settings.delivery.telegram_api_base == "https://api.telegram.org"
        assert settings.pdf.page_width == 600
        assert settings.pdf.margin == 20
        assert settings.drafts_path == PROJECT_ROOT / "data" / "drafts.json"
        assert settings.logs_dir == PROJECT_ROOT / "logs"

    def test_env_overrides(self, default_config_path: Path, tmp_path: Path):
        env = {
            ENV_SHEETS_URL: "https://hook.example.test",
            ENV_BOT_TOKEN: "999:SECRET",
            ENV_CHAT_ID: "-42",
            ENV_DRAFTS_PATH: str(tmp_path / "drafts.json"),
        }

        settings = build_settings(load_config(default_config_path), env=env)

        assert settings.delivery.sheets_url == "https://hook.example.test"
        assert settings.delivery.bot_token == "999:SECRET"
        assert settings.delivery.chat_id == "-42"
        assert settings.drafts_path == tmp_path / "drafts.json"

    def test_bot_token_hidden_from_repr(self):
        settings = build_settings({}, env={ENV_BOT_TOKEN: "999:SECRET"})

        assert "999:SECRET" not in repr(settings.delivery)

    def test_numeric_chat_id_from_yaml(self):
        config = {"delivery": {"telegram": {"chat_id": -1001234567890}}}

        settings = build_settings(config, env={})

        assert settings.delivery.chat_id == "-1001234567890"

    def test_logs_dir_null_disables_logs(self):
        settings = build_settings({"logs": {"dir": None}}, env={})

        assert settings.logs_dir is None

    def test_api_base_trailing_slash_stripped(self):
        config = {"delivery": {"telegram": {"api_base": "https://tg.example.test/"}}}

        settings = build_settings(config, env={})

        assert settings.delivery.telegram_api_base == "https://tg.example.test"

    def test_session_idle_ttl(self, default_config_path: Path):
        assert build_settings(load_config(default_config_path), env={}).session_idle_ttl == 1800

        settings = build_settings({"sessions": {"idle_ttl_seconds": 90}}, env={})

        assert settings.session_idle_ttl == 90.0
