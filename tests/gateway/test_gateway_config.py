"""Gateway 配置加载测试"""

import pytest
from taskflow.core.config import get_api_prefix, get_db_path, get_task_title_preview_length
from taskflow.gateway.config import GatewayConfig, load_gateway_config


class TestLoadGatewayConfig:
    """环境变量 -> GatewayConfig"""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("TASKFLOW_PROFILE", raising=False)
        monkeypatch.delenv("TASKFLOW_DEFAULT_GREETING_NAME", raising=False)
        config = load_gateway_config()
        assert config == GatewayConfig()
        assert config.profile == "dev"
        assert config.default_greeting_name == "World"

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("TASKFLOW_PROFILE", "PROD")
        monkeypatch.setenv("TASKFLOW_DEFAULT_GREETING_NAME", " Team ")
        config = load_gateway_config()
        assert config.profile == "prod"
        assert config.default_greeting_name == "Team"

    def test_invalid_profile_falls_back(self, monkeypatch):
        monkeypatch.setenv("TASKFLOW_PROFILE", "staging")
        assert load_gateway_config().profile == "dev"

    def test_blank_greeting_falls_back(self, monkeypatch):
        monkeypatch.setenv("TASKFLOW_DEFAULT_GREETING_NAME", "   ")
        assert load_gateway_config().default_greeting_name == "World"


class TestCoreConfig:
    """路径与前缀"""

    def test_db_path_from_data_dir(self, monkeypatch, tmp_path):
        monkeypatch.delenv("TASKFLOW_DB_PATH", raising=False)
        monkeypatch.setenv("TASKFLOW_DATA_DIR", str(tmp_path))
        assert get_db_path() == str(tmp_path / "sqlite" / "taskflow.db")

    @pytest.mark.parametrize(
        "raw,expected",
        [("/api/v1", "/api/v1"), ("api/v2/", "/api/v2"), ("/", "")],
    )
    def test_api_prefix_normalized(self, monkeypatch, raw, expected):
        monkeypatch.setenv("TASKFLOW_API_PREFIX", raw)
        assert get_api_prefix() == expected

    def test_preview_length_default(self, monkeypatch):
        monkeypatch.delenv("TASKFLOW_TASK_TITLE_PREVIEW_LENGTH", raising=False)
        assert get_task_title_preview_length() == 60

    def test_preview_length_override(self, monkeypatch):
        monkeypatch.setenv("TASKFLOW_TASK_TITLE_PREVIEW_LENGTH", "20")
        assert get_task_title_preview_length() == 20

    @pytest.mark.parametrize("raw", ["sixty", "", "2", "-5"])
    def test_invalid_preview_length_falls_back(self, monkeypatch, raw):
        monkeypatch.setenv("TASKFLOW_TASK_TITLE_PREVIEW_LENGTH", raw)
        assert get_task_title_preview_length() == 60
