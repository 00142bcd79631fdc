import json

from panelhub.utils.config import Config


def test_defaults():
    config = Config()

    assert config.get("api_port") == 5000
    assert config.get("user_cache_ttl") == 300
    assert config.get("panel_timeout") == 30
    assert config.get("mock_data_fallback") is False
    assert config.get("panel_url") is None
    assert config.get("panel_url", "fallback") == "fallback"


def test_file_then_env_precedence(tmp_path, monkeypatch):
    config_file = tmp_path / "panelhub.json"
    config_file.write_text(json.dumps({"api_port": 7000, "panel_url": "https://file.test"}))
    monkeypatch.setenv("CYBERPANEL_URL", "https://env.test")

    config = Config(str(config_file))

    assert config.get("api_port") == 7000
    assert config.get("panel_url") == "https://env.test"


def test_env_type_conversion(monkeypatch):
    monkeypatch.setenv("PANELHUB_API_PORT", "8080")
    monkeypatch.setenv("PANELHUB_MOCK_FALLBACK", "yes")
    monkeypatch.setenv("PANELHUB_USER_CACHE_TTL", "not-a-number")

    config = Config()

    assert config.get("api_port") == 8080
    assert config.get("mock_data_fallback") is True
    assert config.get("user_cache_ttl") == 300


def test_secret_key_aliases(monkeypatch):
    monkeypatch.setenv("NEXTAUTH_SECRET", "from-nextauth")
    assert Config().secret_key() == "from-nextauth"

    monkeypatch.setenv("PANELHUB_SECRET_KEY", "from-panelhub")
    assert Config().secret_key() == "from-panelhub"


def test_secret_key_generated_once():
    config = Config()

    assert config.secret_key() == config.secret_key()
    assert len(config.secret_key()) == 64


def test_env_value_rereads_environment(monkeypatch):
    config = Config()
    assert config.env_value("panel_username") is None

    monkeypatch.setenv("CYBERPANEL_USERNAME", "admin")
    assert config.env_value("panel_username") == "admin"
    assert config.get("panel_username") is None


def test_validate_reports_missing_panel_settings(tmp_path):
    config = Config()
    config.update({"database_path": str(tmp_path / "db" / "p.db"), "log_dir": str(tmp_path / "logs")})

    problems = config.validate()

    assert any("CYBERPANEL_URL" in p for p in problems)
    assert any("CYBERPANEL_TOKEN" in p for p in problems)


def test_validate_clean_when_configured(tmp_path, monkeypatch):
    monkeypatch.setenv("CYBERPANEL_URL", "https://panel.test")
    monkeypatch.setenv("CYBERPANEL_USERNAME", "admin")
    monkeypatch.setenv("CYBERPANEL_PASSWORD", "pw")
    config = Config()
    config.update({"database_path": str(tmp_path / "p.db"), "log_dir": str(tmp_path / "logs")})

    assert config.validate() == []


def test_save_and_reload(tmp_path):
    path = tmp_path / "out" / "config.json"
    config = Config()
    config.set("api_port", 6001)

    assert config.save_to_file(str(path))
    assert Config(str(path)).get("api_port") == 6001


def test_save_leaves_credentials_out(tmp_path, monkeypatch):
    monkeypatch.setenv("CYBERPANEL_PASSWORD", "panel-pass")
    monkeypatch.setenv("CYBERPANEL_TOKEN", "Basic abc")
    monkeypatch.setenv("PANELHUB_SECRET_KEY", "signing-key")
    path = tmp_path / "config.json"

    assert Config().save_to_file(str(path))

    written = json.loads(path.read_text())
    assert "api_port" in written
    for key in ("panel_password", "panel_token", "secret_key"):
        assert key not in written
    assert "panel-pass" not in path.read_text()
