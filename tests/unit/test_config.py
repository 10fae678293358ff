from viewaccess.config import Settings, get_settings


def test_defaults(monkeypatch):
    for name in ("DATABASE_URL", "API_KEY", "ACTOR_ROLES_HEADER", "RATE_LIMIT",
                 "RATE_LIMIT_ENABLED", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    settings = get_settings()
    assert settings == Settings()
    assert settings.database_url == "sqlite:///./viewaccess.db"
    assert settings.api_key is None
    assert settings.rate_limit_enabled is True


def test_from_env(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql://db/access")
    monkeypatch.setenv("API_KEY", "k")
    monkeypatch.setenv("ACTOR_ROLES_HEADER", "X-Roles")
    monkeypatch.setenv("RATE_LIMIT", "5/minute")
    monkeypatch.setenv("RATE_LIMIT_ENABLED", "false")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = get_settings()
    assert settings.database_url == "postgresql://db/access"
    assert settings.api_key == "k"
    assert settings.actor_roles_header == "X-Roles"
    assert settings.rate_limit == "5/minute"
    assert settings.rate_limit_enabled is False
    assert settings.log_level == "DEBUG"


def test_empty_api_key_is_unset(monkeypatch):
    monkeypatch.setenv("API_KEY", "")
    assert get_settings().api_key is None
