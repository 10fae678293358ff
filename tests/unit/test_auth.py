from api.auth import parse_actor_roles, verify_api_key


def test_verify_api_key(monkeypatch):
    monkeypatch.setenv("API_KEY", "secret-1")
    assert verify_api_key("secret-1") is True
    assert verify_api_key("wrong") is False
    assert verify_api_key(None) is False


def test_verify_api_key_unconfigured(monkeypatch):
    monkeypatch.delenv("API_KEY", raising=False)
    assert verify_api_key("anything") is False


def test_parse_actor_roles():
    assert parse_actor_roles("editor, admin,,") == frozenset({"editor", "admin"})
    assert parse_actor_roles("") == frozenset()
    assert parse_actor_roles(None) == frozenset()
