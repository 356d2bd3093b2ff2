from stackanswers.config.settings import Settings


def test_defaults(monkeypatch):
    for name in ["SEARCH_URL", "SITE_FILTER", "INCLUDE_QUESTION", "ANSWER_COUNT", "MAX_CURSOR", "MCP_PORT"]:
        monkeypatch.delenv(name, raising=False)
    config = Settings().config
    assert config.search_engine.site_filter == "site:stackoverflow.com"
    assert config.session.include_question is False
    assert config.session.answer_count == 1
    assert config.session.max_cursor == 10


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("SITE_FILTER", "site:superuser.com")
    monkeypatch.setenv("INCLUDE_QUESTION", "yes")
    monkeypatch.setenv("ANSWER_COUNT", "3")
    monkeypatch.setenv("MAX_CURSOR", "4")
    monkeypatch.setenv("FETCH_TIMEOUT", "2.5")
    config = Settings().config
    assert config.search_engine.site_filter == "site:superuser.com"
    assert config.session.include_question is True
    assert config.session.answer_count == 3
    assert config.session.max_cursor == 4
    assert config.fetch.timeout == 2.5


def test_invalid_numbers_keep_defaults(monkeypatch, caplog):
    monkeypatch.setenv("ANSWER_COUNT", "many")
    monkeypatch.setenv("MCP_PORT", "http")
    config = Settings().config
    assert config.session.answer_count == 1
    assert config.server.port == 8001
    assert "Invalid ANSWER_COUNT" in caplog.text


def test_validate_config(monkeypatch):
    monkeypatch.delenv("MCP_PORT", raising=False)
    current = Settings()
    assert current.validate_config()
    current.config.session.answer_count = 0
    current.config.search_engine.search_url = "ftp://nope"
    assert not current.validate_config()


def test_max_sessions(monkeypatch):
    monkeypatch.setenv("MAX_SESSIONS", "5")
    current = Settings()
    assert current.config.server.max_sessions == 5
    current.config.server.max_sessions = 0
    assert not current.validate_config()
