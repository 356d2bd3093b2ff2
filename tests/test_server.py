from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from stackanswers.server import AnswerSearchService, create_app

from conftest import make_fetcher, qa_page


@pytest.fixture
def client(web):
    app = create_app(AnswerSearchService(fetcher=make_fetcher(web)))
    with TestClient(app) as client:
        yield client


def new_session(client, **body):
    response = client.post("/sessions", json=body or None)
    assert response.status_code == 200
    return response.json()["session_id"]


def test_health(client):
    assert client.get("/").json()["status"] == "ok"
    health = client.get("/health").json()
    assert health["sessions"] == 0
    assert datetime.fromisoformat(health["timestamp"]).utcoffset() == timedelta(0)


def test_search_and_navigate(client, web, candidate_urls):
    urls = candidate_urls(2)
    web.add_search("format date bash", urls)
    web.pages[urls[0]] = qa_page("<p>Dates?</p>", ["<p>One</p><pre><code>date</code></pre>", "<p>Two</p>"])
    session_id = new_session(client, include_question=True, answer_count=2)

    first = client.post(f"/sessions/{session_id}/search", json={"q": "format date bash"}).json()
    assert first["status"] == "ok"
    assert first["state"] == "ready"
    assert first["candidates"] == 2
    assert first["url"] == urls[0]
    assert first["record"] == {"question": "Dates?", "answers": ["Onedate", "Two"], "snippets": ["date"]}
    assert "Two" in first["text"]

    second = client.post(f"/sessions/{session_id}/next").json()
    assert second["index"] == 1
    assert second["from_cache"] is False

    back = client.post(f"/sessions/{session_id}/previous").json()
    assert back["index"] == 0
    assert back["from_cache"] is True
    assert web.page_calls(urls[0]) == 1

    current = client.get(f"/sessions/{session_id}/current").json()
    assert current["record"] == first["record"]


def test_not_found_and_unavailable_peek(client):
    session_id = new_session(client)
    assert client.get(f"/sessions/{session_id}/current").status_code == 404

    result = client.post(f"/sessions/{session_id}/search", json={"q": "zzzz"}).json()
    assert result["status"] == "not_found"
    assert result["text"] == "not found"


def test_unknown_session(client):
    assert client.post("/sessions/nope/next").status_code == 404
    assert client.delete("/sessions/nope").status_code == 404


def test_delete_session(client):
    session_id = new_session(client)
    assert client.delete(f"/sessions/{session_id}").status_code == 200
    assert client.get(f"/sessions/{session_id}/current").status_code == 404


def test_session_defaults(client):
    response = client.post("/sessions").json()
    assert response["include_question"] is False
    assert response["answer_count"] == 1


def test_oldest_session_is_evicted_at_limit(web):
    app = create_app(AnswerSearchService(fetcher=make_fetcher(web), max_sessions=2))
    with TestClient(app) as client:
        first = new_session(client)
        second = new_session(client)
        third = new_session(client)
        assert client.get("/health").json()["sessions"] == 2
        assert client.post(f"/sessions/{first}/next").status_code == 404
        assert client.post(f"/sessions/{second}/next").status_code == 200
        assert client.post(f"/sessions/{third}/next").status_code == 200


def test_recently_used_session_survives_eviction(web):
    app = create_app(AnswerSearchService(fetcher=make_fetcher(web), max_sessions=2))
    with TestClient(app) as client:
        first = new_session(client)
        second = new_session(client)
        assert client.post(f"/sessions/{first}/next").status_code == 200
        new_session(client)
        assert client.post(f"/sessions/{first}/next").status_code == 200
        assert client.post(f"/sessions/{second}/next").status_code == 404
