import asyncio
from typing import Dict, List, Optional, Sequence

import httpx
import pytest

from stackanswers.config.settings import FetchConfig, SearchEngineConfig
from stackanswers.search.fetcher import PageFetcher

SEARCH_HOST = "www.google.com"
SITE_PREFIX = "site:stackoverflow.com "


def search_page(urls: Sequence[str]) -> str:
    """Search results markup in the redirect-link style"""
    results = "\n".join(
        f'<div class="g"><h3 class="r"><a href="/url?q={url}&amp;sa=U&amp;ved=0ahUKE{i}">Result {i}</a></h3>'
        f'<div class="s"><span class="st">snippet {i}</span></div></div>'
        for i, url in enumerate(urls)
    )
    return f"<html><body><div id=\"search\">{results}</div></body></html>"


def answer_block(answer_id: int, body: str) -> str:
    return (
        f'<div id="answer-{answer_id}" class="answer" data-answerid="{answer_id}">'
        f'<table><tr><td class="votecell">1</td><td class="answercell">'
        f'<div class="post-text" itemprop="text">{body}</div>'
        f'</td></tr></table></div>'
    )


def qa_page(question: str, answers: Sequence[str]) -> str:
    """Q&A page markup in the classic postcell/answercell layout"""
    blocks = "\n".join(answer_block(100 + i, body) for i, body in enumerate(answers))
    return (
        '<html><body><div id="question-header"><h1>Title</h1></div>'
        '<div id="question" class="question"><table><tr>'
        '<td class="votecell">3</td><td class="postcell">'
        f'<div class="post-text" itemprop="text">{question}</div>'
        '</td></tr></table></div>'
        f'<div id="answers">{blocks}</div></body></html>'
    )


def default_page(url: str) -> str:
    return qa_page(f"<p>Question at {url}</p>", [f"<p>Answer for {url}</p><pre><code>echo {url}</code></pre>"])


class FakeWeb:
    """Canned responses for the search engine and the candidate pages"""

    def __init__(self):
        self.searches: Dict[str, str] = {}
        self.pages: Dict[str, str] = {}
        self.failing: set = set()
        self.gates: Dict[str, asyncio.Event] = {}
        self.calls: List[str] = []
        self.transport = httpx.MockTransport(self.handler)

    def add_search(self, query: str, urls: Sequence[str]):
        self.searches[query] = search_page(urls)

    def page_calls(self, url: str) -> int:
        return self.calls.count(url)

    async def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.calls.append(url)

        gate = self.gates.get(url)
        if gate is None and request.url.host == SEARCH_HOST:
            gate = self.gates.get(self._query(request))
        if gate is not None:
            await gate.wait()

        if request.url.host == SEARCH_HOST:
            body = self.searches.get(self._query(request), search_page([]))
            return httpx.Response(200, text=body)

        if url in self.failing:
            return httpx.Response(503, text="unavailable")

        return httpx.Response(200, text=self.pages.get(url) or default_page(url))

    @staticmethod
    def _query(request: httpx.Request) -> str:
        q = request.url.params.get("q", "")
        return q[len(SITE_PREFIX):] if q.startswith(SITE_PREFIX) else q


class RecordingSink:
    def __init__(self):
        self.delivered: List[tuple] = []
        self.reasons: List[str] = []

    def deliver(self, question: str, answers: Sequence[str], snippets: Sequence[str]) -> None:
        self.delivered.append((question, list(answers), list(snippets)))

    def unavailable(self, reason: str) -> None:
        self.reasons.append(reason)


def make_fetcher(web: FakeWeb, retries: int = 1) -> PageFetcher:
    return PageFetcher(
        config=FetchConfig(timeout=5.0, max_retries=retries, retry_delay=0),
        engine_config=SearchEngineConfig(user_agent="pytest-agent"),
        transport=web.transport,
    )


@pytest.fixture
def web():
    return FakeWeb()


@pytest.fixture
def fetcher(web):
    return make_fetcher(web)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def candidate_urls():
    def build(count: int, prefix: str = "q") -> List[str]:
        return [f"https://stackoverflow.com/questions/{prefix}{i}/topic-{i}" for i in range(count)]
    return build
