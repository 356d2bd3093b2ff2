#!/usr/bin/env python3
"""
stackanswers HTTP server
Search a Q&A site for a coding question and page through its answers.
"""

import logging
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, Any, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field
from contextlib import asynccontextmanager
import uvicorn

from . import __version__
from .search.fetcher import PageFetcher
from .search.models import PageResult, ResultStatus
from .search.session import SearchSession
from .utils.formatter import ResultFormatter
from .config.settings import settings

logger = logging.getLogger(__name__)

# Request/Response models
class SessionRequest(BaseModel):
    include_question: Optional[bool] = Field(None, description="Extract the question text")
    answer_count: Optional[int] = Field(None, ge=1, le=50, description="Answers to include in the text output")

class SessionResponse(BaseModel):
    session_id: str
    include_question: bool
    answer_count: int

class SearchRequest(BaseModel):
    q: str = Field(..., description="Search query")

class PageResponse(BaseModel):
    session_id: str
    query: Optional[str]
    state: str
    status: str
    url: Optional[str] = None
    index: Optional[int] = None
    candidates: int = 0
    from_cache: bool = False
    message: str = ""
    record: Optional[Dict[str, Any]] = None
    text: str = ""

class AnswerSearchService:
    """Owns the HTTP fetcher and one SearchSession per client session id"""

    def __init__(self, fetcher: Optional[PageFetcher] = None, max_sessions: Optional[int] = None):
        self.fetcher = fetcher or PageFetcher()
        self.max_sessions = max_sessions or settings.config.server.max_sessions
        # Ordered from least to most recently used
        self.sessions: Dict[str, SearchSession] = {}
        logger.info("Answer search service initialized")

    def create_session(self, include_question: Optional[bool] = None, answer_count: Optional[int] = None) -> str:
        config = settings.config.session
        if include_question is not None:
            config = replace(config, include_question=include_question)
        if answer_count is not None:
            config = replace(config, answer_count=answer_count)

        while len(self.sessions) >= self.max_sessions:
            oldest = next(iter(self.sessions))
            self.delete_session(oldest)
            logger.info(f"Session limit reached, evicted: {oldest}")

        session_id = uuid.uuid4().hex
        self.sessions[session_id] = SearchSession(self.fetcher, config=config)
        logger.debug(f"Session created: {session_id}")
        return session_id

    def get_session(self, session_id: str) -> SearchSession:
        session = self.sessions.pop(session_id, None)
        if session is None:
            raise KeyError(session_id)
        self.sessions[session_id] = session
        return session

    def delete_session(self, session_id: str) -> bool:
        return self.sessions.pop(session_id, None) is not None

    def describe(self, session_id: str, session: SearchSession, result: PageResult) -> Dict[str, Any]:
        return {
            "session_id": session_id,
            "query": session.query,
            "state": session.state.value,
            "candidates": len(session.candidates),
            "text": ResultFormatter(session.config.answer_count).format_result(result),
            **result.to_dict(),
        }

    async def cleanup(self):
        logger.info("Cleaning up resources...")
        self.sessions.clear()
        await self.fetcher.close()


def create_app(service: Optional[AnswerSearchService] = None) -> FastAPI:
    """Build the FastAPI app around a service (a fresh one by default)"""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.service = service or AnswerSearchService()
        logger.info("HTTP API Server started")

        yield

        await app.state.service.cleanup()
        logger.info("HTTP API Server stopped")

    app = FastAPI(
        title="stackanswers",
        description="Answers and code snippets from Q&A pages for a coding query",
        version=__version__,
        lifespan=lifespan
    )

    def lookup(session_id: str) -> SearchSession:
        try:
            return app.state.service.get_session(session_id)
        except KeyError:
            raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")

    @app.get("/")
    async def root():
        """Health check endpoint"""
        return {"status": "ok", "service": "stackanswers", "version": __version__}

    @app.get("/health")
    async def health():
        """Health check with more details"""
        return {
            "status": "healthy",
            "service": "stackanswers",
            "version": __version__,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "sessions": len(app.state.service.sessions)
        }

    @app.post("/sessions", response_model=SessionResponse)
    async def create_session(request: Optional[SessionRequest] = None):
        request = request or SessionRequest()
        service = app.state.service
        session_id = service.create_session(request.include_question, request.answer_count)
        config = service.sessions[session_id].config
        return SessionResponse(
            session_id=session_id,
            include_question=config.include_question,
            answer_count=config.answer_count,
        )

    @app.post("/sessions/{session_id}/search", response_model=PageResponse)
    async def search(session_id: str, request: SearchRequest):
        session = lookup(session_id)
        result = await session.submit(request.q)
        return app.state.service.describe(session_id, session, result)

    @app.post("/sessions/{session_id}/next", response_model=PageResponse)
    async def next_page(session_id: str):
        session = lookup(session_id)
        result = await session.advance()
        return app.state.service.describe(session_id, session, result)

    @app.post("/sessions/{session_id}/previous", response_model=PageResponse)
    async def previous_page(session_id: str):
        session = lookup(session_id)
        result = await session.retreat()
        return app.state.service.describe(session_id, session, result)

    @app.get("/sessions/{session_id}/current", response_model=PageResponse)
    async def current_page(session_id: str):
        session = lookup(session_id)
        result = session.peek()
        if result.status == ResultStatus.UNAVAILABLE:
            raise HTTPException(status_code=404, detail=result.message)
        return app.state.service.describe(session_id, session, result)

    @app.delete("/sessions/{session_id}")
    async def delete_session(session_id: str):
        if not app.state.service.delete_session(session_id):
            raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
        return {"deleted": session_id}

    return app


app = create_app()

def run_http_server():
    """Run the HTTP server"""
    settings.setup_logging()
    if not settings.validate_config():
        raise SystemExit(1)

    uvicorn.run(
        "stackanswers.server:app",
        host=settings.config.server.host,
        port=settings.config.server.port,
        reload=False,
        log_level=settings.config.server.log_level.lower()
    )


if __name__ == "__main__":
    run_http_server()
