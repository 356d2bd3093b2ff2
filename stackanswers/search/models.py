from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Protocol, Sequence, Tuple


class SessionState(str, Enum):
    IDLE = "idle"
    SEARCHING = "searching"
    READY = "ready"
    FETCHING_PAGE = "fetching_page"
    NOT_FOUND = "not_found"


class ResultStatus(str, Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    UNAVAILABLE = "unavailable"
    FAILED = "failed"
    STALE = "stale"


@dataclass(frozen=True)
class PageRecord:
    """Question, answers and code snippets extracted from one candidate page.

    ``answers`` and ``snippets`` are indexed independently: ``snippets[k]``
    does not necessarily come from the same answer as ``answers[k]``.
    """
    question: Optional[str] = None
    answers: Tuple[str, ...] = ()
    snippets: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question": self.question,
            "answers": list(self.answers),
            "snippets": list(self.snippets),
        }


@dataclass
class PageResult:
    """Outcome of a submit, navigation or peek"""
    status: ResultStatus
    url: Optional[str] = None
    index: Optional[int] = None
    record: Optional[PageRecord] = None
    from_cache: bool = False
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status == ResultStatus.OK

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "url": self.url,
            "index": self.index,
            "record": self.record.to_dict() if self.record else None,
            "from_cache": self.from_cache,
            "message": self.message,
        }


@dataclass
class FetchedPage:
    """Raw HTTP response body for one URL"""
    url: str
    content: str
    status: int
    fetch_time: float = 0.0
    headers: Dict[str, str] = field(default_factory=dict)


class ResultSink(Protocol):
    """Receives pages as they are resolved by a SearchSession"""

    def deliver(self, question: str, answers: Sequence[str], snippets: Sequence[str]) -> None:
        ...

    def unavailable(self, reason: str) -> None:
        ...
