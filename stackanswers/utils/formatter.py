import logging
from typing import Optional

from ..search.models import PageRecord, PageResult

logger = logging.getLogger(__name__)

ANSWER_SEPARATOR = "\n\n-----\n\n"

class ResultFormatter:
    """Flattens a PageRecord into plain text, keeping only the answers the caller asked for"""

    def __init__(self, answer_count: int = 1):
        self.answer_count = answer_count

    def format_record(self, record: PageRecord, answer_count: Optional[int] = None) -> str:
        if answer_count is None:
            answer_count = self.answer_count

        sections = []
        if record.question:
            sections.append(f"Question:\n{record.question}")

        answers = record.answers[:max(answer_count, 0)]
        if answers:
            sections.append(ANSWER_SEPARATOR.join(answers))

        if record.snippets:
            sections.append("Code:\n" + "\n\n".join(record.snippets))

        return ANSWER_SEPARATOR.join(sections)

    def format_result(self, result: PageResult, answer_count: Optional[int] = None) -> str:
        """Text for a PageResult, or its message when no record is attached"""
        if result.record is None:
            return result.message
        return self.format_record(result.record, answer_count)
