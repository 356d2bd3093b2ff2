import html
import logging
import re
from typing import List, Optional, Tuple

from bs4 import BeautifulSoup

from .models import PageRecord
from ..config.settings import MarkerConfig, settings

logger = logging.getLogger(__name__)

# Bare structural tags removed before text conversion; tags carrying attributes are kept
STRUCTURAL_TAGS = re.compile(r'</?(?:p|pre|code|hr)\s*/?>', re.IGNORECASE)
DIV_TAG = re.compile(r'<div\b|</div\s*>', re.IGNORECASE)
PRE_CODE = re.compile(r'<pre\b[^>]*>\s*<code\b[^>]*>(.*?)</code>', re.IGNORECASE | re.DOTALL)
INLINE_CODE = re.compile(r'<code\b[^>]*>(.*?)</code>', re.IGNORECASE | re.DOTALL)


def strip_structural_tags(fragment: str) -> str:
    """Remove opening and closing p, pre, code and hr tags"""
    return STRUCTURAL_TAGS.sub('', fragment)


def normalize_whitespace(text: str) -> str:
    text = re.sub(r'[ \t\r\f\v]+', ' ', text)
    text = '\n'.join(line.strip() for line in text.split('\n'))
    text = re.sub(r'\n{3,}', '\n\n', text)
    return text.strip()


def html_to_text(fragment: str) -> str:
    """Plain text of an HTML fragment: tags removed, entities decoded, whitespace normalized"""
    if not fragment.strip():
        return ""
    soup = BeautifulSoup(fragment, 'lxml')
    return normalize_whitespace(soup.get_text())


def decode_entities(text: str) -> str:
    return html.unescape(text)


def capture_div(document: str, start: int, limit: int) -> str:
    """
    Inner HTML of a div whose opening tag ends at ``start``.

    Nested divs are balanced. When the closing tag never shows up before
    ``limit`` the fragment runs to ``limit``.
    """
    depth = 1
    for tag in DIV_TAG.finditer(document, start, limit):
        if tag.group(0).startswith('</'):
            depth -= 1
            if depth == 0:
                return document[start:tag.start()]
        else:
            depth += 1
    return document[start:limit]


class ContentExtractor:
    """Extracts question, answers and code snippets from a Q&A page"""

    def __init__(self, markers: Optional[MarkerConfig] = None):
        markers = markers or settings.config.markers
        self.question_marker = re.compile(markers.question_marker, re.IGNORECASE)
        self.question_body_marker = re.compile(markers.question_body_marker, re.IGNORECASE)
        self.answer_marker = re.compile(markers.answer_marker, re.IGNORECASE)
        self.answer_body_marker = re.compile(markers.answer_body_marker, re.IGNORECASE)
        self.post_text_marker = re.compile(markers.post_text_marker, re.IGNORECASE)

    def extract(self, document: str, include_question: bool = False) -> PageRecord:
        """
        Build the PageRecord for one page.

        Args:
            document: Raw HTML of the page
            include_question: Whether the question text should be extracted

        Returns:
            PageRecord, with ``question`` left as None unless requested
        """
        try:
            question = self.extract_question(document) if include_question else None
            return PageRecord(
                question=question,
                answers=tuple(self.extract_answers(document)),
                snippets=tuple(self.extract_snippets(document)),
            )
        except Exception as e:
            logger.error(f"Content extraction failed: {e}", exc_info=True)
            return PageRecord(question="" if include_question else None)

    def answer_segments(self, document: str) -> List[Tuple[int, int]]:
        """(start, end) offsets of each answer container, each ending where the next begins"""
        starts = [m.start() for m in self.answer_marker.finditer(document)]
        ends = starts[1:] + [len(document)]
        return list(zip(starts, ends))

    def extract_question(self, document: str) -> str:
        question = self.question_marker.search(document)
        if not question:
            logger.debug("No question container found")
            return ""

        first_answer = self.answer_marker.search(document, question.end())
        limit = first_answer.start() if first_answer else len(document)

        fragment = self._post_text(document, self.question_body_marker, question.end(), limit)
        if fragment is None:
            logger.debug("Question container without post text")
            return ""

        return html_to_text(strip_structural_tags(fragment))

    def extract_answers(self, document: str) -> List[str]:
        answers = []
        for start, end in self.answer_segments(document):
            fragment = self._post_text(document, self.answer_body_marker, start, end)
            if fragment is None:
                logger.debug(f"Answer at offset {start} has no post text")
                continue
            answers.append(html_to_text(strip_structural_tags(fragment)))
        return answers

    def extract_snippets(self, document: str) -> List[str]:
        snippets = []
        for start, end in self.answer_segments(document):
            segment = document[start:end]
            code = PRE_CODE.search(segment) or INLINE_CODE.search(segment)
            if code:
                snippets.append(decode_entities(code.group(1)).strip('\r\n'))
        return snippets

    def _post_text(self, document: str, body_marker: re.Pattern, start: int, limit: int) -> Optional[str]:
        """Fragment of the first post-text region after ``body_marker``, within [start, limit)"""
        body = body_marker.search(document, start, limit)
        if not body:
            return None

        text = self.post_text_marker.search(document, body.end(), limit)
        if not text:
            return None

        return capture_div(document, text.end(), limit)
