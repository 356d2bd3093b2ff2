from stackanswers.search.models import PageRecord, PageResult, ResultStatus
from stackanswers.utils.formatter import ANSWER_SEPARATOR, ResultFormatter

RECORD = PageRecord(
    question="How?",
    answers=("First answer", "Second answer", "Third answer"),
    snippets=("echo 1", "echo 2"),
)


def test_default_keeps_one_answer():
    text = ResultFormatter().format_record(RECORD)
    assert "First answer" in text
    assert "Second answer" not in text
    assert text.startswith("Question:\nHow?")
    assert text.endswith("Code:\necho 1\n\necho 2")


def test_answer_count_caps_answers():
    text = ResultFormatter(answer_count=2).format_record(RECORD)
    assert "First answer" + ANSWER_SEPARATOR + "Second answer" in text
    assert "Third answer" not in text


def test_missing_question_is_omitted():
    text = ResultFormatter().format_record(PageRecord(answers=("Only",)))
    assert text == "Only"


def test_result_without_record_uses_message():
    result = PageResult(status=ResultStatus.NOT_FOUND, message="not found")
    assert ResultFormatter().format_result(result) == "not found"
