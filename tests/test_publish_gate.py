import pytest
from strudel_lint.models import PublishRequest
from strudel_lint.services.publish_gate import (
    LINT_FAILED_MESSAGE,
    MISSING_CODE_MESSAGE,
    MISSING_TITLE_MESSAGE,
    PublishGate,
    get_publish_gate,
)


@pytest.fixture
def gate():
    return PublishGate()


def test_default_title_strips_extension():
    assert PublishGate.default_title("acid loop.strudel") == "acid loop"
    assert PublishGate.default_title("notes.txt") == "notes.txt"


def test_validate_clean_code(gate):
    response = gate.validate('s("bd sd")')
    assert response.ok is True
    assert response.report == "No issues found."


def test_validate_reports_warnings_and_errors(gate):
    response = gate.validate('x.lpf(5000)\ns("bd"')
    assert response.ok is False
    assert response.report.split("\n") == [
        "[WARNING] Line 1: .lpf(5000) exceeds recommended maximum of 3000",
        '[ERROR] Line 2: Unbalanced parentheses: missing 1 closing ")"',
    ]


def test_submit_requires_code(gate):
    decision = gate.submit(PublishRequest(title="Loop", code="   \n"))
    assert decision.accepted is False
    assert decision.error == MISSING_CODE_MESSAGE


def test_submit_requires_title(gate):
    decision = gate.submit(PublishRequest(title="  ", code='s("bd")'))
    assert decision.accepted is False
    assert decision.error == MISSING_TITLE_MESSAGE


def test_submit_blocks_lint_errors(gate):
    decision = gate.submit(PublishRequest(title="Loop", code='s("square")'))
    assert decision.accepted is False
    assert decision.error == LINT_FAILED_MESSAGE
    assert decision.report.startswith("[ERROR] Line 1: ")
    assert decision.result.ok is False
    assert decision.code == ""


def test_submit_accepts_trimmed_track(gate):
    decision = gate.submit(PublishRequest(
        title="  Night Drive ",
        code='\n  note("c a f e").s("sine").room(0.3)\n',
        author_id="u-1",
    ))
    assert decision.accepted is True
    assert decision.title == "Night Drive"
    assert decision.code == 'note("c a f e").s("sine").room(0.3)'
    assert decision.author_id == "u-1"
    assert decision.report == "No issues found."


def test_submit_allows_warnings(gate):
    decision = gate.submit(PublishRequest(title="Loud", code="x.distort(0.9)"))
    assert decision.accepted is True
    assert decision.report.startswith("[WARNING]")


def test_singleton():
    assert get_publish_gate() is get_publish_gate()
