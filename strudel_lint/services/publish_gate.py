"""
Publish Gate: lint check in front of the shared track catalog.

Handles: manual "validate" action, submit pre-checks (code, title, lint)
Does NOT handle: persisting the track, auth, likes (catalog backend)
"""

import logging

from strudel_lint.models import PublishDecision, PublishRequest, ValidateResponse
from strudel_lint.services.dsl_lint import get_dsl_linter

logger = logging.getLogger("strudel.publish_gate")

TRACK_FILE_SUFFIX = ".strudel"

MISSING_CODE_MESSAGE = "Please select a file to upload"
MISSING_TITLE_MESSAGE = "Please enter a title"
LINT_FAILED_MESSAGE = "Please fix the lint errors before uploading"


class PublishGate:
    """Blocks submission of any track whose code does not lint clean of errors."""

    def __init__(self) -> None:
        self.linter = get_dsl_linter()

    @staticmethod
    def default_title(filename: str) -> str:
        """Pre-fill a title from the chosen file: 'acid.strudel' → 'acid'."""
        if filename.endswith(TRACK_FILE_SUFFIX):
            return filename[: -len(TRACK_FILE_SUFFIX)]
        return filename

    def validate(self, code: str) -> ValidateResponse:
        """Manual validate action; the report reads 'No issues found.' when nothing is reported."""
        result = self.linter.lint(code)
        return ValidateResponse(ok=result.ok, report=self.linter.format_diagnostics(result))

    def submit(self, req: PublishRequest) -> PublishDecision:
        """
        Pre-submit checks, in the order the author sees them:

        1. A code buffer must be present
        2. Title must be non-blank
        3. Code must pass lint (warnings are allowed)

        On success the trimmed title and code are returned for the catalog.
        """
        if not req.code.strip():
            return PublishDecision(accepted=False, error=MISSING_CODE_MESSAGE)

        if not req.title.strip():
            return PublishDecision(accepted=False, error=MISSING_TITLE_MESSAGE)

        result = self.linter.lint(req.code)
        report = self.linter.format_diagnostics(result)
        if not result.ok:
            logger.info(f"Publish blocked for '{req.title.strip()}': {len(result.errors)} lint error(s)")
            return PublishDecision(
                accepted=False,
                error=LINT_FAILED_MESSAGE,
                report=report,
                result=result,
            )

        logger.info(f"Publish accepted: '{req.title.strip()}'")
        return PublishDecision(
            accepted=True,
            title=req.title.strip(),
            code=req.code.strip(),
            author_id=req.author_id,
            report=report,
            result=result,
        )


# Singleton
_publish_gate: PublishGate | None = None


def get_publish_gate() -> PublishGate:
    """Get the singleton PublishGate instance."""
    global _publish_gate
    if _publish_gate is None:
        _publish_gate = PublishGate()
    return _publish_gate
