import logging
from typing import Optional

from strudel_lint.models import GuardDecision, LintResult
from strudel_lint.services.dsl_lint import get_dsl_linter
from strudel_lint.utils.errors import CodeValidationError

logger = logging.getLogger("strudel.execution_guard")


class ExecutionGuard:
    """
    Pre-execution gate in front of the audio runtime.

    Every buffer is linted before playback starts, including code inserted by
    the AI assistant. Only error-severity findings block; warnings are passed
    through on the result for the editor to show.
    """

    @staticmethod
    def validate_code(code: str) -> LintResult:
        return get_dsl_linter().lint(code)

    @staticmethod
    def failure_reason(result: LintResult) -> Optional[str]:
        """
        "Code validation failed:" followed by one "Line N: message" per error,
        or None when the result does not block.
        """
        if result.ok:
            return None
        messages = "\n".join(f"Line {e.line}: {e.message}" for e in result.errors)
        return f"Code validation failed:\n{messages}"

    @staticmethod
    def check(code: str) -> GuardDecision:
        result = ExecutionGuard.validate_code(code)
        reason = ExecutionGuard.failure_reason(result)
        if reason is not None:
            logger.warning(f"Execution blocked: {len(result.errors)} error(s)")
            return GuardDecision(allowed=False, error=reason, result=result)
        return GuardDecision(allowed=True, result=result)

    @staticmethod
    def ensure_safe(code: str) -> LintResult:
        """Raise CodeValidationError instead of returning a blocked decision."""
        decision = ExecutionGuard.check(code)
        if not decision.allowed:
            raise CodeValidationError(decision.error, result=decision.result)
        return decision.result


def get_execution_guard() -> ExecutionGuard:
    return ExecutionGuard()
