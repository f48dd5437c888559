from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Optional, Dict, Tuple
from enum import Enum


# ─── Request Envelope Models ─────────────────────────────────────────

class MCPRequest(BaseModel):
    request_id: str
    action: str
    payload: Dict[str, Any]
    context: Optional[Dict[str, Any]] = None


class MCPResponse(BaseModel):
    request_id: str
    type: str  # "success" | "error"
    data: Any
    error: Optional[Dict[str, Any]] = None


# ─── Lint Results ────────────────────────────────────────────────────

class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class Diagnostic(BaseModel):
    """One finding. `line` and `column` are 1-based."""

    model_config = ConfigDict(frozen=True)

    line: int
    column: int = 1
    message: str
    severity: Severity
    rule_id: str = ""


class LintResult(BaseModel):
    """Aggregate of one analysis run; `ok` is False iff any diagnostic is an error."""

    model_config = ConfigDict(frozen=True)

    ok: bool
    diagnostics: Tuple[Diagnostic, ...] = ()

    @classmethod
    def from_diagnostics(cls, diagnostics) -> "LintResult":
        diagnostics = tuple(diagnostics)
        ok = not any(d.severity == Severity.ERROR for d in diagnostics)
        return cls(ok=ok, diagnostics=diagnostics)

    @property
    def errors(self) -> Tuple[Diagnostic, ...]:
        return tuple(d for d in self.diagnostics if d.severity == Severity.ERROR)

    @property
    def warnings(self) -> Tuple[Diagnostic, ...]:
        return tuple(d for d in self.diagnostics if d.severity == Severity.WARNING)


# ─── Service Payloads ────────────────────────────────────────────────

class LintRequest(BaseModel):
    code: str


class LintResponse(BaseModel):
    ok: bool
    diagnostics: Tuple[Diagnostic, ...] = ()
    formatted: str = ""


class GuardDecision(BaseModel):
    allowed: bool
    error: Optional[str] = None
    result: LintResult


class PublishRequest(BaseModel):
    title: str = ""
    code: str = ""
    author_id: Optional[str] = None


class PublishDecision(BaseModel):
    accepted: bool
    title: str = ""
    code: str = ""
    author_id: Optional[str] = None
    error: Optional[str] = None
    report: str = ""
    result: Optional[LintResult] = None


class ValidateResponse(BaseModel):
    ok: bool
    report: str
