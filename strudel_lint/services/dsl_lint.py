"""
dsl_lint.py: Deterministic Strudel pattern DSL Linter

Runs BEFORE the pattern is handed to the audio runtime.  Catches source that
would either:
  • fail or misbehave at evaluation (synth names passed to s(), unbalanced
    quotes or brackets, direct .play() calls), or
  • reach outside the DSL sandbox (imports, eval, browser globals).

Out-of-range effect parameters and mixed scales are reported as warnings and
never block.

Usage:
    from strudel_lint.services.dsl_lint import lint, format_diagnostics

    result = lint(strudel_code)
    # → LintResult(ok=bool, diagnostics=(Diagnostic(line, column, message, severity, rule_id), ...))
    print(format_diagnostics(result))
"""

from __future__ import annotations
import re
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Iterator, Tuple

from strudel_lint.models import Diagnostic, LintResult, Severity

logger = logging.getLogger("strudel.dsl_lint")

NO_ISSUES_MESSAGE = "No issues found."


# ── Rule tables ───────────────────────────────────────────────────────────────

# Oscillator / noise generators: valid as .s("saw"), never as s("saw")
FORBIDDEN_SAMPLE_SYNTHS: Tuple[str, ...] = (
    "saw", "sawtooth", "square", "sine", "triangle", "pulse", "noise",
)

# Recommended (min, max) per effect method
PARAM_RANGES = MappingProxyType({
    "distort":    (0, 0.15),
    "distortion": (0, 0.15),
    "resonance":  (0.2, 0.8),
    "room":       (0, 0.7),
    "lpf":        (200, 3000),
})

# Host-language escape hatches
DANGEROUS_PATTERNS: Tuple[re.Pattern, ...] = (
    re.compile(r"import\s+"),
    re.compile(r"require\s*\("),
    re.compile(r"eval\s*\("),
    re.compile(r"Function\s*\("),
    re.compile(r"window\."),
    re.compile(r"document\."),
    re.compile(r"fetch\s*\("),
    re.compile(r"XMLHttpRequest"),
)

_SAMPLE_CALL = re.compile(r"(?<![.\w])s\s*\(\s*[\"']([^\"']+)[\"']\s*\)")
_PLAY_CALL = re.compile(r"\.play\s*\(")
_PLAY_STATE_MARKER = "isPlaying"
_SCALE_CALL = re.compile(r"\.scale\s*\(\s*[\"']([^\"']+)[\"']\s*\)")
_LINE_COMMENT = re.compile(r"//[^\n]*")
_PARAM_CALLS = MappingProxyType({
    name: re.compile(rf"\.{name}\s*\(\s*([\d.]+)\s*\)") for name in PARAM_RANGES
})

_QUOTES = ('"', "'", "`")
_BRACKETS = (
    # (open, close, plural name)
    ("(", ")", "parentheses"),
    ("[", "]", "brackets"),
    ("{", "}", "braces"),
)


# ── Internal helpers ──────────────────────────────────────────────────────────

def _fmt_number(value: float) -> str:
    """Render 5000.0 as '5000' and 0.15 as '0.15'."""
    if isinstance(value, float) and not value.is_integer():
        return repr(value)
    return str(int(value))


def _lineno_at(code: str, offset: int) -> int:
    return code.count("\n", 0, offset) + 1


# ── Per-line rules ────────────────────────────────────────────────────────────
# Each yields (column, message) for a single non-blank, non-comment line.

def _check_synth_as_sample(line: str) -> Iterator[Tuple[int, str]]:
    """
    STR-001: s("saw") plays a sample called "saw", which does not exist.

    Only the standalone s() function is flagged; n("0").s("saw") is the
    correct synth form.
    """
    for m in _SAMPLE_CALL.finditer(line):
        arg = m.group(1)
        sample = arg.lower()
        for forbidden in FORBIDDEN_SAMPLE_SYNTHS:
            if sample == forbidden or sample.startswith(f"{forbidden}/"):
                yield m.start() + 1, (
                    f's("{arg}") is invalid. "{forbidden}" is a synth waveform, not a sample. '
                    f'Use n() or note() with .s("{forbidden}") for synths.'
                )


def _check_dangerous_patterns(line: str) -> Iterator[Tuple[int, str]]:
    """STR-002: one finding per line, first matching pattern wins."""
    for pattern in DANGEROUS_PATTERNS:
        if pattern.search(line):
            yield 1, "Potentially unsafe code detected. JavaScript imports and browser APIs are not allowed."
            return


def _check_param_ranges(line: str) -> Iterator[Tuple[int, str]]:
    """STR-003: effect values outside the recommended range."""
    for param, (low, high) in PARAM_RANGES.items():
        for m in _PARAM_CALLS[param].finditer(line):
            try:
                value = float(m.group(1))
            except ValueError:
                continue  # "1.2.3", "."
            if value < low:
                yield m.start() + 1, (
                    f".{param}({_fmt_number(value)}) is below recommended minimum of {_fmt_number(low)}"
                )
            elif value > high:
                yield m.start() + 1, (
                    f".{param}({_fmt_number(value)}) exceeds recommended maximum of {_fmt_number(high)}"
                )


def _check_direct_play(line: str) -> Iterator[Tuple[int, str]]:
    """
    STR-004: .play() is the engine's own trigger.

    A line that mentions isPlaying is skipped, even when the play call is
    unrelated to it.
    """
    m = _PLAY_CALL.search(line)
    if m and _PLAY_STATE_MARKER not in line:
        yield m.start() + 1, ".play() should not be called directly. Use the Execute button instead."


# ── Whole-text rules ──────────────────────────────────────────────────────────
# Each yields (line, column, message) for the full source.

def _check_quote_balance(code: str) -> Iterator[Tuple[int, int, str]]:
    """
    STR-005: Unterminated string literal.

    Quote kinds are mutually exclusive: a backtick inside "..." is text.
    A quote preceded by an unescaped backslash never toggles.
    """
    open_quote = ""
    open_line = open_col = 0
    lineno, col = 1, 0
    escaped = False

    for ch in code:
        col += 1
        if ch == "\n":
            lineno += 1
            col = 0
            escaped = False
            continue
        if escaped:
            escaped = False
            continue
        if ch == "\\":
            escaped = True
            continue
        if ch not in _QUOTES:
            continue
        if not open_quote:
            open_quote, open_line, open_col = ch, lineno, col
        elif ch == open_quote:
            open_quote = ""

    if open_quote:
        yield open_line, open_col, f"Unclosed quote ({open_quote}) starting on line {open_line}"


def _check_bracket_balance(code: str) -> Iterator[Tuple[int, int, str]]:
    """
    STR-006: Net depth of (), [] and {} must each be zero.

    Line comments are stripped first. Strings are not, so brackets inside
    string literals still count.
    """
    stripped = _LINE_COMMENT.sub("", code)
    opens = {o: [] for o, _, _ in _BRACKETS}   # positions of unmatched openers
    extras = {o: [] for o, _, _ in _BRACKETS}  # positions of unmatched closers
    closer_of = {c: o for o, c, _ in _BRACKETS}

    lineno, col = 1, 0
    for ch in stripped:
        col += 1
        if ch == "\n":
            lineno += 1
            col = 0
        elif ch in opens:
            opens[ch].append((lineno, col))
        elif ch in closer_of:
            stack = opens[closer_of[ch]]
            if stack:
                stack.pop()
            else:
                extras[closer_of[ch]].append((lineno, col))

    for open_ch, close_ch, name in _BRACKETS:
        net = len(opens[open_ch]) - len(extras[open_ch])
        if net > 0:
            line, column = opens[open_ch][0]
            yield line, column, f'Unbalanced {name}: missing {net} closing "{close_ch}"'
        elif net < 0:
            line, column = extras[open_ch][0]
            yield line, column, f'Unbalanced {name}: extra {-net} closing "{close_ch}"'


def _check_scale_consistency(code: str) -> Iterator[Tuple[int, int, str]]:
    """STR-007: more than one distinct .scale("...") value in the same source."""
    scales: list[str] = []
    first_conflict = None
    for m in _SCALE_CALL.finditer(code):
        if m.group(1) not in scales:
            scales.append(m.group(1))
            if len(scales) == 2:
                first_conflict = m
    if first_conflict is None:
        return
    line_start = code.rfind("\n", 0, first_conflict.start()) + 1
    yield (
        _lineno_at(code, first_conflict.start()),
        first_conflict.start() - line_start + 1,
        f"Multiple different scales detected: {', '.join(scales)}. "
        "Consider using a single scale for harmonic consistency.",
    )


# ── Rule descriptors ──────────────────────────────────────────────────────────

@dataclass(frozen=True)
class LineRule:
    rule_id: str
    severity: Severity
    check: Callable[[str], Iterator[Tuple[int, str]]]


@dataclass(frozen=True)
class TextRule:
    rule_id: str
    severity: Severity
    check: Callable[[str], Iterator[Tuple[int, int, str]]]


# ── Main StrudelLinter class ──────────────────────────────────────────────────

class StrudelLinter:
    """
    Deterministic Strudel DSL lint runner.

    Runs all rule checks and returns a structured result.
    Zero evaluation. Zero side effects.
    """

    LINE_RULES = (
        LineRule("STR-001", Severity.ERROR, _check_synth_as_sample),
        LineRule("STR-002", Severity.ERROR, _check_dangerous_patterns),
        LineRule("STR-003", Severity.WARNING, _check_param_ranges),
        LineRule("STR-004", Severity.ERROR, _check_direct_play),
    )

    TEXT_RULES = (
        TextRule("STR-005", Severity.ERROR, _check_quote_balance),
        TextRule("STR-006", Severity.ERROR, _check_bracket_balance),
        TextRule("STR-007", Severity.WARNING, _check_scale_consistency),
    )

    def lint(self, code: str) -> LintResult:
        """
        Run all lint rules against the provided Strudel source.

        Never raises for source content; malformed input is reported as
        diagnostics. Raises TypeError if `code` is not a string.
        """
        if not isinstance(code, str):
            raise TypeError(f"lint() expects str, got {type(code).__name__}")

        diagnostics: list[Diagnostic] = []

        for lineno, line in enumerate(code.split("\n"), start=1):
            trimmed = line.strip()
            if not trimmed or trimmed.startswith("//"):
                continue
            for rule in self.LINE_RULES:
                for column, message in rule.check(line):
                    diagnostics.append(Diagnostic(
                        line=lineno, column=column, message=message,
                        severity=rule.severity, rule_id=rule.rule_id,
                    ))

        for rule in self.TEXT_RULES:
            for lineno, column, message in rule.check(code):
                diagnostics.append(Diagnostic(
                    line=lineno, column=column, message=message,
                    severity=rule.severity, rule_id=rule.rule_id,
                ))

        result = LintResult.from_diagnostics(diagnostics)
        if not result.ok:
            for d in result.diagnostics:
                logger.warning(f"[StrudelLint] {d.rule_id} L{d.line}: {d.message}")
        else:
            logger.info(
                f"[StrudelLint] PASSED, {len(result.warnings)} warning(s)."
            )
        return result

    def format_diagnostics(self, result: LintResult) -> str:
        """
        One line per diagnostic, in discovery order, e.g.:
            [ERROR] Line 3: Unbalanced parentheses: missing 1 closing ")"
            [WARNING] Line 5: .room(0.9) exceeds recommended maximum of 0.7
        """
        if not result.diagnostics:
            return NO_ISSUES_MESSAGE
        return "\n".join(
            f"[{d.severity.value.upper()}] Line {d.line}: {d.message}"
            for d in result.diagnostics
        )


# ── Module-level singleton ────────────────────────────────────────────────────

_linter_instance: StrudelLinter | None = None


def get_dsl_linter() -> StrudelLinter:
    global _linter_instance
    if _linter_instance is None:
        _linter_instance = StrudelLinter()
    return _linter_instance


def lint(code: str) -> LintResult:
    return get_dsl_linter().lint(code)


def format_diagnostics(result: LintResult) -> str:
    return get_dsl_linter().format_diagnostics(result)
