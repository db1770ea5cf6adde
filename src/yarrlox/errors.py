"""Error taxonomy and Rust-style colored diagnostic rendering."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from yarrlox.source import SourceText, Span
    from yarrlox.values import LoxType


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"


# ANSI color codes
_COLORS = {
    Severity.ERROR: "\033[1;31m",    # bold red
    Severity.WARNING: "\033[1;33m",  # bold yellow
    Severity.NOTE: "\033[1;36m",     # bold cyan
}
_BOLD = "\033[1m"
_BLUE = "\033[1;34m"
_RESET = "\033[0m"


@dataclass(frozen=True)
class DiagnosticLabel:
    """Points to a specific source location."""

    span: Span
    message: str
    style: str = "primary"  # "primary" or "secondary"


@dataclass
class Diagnostic:
    """A single diagnostic message with optional labels."""

    severity: Severity
    code: str
    message: str
    labels: list[DiagnosticLabel] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


def _diagnostic(code: str, message: str, span: Span | None) -> Diagnostic:
    labels = [DiagnosticLabel(span=span, message="")] if span is not None else []
    return Diagnostic(severity=Severity.ERROR, code=code, message=message, labels=labels)


class DiagnosticRenderer:
    """Renders diagnostics in Rust-style format with colors."""

    def __init__(self, *, color: bool = True) -> None:
        self.color = color

    def _c(self, code: str) -> str:
        return code if self.color else ""

    def render(self, diag: Diagnostic, source: SourceText | None = None) -> str:
        lines: list[str] = []
        sev = diag.severity
        color = _COLORS[sev]

        # Header: error[E101]: message
        lines.append(
            f"{self._c(color)}{sev.value}[{diag.code}]{self._c(_RESET)}"
            f"{self._c(_BOLD)}: {diag.message}{self._c(_RESET)}"
        )

        for label in diag.labels:
            if source is None:
                lines.append(f"  {self._c(_BLUE)}-->{self._c(_RESET)} {label.span}")
                continue
            span = label.span
            start_line, start_col = source.location(span.start)
            end_line, end_col = source.location(max(span.start, span.end - 1))
            lines.append(
                f"  {self._c(_BLUE)}-->{self._c(_RESET)} "
                f"{source.filename}:{start_line}:{start_col}"
            )
            gutter = f"{start_line:>4}"
            lines.append(f"  {self._c(_BLUE)}   |{self._c(_RESET)}")
            lines.append(
                f"  {self._c(_BLUE)}{gutter} |{self._c(_RESET)} {source.line_at(start_line)}"
            )

            # Carets only when the label fits on one line
            if start_line == end_line:
                caret_len = max(1, end_col - start_col + 1)
                padding = " " * (start_col - 1)
                lines.append(
                    f"  {self._c(_BLUE)}   |{self._c(_RESET)} "
                    f"{padding}{self._c(color)}{'^' * caret_len}{self._c(_RESET)}"
                )

            if label.message:
                lines.append(
                    f"  {self._c(_BLUE)}   |{self._c(_RESET)}   "
                    f"{self._c(color)}{label.message}{self._c(_RESET)}"
                )

        for note in diag.notes:
            lines.append(f"  {self._c(_BLUE)}={self._c(_RESET)} note: {note}")

        return "\n".join(lines)


# ── Syntax errors ────────────────────────────────────────────────


class ParseErrorKind(Enum):
    UNEXPECTED_TOKEN = "E101"
    UNEXPECTED_EOF = "E102"
    INVALID_LVALUE = "E103"
    BREAK_OUTSIDE_LOOP = "E104"
    TOO_MANY_ARGS = "E105"


@dataclass(frozen=True)
class ParseError:
    kind: ParseErrorKind
    message: str
    span: Span

    def to_diagnostic(self) -> Diagnostic:
        return _diagnostic(self.kind.value, self.message, self.span)


# ── Runtime errors ───────────────────────────────────────────────


class LoxRuntimeError(Exception):
    """An error raised while executing a single top-level statement."""

    code = "E300"

    def __init__(self, message: str, span: Span | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.span = span

    def with_span(self, span: Span) -> LoxRuntimeError:
        """Attach a span unless a more precise one is already set."""
        if self.span is None:
            self.span = span
        return self

    def to_diagnostic(self) -> Diagnostic:
        return _diagnostic(self.code, self.message, self.span)


class OperandTypeError(LoxRuntimeError):
    code = "E301"

    def __init__(
        self, expected: tuple[LoxType, ...], found: LoxType, span: Span | None = None,
    ) -> None:
        names = ", ".join(str(ty) for ty in expected)
        super().__init__(f"expected one of these types: [{names}], found: {found}", span)
        self.expected = expected
        self.found = found


class AssignNonexistentError(LoxRuntimeError):
    code = "E302"

    def __init__(self, name: str, span: Span | None = None) -> None:
        super().__init__(f"can't assign to nonexistent l-value {name}", span)
        self.name = name


class NotCallableError(LoxRuntimeError):
    code = "E303"

    def __init__(self, found: LoxType, span: Span | None = None) -> None:
        super().__init__(f"can only call functions, found: {found}", span)
        self.found = found


class ArityMismatchError(LoxRuntimeError):
    code = "E304"

    def __init__(self, expected: int, got: int, span: Span | None = None) -> None:
        super().__init__(
            f"function expected {expected} arguments, but received {got}", span,
        )
        self.expected = expected
        self.got = got


# ── Pipeline failures ────────────────────────────────────────────


class LoxError(Exception):
    """Base class for the three ways evaluating a program can fail."""

    exit_code = 1

    def diagnostics(self) -> list[Diagnostic]:
        raise NotImplementedError


class SyntaxErrors(LoxError):
    """Parsing failed; carries every independent syntax error found."""

    exit_code = 65

    def __init__(self, errors: list[ParseError]) -> None:
        self.errors = errors
        messages = [e.message for e in errors]
        super().__init__(f"{len(errors)} syntax error(s): {'; '.join(messages)}")

    def diagnostics(self) -> list[Diagnostic]:
        return [e.to_diagnostic() for e in self.errors]


class ResolutionError(LoxError):
    """Static resolution failed on the first offending declaration or read."""

    exit_code = 66
    code = "E200"

    def __init__(self, message: str, name: str, span: Span | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.name = name
        self.span = span

    def diagnostics(self) -> list[Diagnostic]:
        return [_diagnostic(self.code, self.message, self.span)]


class SelfInitializeError(ResolutionError):
    code = "E201"

    def __init__(self, name: str, span: Span | None = None) -> None:
        super().__init__(
            f"can't read local variable `{name}` in its own initializer", name, span,
        )


class MultipleDeclarationError(ResolutionError):
    code = "E202"

    def __init__(self, name: str, span: Span | None = None) -> None:
        super().__init__(
            f"variable `{name}` defined more than once in the same scope", name, span,
        )


class RuntimeErrors(LoxError):
    """One or more top-level statements failed while running."""

    exit_code = 70

    def __init__(self, errors: list[LoxRuntimeError]) -> None:
        self.errors = errors
        messages = [e.message for e in errors]
        super().__init__(f"{len(errors)} runtime error(s): {'; '.join(messages)}")

    def diagnostics(self) -> list[Diagnostic]:
        return [e.to_diagnostic() for e in self.errors]
