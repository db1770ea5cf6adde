"""yarrlox: a tree-walking interpreter for a small Lox dialect."""

from yarrlox.api import evaluate
from yarrlox.errors import (
    LoxError,
    ResolutionError,
    RuntimeErrors,
    SyntaxErrors,
)
from yarrlox.interpreter import Interpreter

__version__ = "0.1.0"

__all__ = [
    "Interpreter",
    "LoxError",
    "ResolutionError",
    "RuntimeErrors",
    "SyntaxErrors",
    "__version__",
    "evaluate",
]
