"""Syntax validation of PHP sources for plugin loaders."""

from .config import CheckerConfig, load_config
from .errors import (
    BadSyntaxError,
    CheckTimeoutError,
    CheckerUnavailable,
    ConfigError,
    Diagnostic,
    ErrorKind,
    PhpCheckError,
)
from .evaluator import Evaluator, check
from .state import FileValidationState, SourceFile

__all__ = [
    "BadSyntaxError",
    "CheckTimeoutError",
    "CheckerConfig",
    "CheckerUnavailable",
    "ConfigError",
    "Diagnostic",
    "ErrorKind",
    "Evaluator",
    "FileValidationState",
    "PhpCheckError",
    "SourceFile",
    "check",
    "load_config",
]
