"""
Exception types raised by the visitor analysis pipeline.

Every exception resolves its code, message, severity and component from the
YAML error catalog, keyed by the class name.
"""
from typing import Any, Dict

from profiler.errors.utils import get_error_metadata


class VisitorAnalysisError(Exception):
    error_key = "UnknownError"

    def __init__(self, **context: Any):
        meta = get_error_metadata(self.error_key, context)
        self.context: Dict[str, Any] = context
        self.code = meta["code"]
        self.severity = meta["severity"]
        self.component = meta["component"]
        super().__init__(meta["message"])

    @property
    def message(self) -> str:
        return self.args[0]


class ConfigError(VisitorAnalysisError):
    error_key = "ConfigError"


class ParseError(VisitorAnalysisError):
    error_key = "ParseError"


class SeriesValidationError(ParseError):
    error_key = "SeriesValidationError"


class UnacknowledgedMissingDataError(VisitorAnalysisError):
    error_key = "UnacknowledgedMissingDataError"


class NonContiguousWindowError(VisitorAnalysisError):
    error_key = "NonContiguousWindowError"


class DecompositionInputError(VisitorAnalysisError):
    error_key = "DecompositionInputError"


class DecompositionFitError(VisitorAnalysisError):
    error_key = "DecompositionFitError"

    @property
    def window(self):
        return self.context.get("window")


class NoViableModelError(VisitorAnalysisError):
    error_key = "NoViableModelError"
