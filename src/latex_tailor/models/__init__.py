"""Data models for the LaTeX tailoring pipeline."""

from latex_tailor.models.document import (
    DocumentKind,
    DocumentRecord,
    ErrorInfo,
    GenerationRequest,
    GenerationResult,
    KeywordList,
)
from latex_tailor.models.template import Template

__all__ = [
    "DocumentKind",
    "DocumentRecord",
    "ErrorInfo",
    "GenerationRequest",
    "GenerationResult",
    "KeywordList",
    "Template",
]
