"""Pydantic models for generation requests, results and document records."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from latex_tailor.errors import ErrorKind, TailorError
from latex_tailor.models.template import Template

KeywordList = list[str]


class DocumentKind(str, Enum):
    RESUME = "resume"
    COVER_LETTER = "cover_letter"

    @classmethod
    def parse(cls, value: str | DocumentKind) -> DocumentKind:
        """Accept the enum, its value, or the spellings used by older clients."""
        if isinstance(value, DocumentKind):
            return value
        normalized = value.strip().lower().replace("-", "_")
        if normalized == "coverletter":
            normalized = "cover_letter"
        return cls(normalized)

    @property
    def label(self) -> str:
        return "résumé" if self is DocumentKind.RESUME else "cover letter"


class GenerationRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: DocumentKind
    job_description: str
    template: Template
    company: str = "Generated"
    position: str = "Position"

    @field_validator("kind", mode="before")
    @classmethod
    def _parse_kind(cls, v):
        return DocumentKind.parse(v)


class DocumentRecord(BaseModel):
    """Metadata row for one produced PDF; never mutated after append."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    kind: DocumentKind
    company: str
    position: str
    source_path: str
    output_path: str
    created_at: datetime = Field(default_factory=datetime.now)


class ErrorInfo(BaseModel):
    kind: ErrorKind
    detail: str
    status_code: int | None = None
    debug_source_path: str | None = None

    @classmethod
    def from_exception(cls, exc: TailorError) -> ErrorInfo:
        debug_path = getattr(exc, "debug_source_path", None)
        return cls(
            kind=exc.kind,
            detail=str(exc),
            status_code=getattr(exc, "status_code", None),
            debug_source_path=str(debug_path) if debug_path is not None else None,
        )


class GenerationResult(BaseModel):
    success: bool
    file_path: str | None = None
    error: ErrorInfo | None = None
    keywords: KeywordList | None = None

    @classmethod
    def ok(cls, file_path: str | Path, keywords: KeywordList | None = None) -> GenerationResult:
        return cls(success=True, file_path=str(file_path), keywords=keywords)

    @classmethod
    def failed(cls, error: ErrorInfo) -> GenerationResult:
        return cls(success=False, error=error)

    def to_response(self) -> dict:
        """Shape returned to UI callers: {success, filePath?, error?}."""
        response: dict = {"success": self.success}
        if self.file_path is not None:
            response["filePath"] = self.file_path
        if self.error is not None:
            response["error"] = self.error.detail
            if self.error.debug_source_path is not None:
                response["debugSourcePath"] = self.error.debug_source_path
        return response
