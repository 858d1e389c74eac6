"""Main pipeline orchestrator - sequences prompt, generation, compile and persistence."""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable

from latex_tailor.clients.generation_client import GenerationClient
from latex_tailor.config import DEFAULT_MODEL
from latex_tailor.errors import ErrorKind, FileIOFailure, MissingInput, TailorError
from latex_tailor.export.typeset_compiler import TypesetCompiler
from latex_tailor.models.document import (
    DocumentKind,
    DocumentRecord,
    ErrorInfo,
    GenerationRequest,
    GenerationResult,
    KeywordList,
)
from latex_tailor.models.template import Template
from latex_tailor.pipeline.keyword_extractor import KeywordExtractor
from latex_tailor.pipeline.notifications import (
    KEYWORDS_TOPIC,
    STATUS_TOPIC,
    NotificationChannel,
    StatusEvent,
)
from latex_tailor.pipeline.prompt_builder import PromptBuilder
from latex_tailor.storage.document_store import DocumentStore, KeywordStore
from latex_tailor.storage.settings_store import SettingsStore, resolve_credentials

logger = logging.getLogger(__name__)



class PipelineState(str, Enum):
    IDLE = "idle"
    VALIDATING_INPUT = "validating_input"
    AWAITING_GENERATION = "awaiting_generation"
    COMPILING = "compiling"
    PERSISTING = "persisting"
    EXTRACTING_KEYWORDS = "extracting_keywords"
    DONE = "done"
    FAILED = "failed"


class PipelineOrchestrator:
    """Runs one tailoring request end to end and reports a GenerationResult.

    Requests of the same document kind are serialized; a résumé and a cover
    letter may run concurrently. Failures are returned, never raised.
    """

    def __init__(
        self,
        client: GenerationClient,
        compiler: TypesetCompiler,
        settings: SettingsStore,
        *,
        documents: DocumentStore | None = None,
        keywords: KeywordStore | None = None,
        channel: NotificationChannel | None = None,
        output_dir: str | Path = ".",
        default_model: str = DEFAULT_MODEL,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.client = client
        self.compiler = compiler
        self.settings = settings
        self.documents = documents or DocumentStore(settings)
        self.keywords = keywords or KeywordStore(settings)
        self.channel = channel or NotificationChannel()
        self.prompt_builder = PromptBuilder()
        self.keyword_extractor = KeywordExtractor(client)
        self.output_dir = Path(output_dir)
        self.default_model = default_model
        self.clock = clock
        self.states: dict[DocumentKind, PipelineState] = {k: PipelineState.IDLE for k in DocumentKind}
        self._locks: dict[DocumentKind, asyncio.Lock] = {k: asyncio.Lock() for k in DocumentKind}

    def _credentials(self) -> tuple[str, str]:
        return resolve_credentials(self.settings, self.default_model)

    async def _enter(self, kind: DocumentKind, state: PipelineState, message: str) -> None:
        self.states[kind] = state
        logger.info("[%s] %s: %s", kind.value, state.value, message)
        await self.channel.publish(
            STATUS_TOPIC,
            StatusEvent(state=state.value, status="progress", message=message, kind=kind.value),
        )

    async def _fail(self, kind: DocumentKind | None, error: ErrorInfo) -> GenerationResult:
        if kind is not None:
            self.states[kind] = PipelineState.FAILED
        logger.error("Document generation failed (%s): %s", error.kind.value, error.detail)
        await self.channel.publish(
            STATUS_TOPIC,
            StatusEvent(
                state=PipelineState.FAILED.value,
                status="error",
                message=error.detail,
                kind=kind.value if kind is not None else None,
                error_kind=error.kind.value,
            ),
        )
        return GenerationResult.failed(error)

    async def generate(
        self,
        kind: DocumentKind | str,
        job_description: str,
        resume_template: Template | None = None,
        cover_letter_template: Template | None = None,
        *,
        company: str | None = None,
        position: str | None = None,
    ) -> GenerationResult:
        """Generate a tailored document for ``kind``.

        Args:
            kind: "resume" or "cover_letter" (older spellings accepted).
            job_description: Job posting text.
            resume_template: Template used when kind is a résumé.
            cover_letter_template: Template used when kind is a cover letter.
            company: Company recorded on the DocumentRecord.
            position: Position recorded on the DocumentRecord.
        """
        try:
            kind = DocumentKind.parse(kind)
        except ValueError:
            return await self._fail(None, ErrorInfo.from_exception(MissingInput(f"Unknown document kind: {kind!r}")))

        template = resume_template if kind is DocumentKind.RESUME else cover_letter_template
        async with self._locks[kind]:
            try:
                return await self._run(kind, job_description, template, company, position)
            except TailorError as e:
                return await self._fail(kind, ErrorInfo.from_exception(e))
            except Exception as e:
                logger.exception("Unexpected error during %s generation", kind.value)
                return await self._fail(kind, ErrorInfo(kind=ErrorKind.INTERNAL, detail=str(e) or type(e).__name__))

    async def _run(
        self,
        kind: DocumentKind,
        job_description: str,
        template: Template | None,
        company: str | None,
        position: str | None,
    ) -> GenerationResult:
        await self._enter(kind, PipelineState.VALIDATING_INPUT, "Validating input")
        built = self.prompt_builder.build(template, job_description, kind)
        request = GenerationRequest(
            kind=kind,
            job_description=job_description,
            template=template,
            company=company or "Generated",
            position=position or "Position",
        )
        api_key, model_id = self._credentials()

        await self._enter(
            kind,
            PipelineState.AWAITING_GENERATION,
            f"Generating tailored {kind.label} with {model_id} (budget {built.char_budget} chars)",
        )
        latex = await self.client.generate(built.prompt, built.system_prompt, model_id, api_key)

        await self._enter(kind, PipelineState.COMPILING, "Compiling LaTeX to PDF")
        now = self.clock()
        record_id = uuid.uuid4().hex
        # Record id keeps same-millisecond runs from sharing artifacts
        stem = f"{kind.value}-{int(now.timestamp() * 1000)}-{record_id[:8]}"
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FileIOFailure(f"Cannot create output directory {self.output_dir}: {e}") from e
        report = await self.compiler.compile(
            latex,
            self.output_dir / f"{stem}.pdf",
            self.compiler.debug_path_for(stem),
        )

        await self._enter(kind, PipelineState.PERSISTING, "Saving document record")
        record = DocumentRecord(
            id=record_id,
            kind=kind,
            company=request.company,
            position=request.position,
            source_path=str(report.debug_source_path),
            output_path=str(report.output_path),
            created_at=now,
        )
        await self.documents.append(record)

        keywords = None
        if kind is DocumentKind.RESUME:
            await self._enter(kind, PipelineState.EXTRACTING_KEYWORDS, "Extracting keywords")
            keywords = await self._extract_keywords(job_description, model_id, api_key)

        self.states[kind] = PipelineState.DONE
        logger.info("[%s] done: %s", kind.value, report.output_path)
        await self.channel.publish(
            STATUS_TOPIC,
            StatusEvent(
                state=PipelineState.DONE.value,
                status="complete",
                message=f"Generated {kind.label}",
                kind=kind.value,
                file_path=str(report.output_path),
            ),
        )
        return GenerationResult.ok(report.output_path, keywords=keywords)

    async def _extract_keywords(self, job_description: str, model_id: str, api_key: str) -> KeywordList | None:
        """Best-effort keyword update; failures are logged, never returned."""
        try:
            keywords = await self.keyword_extractor.extract(job_description, model_id, api_key)
            if not keywords:
                logger.warning("Keyword extraction returned no keywords")
                return None
            self.keywords.set(keywords)
        except Exception:
            logger.warning("Keyword extraction failed; keeping previous keywords", exc_info=True)
            return None
        await self.channel.publish(KEYWORDS_TOPIC, keywords)
        return keywords

    async def compile_only(self, latex_source: str, output_path: str | Path) -> GenerationResult:
        """Compile caller-supplied LaTeX without generation or record keeping."""
        try:
            report = await self.compiler.compile(latex_source, output_path)
        except TailorError as e:
            return GenerationResult.failed(ErrorInfo.from_exception(e))
        except Exception as e:
            logger.exception("Unexpected error compiling %s", output_path)
            return GenerationResult.failed(ErrorInfo(kind=ErrorKind.INTERNAL, detail=str(e) or type(e).__name__))
        return GenerationResult.ok(report.output_path)
