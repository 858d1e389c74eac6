"""Shared test fixtures."""

from __future__ import annotations

import asyncio
from datetime import datetime
from unittest.mock import AsyncMock

import pytest

from latex_tailor.clients.generation_client import GenerationClient
from latex_tailor.export.typeset_compiler import TypesetCompiler
from latex_tailor.models.template import Template
from latex_tailor.pipeline.keyword_extractor import SYSTEM_PROMPT as KEYWORD_SYSTEM_PROMPT
from latex_tailor.pipeline.notifications import NotificationChannel
from latex_tailor.storage.settings_store import API_KEY, SettingsStore

SAMPLE_LATEX = r"""\documentclass{article}
\begin{document}
\section*{Experience}
\begin{itemize}
  \item Built REST APIs in Python serving 1M requests/day
  \item Cut query latency by 40\% with PostgreSQL indexing
\end{itemize}
\end{document}
"""


class StubEngine:
    """Push-style engine double that controls when errors are reported.

    error_at: None (success), "before_bytes", "after_bytes" (before end)
    or "after_end".
    """

    def __init__(self, chunks=(b"%PDF-1.5\n", b"stub body\n", b"%%EOF"), error=None, error_at="after_end"):
        self.chunks = list(chunks)
        self.error = error
        self.error_at = error_at
        self.sources: list[str] = []

    async def render(self, source, sink, on_error, log_path=None):
        self.sources.append(source)
        if self.error and self.error_at == "before_bytes":
            on_error(self.error)
        for chunk in self.chunks:
            await sink.write(chunk)
            await asyncio.sleep(0)
        if self.error and self.error_at == "after_bytes":
            on_error(self.error)
        sink.end()
        if self.error and self.error_at == "after_end":
            await asyncio.sleep(0)
            on_error(self.error)


@pytest.fixture
def sample_jd_text() -> str:
    return """Backend Engineer (3-5 years)

Responsibilities:
- Design and build RESTful services in Python and Go
- Own PostgreSQL schemas and query performance

Requirements:
- Python, Go, SQL
- Experience with Docker and Kubernetes
"""


@pytest.fixture
def sample_template() -> Template:
    return Template(name="resume.tex", content=SAMPLE_LATEX)


@pytest.fixture
def settings(tmp_path) -> SettingsStore:
    store = SettingsStore(db_path=tmp_path / "settings.db")
    yield store
    store.close()


@pytest.fixture
def settings_with_key(settings) -> SettingsStore:
    settings.set(API_KEY, "test-key")
    return settings


@pytest.fixture
def stub_engine() -> StubEngine:
    return StubEngine()


@pytest.fixture
def compiler(tmp_path, stub_engine) -> TypesetCompiler:
    return TypesetCompiler(stub_engine, debug_dir=tmp_path / "debug")


@pytest.fixture
def channel() -> NotificationChannel:
    return NotificationChannel()


@pytest.fixture
def fixed_clock():
    moment = datetime(2026, 3, 14, 9, 26, 53)
    return lambda: moment


@pytest.fixture
def mock_generation_client() -> GenerationClient:
    """Mock client: LaTeX for tailoring prompts, keywords for extraction prompts."""
    client = AsyncMock(spec=GenerationClient)

    async def _dispatch(prompt, system_prompt, model_id, api_key):
        if system_prompt == KEYWORD_SYSTEM_PROMPT:
            return "Python, Go, SQL"
        return SAMPLE_LATEX.strip()

    client.generate = AsyncMock(side_effect=_dispatch)
    return client
