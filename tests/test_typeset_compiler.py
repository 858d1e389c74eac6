"""Tests for TypesetCompiler and the pdflatex engine."""

from __future__ import annotations

import shutil

import pytest

from latex_tailor.errors import CompileFailure, FileIOFailure
from latex_tailor.export.latex_engine import PdfLatexEngine
from latex_tailor.export.typeset_compiler import TypesetCompiler

from conftest import SAMPLE_LATEX, StubEngine


class RaisingEngine:
    async def render(self, source, sink, on_error, log_path=None):
        await sink.write(b"%PDF-partial")
        raise RuntimeError("engine crashed")


class DoubleErrorEngine:
    async def render(self, source, sink, on_error, log_path=None):
        on_error("first error")
        sink.end()
        on_error("second error")


class TestTypesetCompiler:
    @pytest.mark.asyncio
    async def test_success_writes_pdf_and_debug_source(self, tmp_path, stub_engine):
        compiler = TypesetCompiler(stub_engine, debug_dir=tmp_path / "debug")
        output = tmp_path / "out.pdf"

        report = await compiler.compile(SAMPLE_LATEX, output, compiler.debug_path_for("resume-1"))

        assert output.read_bytes() == b"%PDF-1.5\nstub body\n%%EOF"
        assert report.bytes_written == len(output.read_bytes())
        assert report.debug_source_path == tmp_path / "debug" / "resume-1.tex"
        assert report.debug_source_path.read_text(encoding="utf-8") == SAMPLE_LATEX
        assert stub_engine.sources == [SAMPLE_LATEX]

    @pytest.mark.asyncio
    async def test_default_debug_path(self, tmp_path, stub_engine):
        compiler = TypesetCompiler(stub_engine, debug_dir=tmp_path)
        report = await compiler.compile(SAMPLE_LATEX, tmp_path / "out.pdf")
        assert report.debug_source_path.parent == tmp_path
        assert report.debug_source_path.name.startswith("compile-")
        assert report.debug_source_path.suffix == ".tex"

    @pytest.mark.parametrize("error_at", ["before_bytes", "after_bytes", "after_end"])
    @pytest.mark.asyncio
    async def test_error_wins_regardless_of_order(self, tmp_path, error_at):
        engine = StubEngine(error="Undefined control sequence", error_at=error_at)
        compiler = TypesetCompiler(engine, debug_dir=tmp_path / "debug")
        output = tmp_path / "out.pdf"

        with pytest.raises(CompileFailure) as exc_info:
            await compiler.compile(SAMPLE_LATEX, output)

        err = exc_info.value
        assert err.detail == "Undefined control sequence"
        assert err.debug_source_path is not None
        assert err.debug_source_path.exists()
        assert str(err.debug_source_path) in str(err)
        # No artifact left behind without a record
        assert not output.exists()

    @pytest.mark.asyncio
    async def test_engine_exception_is_compile_failure(self, tmp_path):
        compiler = TypesetCompiler(RaisingEngine(), debug_dir=tmp_path)
        with pytest.raises(CompileFailure, match="engine crashed"):
            await compiler.compile(SAMPLE_LATEX, tmp_path / "out.pdf")
        assert not (tmp_path / "out.pdf").exists()

    @pytest.mark.asyncio
    async def test_first_error_is_latched(self, tmp_path):
        compiler = TypesetCompiler(DoubleErrorEngine(), debug_dir=tmp_path)
        with pytest.raises(CompileFailure) as exc_info:
            await compiler.compile(SAMPLE_LATEX, tmp_path / "out.pdf")
        assert exc_info.value.detail == "first error"

    @pytest.mark.asyncio
    async def test_unwritable_output_is_file_io_failure(self, tmp_path, stub_engine):
        compiler = TypesetCompiler(stub_engine, debug_dir=tmp_path)
        with pytest.raises(FileIOFailure) as exc_info:
            await compiler.compile(SAMPLE_LATEX, tmp_path / "missing" / "out.pdf")
        assert exc_info.value.debug_source_path is not None
        assert stub_engine.sources == []


class TestPdfLatexEngine:
    @pytest.mark.asyncio
    async def test_missing_binary_reports_error(self, tmp_path):
        engine = PdfLatexEngine(binary="no-such-latex-binary")
        compiler = TypesetCompiler(engine, debug_dir=tmp_path)

        with pytest.raises(CompileFailure, match="not found"):
            await compiler.compile(SAMPLE_LATEX, tmp_path / "out.pdf")

    @pytest.mark.skipif(shutil.which("pdflatex") is None, reason="pdflatex not installed")
    @pytest.mark.asyncio
    async def test_real_compile(self, tmp_path):
        compiler = TypesetCompiler(PdfLatexEngine(passes=1), debug_dir=tmp_path)
        output = tmp_path / "out.pdf"

        await compiler.compile(SAMPLE_LATEX, output, tmp_path / "resume-1.tex")

        assert output.read_bytes()[:4] == b"%PDF"
        assert (tmp_path / "latex-error-resume-1.log").exists()

    @pytest.mark.skipif(shutil.which("pdflatex") is None, reason="pdflatex not installed")
    @pytest.mark.asyncio
    async def test_real_compile_error(self, tmp_path):
        compiler = TypesetCompiler(PdfLatexEngine(passes=1), debug_dir=tmp_path)
        bad = "\\documentclass{article}\n\\begin{document}\n\\undefinedmacro\n\\end{document}\n"

        with pytest.raises(CompileFailure):
            await compiler.compile(bad, tmp_path / "out.pdf")
