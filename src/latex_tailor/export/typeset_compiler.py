"""LaTeX to PDF compilation into a file on disk.

The engine streams bytes into a ``FileSink`` and reports errors separately.
A compile succeeds only if the sink reached end-of-stream, the engine task
returned, and no error was reported at any point. On failure the partial PDF
is removed and the debug ``.tex`` is kept.
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from latex_tailor.errors import CompileFailure, FileIOFailure
from latex_tailor.export.latex_engine import PdfLatexEngine, TypesetEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompileReport:
    output_path: Path
    debug_source_path: Path
    bytes_written: int


class FileSink:
    """Consumer end of the compile stream; ``finished`` is set at end-of-stream."""

    def __init__(self, handle: BinaryIO):
        self._handle = handle
        self.bytes_written = 0
        self.write_error: OSError | None = None
        self.finished = asyncio.Event()

    async def write(self, chunk: bytes) -> None:
        if self.finished.is_set():
            raise RuntimeError("write after end of stream")
        try:
            self._handle.write(chunk)
        except OSError as e:
            self.write_error = e
            raise
        self.bytes_written += len(chunk)

    def end(self) -> None:
        if self.finished.is_set():
            return
        try:
            self._handle.flush()
            os.fsync(self._handle.fileno())
        except OSError as e:
            if self.write_error is None:
                self.write_error = e
        finally:
            self._handle.close()
            self.finished.set()


class _CompileOutcome:
    """Latches the first producer error; later errors and finish never clear it."""

    def __init__(self) -> None:
        self.error: str | None = None

    def fail(self, message: str) -> None:
        if self.error is None:
            self.error = message
            logger.error("LaTeX compilation error: %s", message)
        else:
            logger.debug("Ignoring later compilation error: %s", message)


class TypesetCompiler:
    """Renders LaTeX source to a PDF file through a streaming engine."""

    def __init__(self, engine: TypesetEngine | None = None, debug_dir: str | Path | None = None):
        self.engine = engine or PdfLatexEngine()
        self.debug_dir = Path(debug_dir) if debug_dir is not None else Path.cwd()

    def debug_path_for(self, stem: str) -> Path:
        return self.debug_dir / f"{stem}.tex"

    def _write_debug_source(self, latex_source: str, debug_path: Path) -> None:
        try:
            debug_path.parent.mkdir(parents=True, exist_ok=True)
            debug_path.write_text(latex_source, encoding="utf-8")
        except OSError as e:
            raise FileIOFailure(f"Cannot write debug source {debug_path}: {e}", debug_path) from e
        logger.info("LaTeX content saved to: %s", debug_path)

    async def _run_engine(
        self,
        latex_source: str,
        sink: FileSink,
        outcome: _CompileOutcome,
        log_path: Path,
    ) -> None:
        try:
            await self.engine.render(latex_source, sink, outcome.fail, log_path=log_path)
        except Exception as e:
            if sink.write_error is None:
                outcome.fail(str(e) or type(e).__name__)
        finally:
            sink.end()

    async def compile(
        self,
        latex_source: str,
        output_path: str | Path,
        debug_source_path: str | Path | None = None,
    ) -> CompileReport:
        """Compile ``latex_source`` into ``output_path``.

        The result is decided only after the engine has returned and the sink
        has reached end-of-stream; any error reported along the way wins over
        the sink finishing.

        Raises:
            FileIOFailure: Debug source or output file could not be written.
            CompileFailure: The engine reported an error.
        """
        if debug_source_path is None:
            debug_path = self.debug_path_for(f"compile-{int(time.time() * 1000)}")
        else:
            debug_path = Path(debug_source_path)
        self._write_debug_source(latex_source, debug_path)

        output_path = Path(output_path)
        try:
            handle = output_path.open("wb")
        except OSError as e:
            raise FileIOFailure(f"Cannot open {output_path} for writing: {e}", debug_path) from e

        sink = FileSink(handle)
        outcome = _CompileOutcome()
        log_path = debug_path.with_name(f"latex-error-{debug_path.stem}.log")
        producer = asyncio.create_task(self._run_engine(latex_source, sink, outcome, log_path))
        await sink.finished.wait()
        await producer

        if sink.write_error is not None:
            output_path.unlink(missing_ok=True)
            raise FileIOFailure(f"Failed writing {output_path}: {sink.write_error}", debug_path)
        if outcome.error is not None:
            output_path.unlink(missing_ok=True)
            raise CompileFailure(outcome.error, debug_path)

        logger.info("PDF written: %s (%d bytes)", output_path, sink.bytes_written)
        return CompileReport(
            output_path=output_path,
            debug_source_path=debug_path,
            bytes_written=sink.bytes_written,
        )
