"""pdflatex-backed typesetting engine.

The engine pushes PDF bytes into a sink and reports failures through a
separate ``on_error`` callback. pdflatex can leave a PDF behind and still
exit non-zero, so an error may be reported after every byte was pushed and
the sink was ended.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Callable, Protocol

logger = logging.getLogger(__name__)

LOG_TAIL_LINES = 20


class ByteSink(Protocol):
    async def write(self, chunk: bytes) -> None: ...

    def end(self) -> None: ...


class TypesetEngine(Protocol):
    async def render(
        self,
        source: str,
        sink: ByteSink,
        on_error: Callable[[str], None],
        log_path: Path | None = None,
    ) -> None: ...


def _tail(text: str, lines: int = LOG_TAIL_LINES) -> str:
    return "\n".join(text.splitlines()[-lines:])


class PdfLatexEngine:
    """Runs pdflatex in a throwaway directory and streams the resulting PDF."""

    def __init__(self, binary: str = "pdflatex", passes: int = 2, chunk_size: int = 65536):
        self.binary = binary
        self.passes = passes
        self.chunk_size = chunk_size

    def _env(self) -> dict[str, str]:
        env = os.environ.copy()
        # Paranoid file access: read/write only inside the working directory
        env.setdefault("openout_any", "p")
        env.setdefault("openin_any", "p")
        env.setdefault("shell_escape", "f")
        env.setdefault("max_print_line", "1000")
        return env

    def _command(self, binary_path: str) -> list[str]:
        return [
            binary_path,
            "-interaction=nonstopmode",
            "-halt-on-error",
            "-file-line-error",
            "-no-shell-escape",
            "-synctex=0",
            "main.tex",
        ]

    async def render(
        self,
        source: str,
        sink: ByteSink,
        on_error: Callable[[str], None],
        log_path: Path | None = None,
    ) -> None:
        binary_path = shutil.which(self.binary)
        if binary_path is None:
            sink.end()
            on_error(f"{self.binary} not found in PATH")
            return

        with tempfile.TemporaryDirectory(prefix="latex-tailor-") as tmpdir:
            tmp = Path(tmpdir)
            (tmp / "main.tex").write_text(source, encoding="utf-8")
            pdf_path = tmp / "main.pdf"

            log_parts: list[str] = []
            returncode = 0
            for i in range(self.passes):
                proc = await asyncio.create_subprocess_exec(
                    *self._command(binary_path),
                    cwd=str(tmp),
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.STDOUT,
                    env=self._env(),
                )
                stdout, _ = await proc.communicate()
                log_parts.append(stdout.decode("utf-8", errors="ignore"))
                returncode = proc.returncode
                logger.debug("%s pass %d returned %d", self.binary, i + 1, returncode)
                if returncode != 0:
                    break

            log_text = "\n".join(log_parts)
            if log_path is not None:
                try:
                    log_path.parent.mkdir(parents=True, exist_ok=True)
                    log_path.write_text(log_text, encoding="utf-8")
                except OSError:
                    logger.warning("Could not write compiler log to %s", log_path, exc_info=True)

            produced = pdf_path.exists()
            if produced:
                with pdf_path.open("rb") as f:
                    while chunk := f.read(self.chunk_size):
                        await sink.write(chunk)
            sink.end()

            if not produced:
                on_error(f"no PDF produced\n{_tail(log_text)}")
            elif returncode != 0:
                on_error(f"{self.binary} exited with status {returncode}\n{_tail(log_text)}")
