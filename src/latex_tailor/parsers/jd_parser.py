"""Job description input.

The posting goes into the prompt as written. Only the file envelope is
normalized: a UTF-8 BOM, Windows/classic-Mac line endings and the blank
space around the text. Indentation and spacing inside the posting (code
snippets, aligned skill tables) are kept.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TextIO

STDIN_MARKER = "-"


def normalize_jd(text: str) -> str:
    text = text.lstrip("\ufeff")
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return text.strip()


def load_jd(source: str | Path, stdin: TextIO | None = None) -> str:
    """Read a job description from a file, or from stdin when ``source`` is "-"."""
    if str(source) == STDIN_MARKER:
        return normalize_jd((stdin or sys.stdin).read())
    return normalize_jd(Path(source).read_text(encoding="utf-8"))
