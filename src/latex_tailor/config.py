"""Application configuration loaded from config.yaml."""

from __future__ import annotations

import tempfile
from dataclasses import dataclass, field
from pathlib import Path

import yaml

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


@dataclass(frozen=True)
class GenerationConfig:
    default_model: str = DEFAULT_MODEL
    base_url: str = DEFAULT_BASE_URL
    timeout: float | None = None  # None: no transport timeout

    def __post_init__(self) -> None:
        if not self.default_model:
            raise ValueError("default_model must not be empty")
        if self.timeout is not None and self.timeout < 1:
            raise ValueError(f"timeout must be >= 1 second, got {self.timeout}")


@dataclass(frozen=True)
class TypesetConfig:
    engine: str = "pdflatex"
    passes: int = 2
    chunk_size: int = 65536
    debug_dir: str = str(Path(tempfile.gettempdir()) / "latex-tailor")
    output_dir: str = "~/Documents"

    def __post_init__(self) -> None:
        if not 1 <= self.passes <= 5:
            raise ValueError(f"passes must be between 1 and 5, got {self.passes}")
        if self.chunk_size < 1024:
            raise ValueError(f"chunk_size must be >= 1024, got {self.chunk_size}")

    @property
    def resolved_debug_dir(self) -> Path:
        return Path(self.debug_dir).expanduser()

    @property
    def resolved_output_dir(self) -> Path:
        return Path(self.output_dir).expanduser()


@dataclass(frozen=True)
class StorageConfig:
    db_path: str = "~/.latex-tailor/settings.db"

    @property
    def resolved_db_path(self) -> Path:
        return Path(self.db_path).expanduser()


@dataclass(frozen=True)
class AppConfig:
    generation: GenerationConfig = field(default_factory=GenerationConfig)
    typeset: TypesetConfig = field(default_factory=TypesetConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from YAML file, falling back to defaults."""
    if path is None:
        # Look for config.yaml relative to the project root
        candidates = [
            Path.cwd() / "config.yaml",
            Path(__file__).resolve().parent.parent.parent / "config.yaml",
        ]
        for c in candidates:
            if c.exists():
                path = c
                break

    raw: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            raw = yaml.safe_load(p.read_text()) or {}

    return AppConfig(
        generation=GenerationConfig(**(raw.get("generation") or {})),
        typeset=TypesetConfig(**(raw.get("typeset") or {})),
        storage=StorageConfig(**(raw.get("storage") or {})),
    )
