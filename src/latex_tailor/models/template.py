"""LaTeX template model."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict


class Template(BaseModel):
    """A named LaTeX source blob, immutable once selected."""

    model_config = ConfigDict(frozen=True)

    name: str
    content: str

    @classmethod
    def from_file(cls, path: str | Path) -> Template:
        p = Path(path)
        return cls(name=p.name, content=p.read_text(encoding="utf-8"))

    @property
    def char_count(self) -> int:
        return len(self.content)
