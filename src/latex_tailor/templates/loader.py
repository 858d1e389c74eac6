from pathlib import Path

from latex_tailor.models.template import Template


def load_template(path: str | Path) -> Template:
    """Load a LaTeX template from a .tex file."""
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Template not found: {p}")
    if p.suffix.lower() != ".tex":
        raise ValueError(f"Template must be a .tex file: {p.name}")
    return Template.from_file(p)


def list_templates(directory: str | Path) -> list[str]:
    """List .tex template file names in a directory, sorted."""
    return sorted(p.name for p in Path(directory).glob("*.tex"))
