"""CLI interface using typer + rich."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from latex_tailor.clients.generation_client import GenerationClient
from latex_tailor.config import AppConfig, load_config
from latex_tailor.errors import TailorError
from latex_tailor.export.latex_engine import PdfLatexEngine
from latex_tailor.export.typeset_compiler import TypesetCompiler
from latex_tailor.models.document import DocumentKind
from latex_tailor.parsers.jd_parser import STDIN_MARKER, load_jd
from latex_tailor.pipeline.notifications import KEYWORDS_TOPIC, STATUS_TOPIC, NotificationChannel
from latex_tailor.pipeline.orchestrator import PipelineOrchestrator
from latex_tailor.storage.document_store import DocumentStore, KeywordStore
from latex_tailor.storage.settings_store import API_KEY, MODEL_ID, SettingsStore, resolve_credentials
from latex_tailor.templates.loader import list_templates, load_template

app = typer.Typer(
    name="latex-tailor",
    help="Tailor LaTeX résumés and cover letters to a job description",
    no_args_is_help=True,
)
config_app = typer.Typer(help="Manage stored settings", no_args_is_help=True)
app.add_typer(config_app, name="config")
console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )
    # httpx logs full request URLs, which carry the API key
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _compiler(config: AppConfig) -> TypesetCompiler:
    engine = PdfLatexEngine(
        binary=config.typeset.engine,
        passes=config.typeset.passes,
        chunk_size=config.typeset.chunk_size,
    )
    return TypesetCompiler(engine, debug_dir=config.typeset.resolved_debug_dir)


@app.command()
def generate(
    kind: str = typer.Argument(help="Document kind: resume or cover-letter"),
    jd: Path = typer.Option(..., "--jd", help="Job description text file, or - for stdin"),
    template: Path = typer.Option(..., "--template", "-t", help="LaTeX template (.tex)"),
    company: str = typer.Option(None, "--company", help="Company name for the document record"),
    position: str = typer.Option(None, "--position", help="Position for the document record"),
    output_dir: Path = typer.Option(None, "--output-dir", "-o", help="Directory for the PDF"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Generate a tailored PDF from a template and a job description."""
    _setup_logging(verbose)
    try:
        doc_kind = DocumentKind.parse(kind)
    except ValueError:
        console.print(f"[red]Unknown document kind: {kind}[/red]")
        raise typer.Exit(1)
    if str(jd) != STDIN_MARKER and not jd.exists():
        console.print(f"[red]Job description file not found: {jd}[/red]")
        raise typer.Exit(1)
    if not template.exists():
        console.print(f"[red]Template file not found: {template}[/red]")
        raise typer.Exit(1)

    config = load_config()
    jd_text = load_jd(jd)
    tex_template = load_template(template)

    if verbose:
        console.print(f"[dim]Job description: {len(jd_text)} chars[/dim]")
        console.print(f"[dim]Template: {tex_template.name} ({tex_template.char_count} chars)[/dim]")

    channel = NotificationChannel()
    keywords: list[str] = []
    channel.subscribe(KEYWORDS_TOPIC, keywords.extend)

    async def _run():
        with SettingsStore(config.storage.resolved_db_path) as settings:
            async with GenerationClient(
                base_url=config.generation.base_url,
                timeout=config.generation.timeout,
            ) as client:
                orchestrator = PipelineOrchestrator(
                    client,
                    _compiler(config),
                    settings,
                    channel=channel,
                    output_dir=output_dir or config.typeset.resolved_output_dir,
                    default_model=config.generation.default_model,
                )
                return await orchestrator.generate(
                    doc_kind,
                    jd_text,
                    resume_template=tex_template if doc_kind is DocumentKind.RESUME else None,
                    cover_letter_template=tex_template if doc_kind is DocumentKind.COVER_LETTER else None,
                    company=company,
                    position=position,
                )

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Starting...", total=None)
        channel.subscribe(STATUS_TOPIC, lambda event: progress.update(task, description=event.message))
        result = asyncio.run(_run())

    if not result.success:
        detail = result.error.detail if result.error else "Unknown error"
        console.print(Panel(f"[red]{detail}[/red]", title="Generation failed"))
        raise typer.Exit(1)

    console.print(f"\n[green]PDF saved: {result.file_path}[/green]")
    if keywords:
        console.print(Panel(", ".join(keywords), title="Keywords"))


@app.command("compile")
def compile_tex(
    tex_file: Path = typer.Argument(help="LaTeX source file"),
    output: Path = typer.Option(None, "--output", "-o", help="Output PDF path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Compile a LaTeX file to PDF without generation."""
    _setup_logging(verbose)
    if not tex_file.exists():
        console.print(f"[red]File not found: {tex_file}[/red]")
        raise typer.Exit(1)

    config = load_config()
    output = output or tex_file.with_suffix(".pdf")

    async def _run():
        with SettingsStore(config.storage.resolved_db_path) as settings:
            async with GenerationClient(base_url=config.generation.base_url) as client:
                orchestrator = PipelineOrchestrator(client, _compiler(config), settings)
                return await orchestrator.compile_only(tex_file.read_text(encoding="utf-8"), output)

    result = asyncio.run(_run())
    if not result.success:
        console.print(Panel(f"[red]{result.error.detail}[/red]", title="Compile failed"))
        raise typer.Exit(1)
    console.print(f"[green]PDF saved: {result.file_path}[/green]")


@app.command()
def ask(
    prompt: str = typer.Argument(help="Prompt text"),
    system: str = typer.Option("", "--system", "-s", help="System instruction"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Send a single prompt to the generation service and print the reply."""
    _setup_logging(verbose)
    config = load_config()

    async def _run() -> str:
        with SettingsStore(config.storage.resolved_db_path) as settings:
            api_key, model_id = resolve_credentials(settings, config.generation.default_model)
        async with GenerationClient(
            base_url=config.generation.base_url,
            timeout=config.generation.timeout,
        ) as client:
            return await client.generate_raw(prompt, system, model_id, api_key)

    try:
        text = asyncio.run(_run())
    except TailorError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    console.print(text)


@app.command()
def documents() -> None:
    """List generated documents, newest first."""
    config = load_config()
    with SettingsStore(config.storage.resolved_db_path) as settings:
        records = DocumentStore(settings).list()

    if not records:
        console.print("[yellow]No documents generated yet.[/yellow]")
        return

    table = Table(title="Documents")
    table.add_column("Created")
    table.add_column("Kind")
    table.add_column("Company")
    table.add_column("Position")
    table.add_column("PDF")
    for r in records:
        table.add_row(
            r.created_at.strftime("%Y-%m-%d %H:%M"),
            r.kind.value,
            r.company,
            r.position,
            r.output_path,
        )
    console.print(table)


@app.command()
def keywords() -> None:
    """Show keywords from the last résumé generation."""
    config = load_config()
    with SettingsStore(config.storage.resolved_db_path) as settings:
        last = KeywordStore(settings).get()
    if not last:
        console.print("[yellow]No keywords yet.[/yellow]")
        return
    for kw in last:
        console.print(f"  - {kw}")


@app.command()
def templates(directory: Path = typer.Argument(Path("."), help="Directory to scan")) -> None:
    """List LaTeX templates in a directory."""
    names = list_templates(directory)
    if not names:
        console.print(f"[yellow]No .tex templates in {directory}[/yellow]")
        return
    console.print("[bold]Templates:[/bold]")
    for name in names:
        console.print(f"  - {name}")


@config_app.command("set-key")
def set_key(api_key: str = typer.Argument(help="Gemini API key")) -> None:
    """Store the API key."""
    config = load_config()
    with SettingsStore(config.storage.resolved_db_path) as settings:
        settings.set(API_KEY, api_key.strip())
    console.print("[green]API key saved.[/green]")


@config_app.command("set-model")
def set_model(model_id: str = typer.Argument(help="Model identifier, e.g. gemini-2.5-flash")) -> None:
    """Store the model used for generation."""
    config = load_config()
    with SettingsStore(config.storage.resolved_db_path) as settings:
        settings.set(MODEL_ID, model_id.strip())
    console.print(f"[green]Model set: {model_id}[/green]")


@config_app.command("show")
def show() -> None:
    """Show stored settings (API key masked)."""
    config = load_config()
    with SettingsStore(config.storage.resolved_db_path) as settings:
        api_key, model_id = resolve_credentials(settings, config.generation.default_model)
        doc_count = DocumentStore(settings).count()
    masked = f"{api_key[:4]}...{api_key[-4:]}" if len(api_key) > 8 else ("set" if api_key else "not set")
    console.print(
        Panel(
            f"API key: {masked}\nModel: {model_id}\nDocuments: {doc_count}\n"
            f"Settings: {config.storage.resolved_db_path}",
            title="Settings",
        )
    )


if __name__ == "__main__":
    app()
