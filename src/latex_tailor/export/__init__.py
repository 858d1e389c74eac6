"""PDF export module for latex-tailor."""
from latex_tailor.export.latex_engine import PdfLatexEngine, TypesetEngine
from latex_tailor.export.typeset_compiler import CompileReport, TypesetCompiler

__all__ = ["CompileReport", "PdfLatexEngine", "TypesetCompiler", "TypesetEngine"]
