"""Tests for job description input and template loading."""

import io

import pytest

from latex_tailor.parsers.jd_parser import load_jd, normalize_jd
from latex_tailor.templates.loader import list_templates, load_template


class TestJobDescriptionInput:
    def test_keeps_inner_spacing(self):
        text = "Requirements:\n\n\n  - Python    3.11\n\tdef handler(event):"
        assert normalize_jd(text) == text

    def test_trims_surrounding_blank_space(self):
        assert normalize_jd("\n\n  Backend Engineer\n\n") == "Backend Engineer"

    def test_normalizes_line_endings(self):
        assert normalize_jd("Title\r\nBody\rMore") == "Title\nBody\nMore"

    def test_strips_bom(self):
        assert normalize_jd("\ufeffBackend Engineer") == "Backend Engineer"

    def test_load_file(self, tmp_path):
        path = tmp_path / "jd.txt"
        path.write_text("  Backend Engineer\n\n\n\nPython  SQL\n", encoding="utf-8")
        assert load_jd(path) == "Backend Engineer\n\n\n\nPython  SQL"

    def test_load_stdin(self):
        assert load_jd("-", stdin=io.StringIO("Go developer\n")) == "Go developer"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_jd(tmp_path / "nope.txt")


class TestTemplateLoader:
    def test_load_template(self, tmp_path):
        path = tmp_path / "resume.tex"
        path.write_text("\\documentclass{article}", encoding="utf-8")
        template = load_template(path)
        assert template.name == "resume.tex"
        assert template.content == "\\documentclass{article}"

    def test_missing_template(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_template(tmp_path / "nope.tex")

    def test_non_tex_rejected(self, tmp_path):
        path = tmp_path / "resume.md"
        path.write_text("# Resume", encoding="utf-8")
        with pytest.raises(ValueError):
            load_template(path)

    def test_list_templates(self, tmp_path):
        for name in ("b.tex", "a.tex", "notes.txt"):
            (tmp_path / name).write_text("x", encoding="utf-8")
        assert list_templates(tmp_path) == ["a.tex", "b.tex"]
