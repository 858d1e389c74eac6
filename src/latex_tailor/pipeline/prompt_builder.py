"""Builds the length-constrained tailoring prompt for the generation service."""

from __future__ import annotations

from dataclasses import dataclass

from latex_tailor.errors import MissingInput
from latex_tailor.models.document import DocumentKind
from latex_tailor.models.template import Template

PROMPT_TEMPLATE = """\
You are to generate a tailored {label} by modifying the LaTeX {label} below to best match the following job description:

{job_description}

Guidelines:
1. Keep all LaTeX structure, commands, formatting, and packages EXACTLY as is. Do NOT add, remove, or rename sections, environments, or LaTeX syntax.
2. Modify the content (text only) within each section to highlight the most relevant experience, technologies, and achievements that match the job description.
3. Adjust wording to emphasize alignment with the role's keywords, responsibilities, and tools.
4. Preserve the professional tone, concise phrasing, and quantitative, results-oriented style.
5. **CRITICAL CHARACTER LIMIT:** The original template is {char_budget} characters. Your final output MUST be less than this. This is the most important rule. Edit existing content; do not add new content that increases length.
6. Retain the candidate's identity, layout, and formatting integrity; only update text content for relevance.
7. Ensure that all output is syntactically valid LaTeX code.
8. Escape LaTeX special characters when they appear in plain text:
   - \\#  represents '#'
   - \\$  represents '$'
   - \\%  represents '%'
   - \\&  represents 'and' (prefer writing 'and' instead)
   - \\_  represents '_'
   - \\{{  represents '{{'
   - \\}}  represents '}}'
   - \\^{{}} represents '^'
   - \\~{{}} represents '~'
   - Backslashes are part of LaTeX commands and must not be added or removed except where required for proper escaping.

LaTeX {label} to modify:
{template}

Output requirements:
- Return ONLY valid LaTeX code.
- Do NOT include markdown formatting, code blocks, explanations, or commentary.
- The result must compile successfully as a standalone LaTeX document."""

SYSTEM_PROMPT_TEMPLATE = """\
You are a LaTeX and professional {label} optimization expert.

Your role:
- Edit the provided LaTeX {label} to tailor it perfectly to the job description.
- **CRITICAL CHARACTER LIMIT:** The ORIGINAL LaTeX template is {char_budget} characters long. Your FINAL output MUST NOT exceed this length. This is your #1 priority.
- Replace and refine text content only; do NOT modify LaTeX structure, section titles, commands, or spacing.
- Emphasize the most relevant skills, achievements, and technologies that match the job posting.
- Use concise, impact-driven phrasing with quantifiable results.
- Output ONLY valid LaTeX code: no markdown, no commentary, no extra text."""


@dataclass(frozen=True)
class BuiltPrompt:
    prompt: str
    system_prompt: str
    char_budget: int


class PromptBuilder:
    """Composes prompt and system instruction with the template length as budget."""

    def build(
        self,
        template: Template | None,
        job_description: str,
        kind: DocumentKind | str,
    ) -> BuiltPrompt:
        kind = DocumentKind.parse(kind)
        if template is None or not template.content.strip():
            raise MissingInput(f"No {kind.label} template selected.")
        if not job_description or not job_description.strip():
            raise MissingInput("Job description is empty.")

        char_budget = len(template.content)
        prompt = PROMPT_TEMPLATE.format(
            label=kind.label,
            job_description=job_description,
            char_budget=char_budget,
            template=template.content,
        )
        system_prompt = SYSTEM_PROMPT_TEMPLATE.format(label=kind.label, char_budget=char_budget)
        return BuiltPrompt(prompt=prompt, system_prompt=system_prompt, char_budget=char_budget)
