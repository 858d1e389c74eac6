"""Extracts job-relevant keywords from a job description."""

from __future__ import annotations

from latex_tailor.clients.generation_client import GenerationClient
from latex_tailor.models.document import KeywordList

SYSTEM_PROMPT = "You are a keyword extraction expert. Return only a comma-separated list of keywords."


def parse_keywords(text: str) -> KeywordList:
    """Split a comma-separated reply into trimmed, non-empty keywords."""
    return [segment.strip() for segment in text.split(",") if segment.strip()]


class KeywordExtractor:
    def __init__(self, client: GenerationClient):
        self.client = client

    async def extract(self, job_description: str, model_id: str, api_key: str) -> KeywordList:
        """Ask the generation service for keywords, in relevance order."""
        prompt = f"Extract key skills and keywords from this job description:\n\n{job_description}"
        text = await self.client.generate(
            prompt=prompt,
            system_prompt=SYSTEM_PROMPT,
            model_id=model_id,
            api_key=api_key,
        )
        return parse_keywords(text)
