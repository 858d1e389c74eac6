"""Append-only document history and last-keyword persistence."""

from __future__ import annotations

import asyncio
import logging
import sqlite3

from pydantic import ValidationError

from latex_tailor.errors import PersistFailure
from latex_tailor.models.document import DocumentRecord, KeywordList
from latex_tailor.storage.settings_store import DOCUMENTS, LAST_KEYWORDS, SettingsStore

logger = logging.getLogger(__name__)


class DocumentStore:
    """Generated-document records kept under the ``documents`` settings key.

    Records are stored oldest first and listed newest first. Appends are
    serialized by an in-process lock and written in a single SQLite
    transaction, so overlapping generations never lose a record.
    """

    def __init__(self, settings: SettingsStore):
        self.settings = settings
        self._lock = asyncio.Lock()

    async def append(self, record: DocumentRecord) -> None:
        payload = record.model_dump(mode="json")

        def _push(documents):
            return [*(documents or []), payload]

        async with self._lock:
            try:
                self.settings.update(DOCUMENTS, _push, default=[])
            except (sqlite3.Error, OSError, TypeError, ValueError) as e:
                logger.error("Failed to persist document %s", record.id, exc_info=True)
                raise PersistFailure(f"Failed to save document record: {e}") from e
        logger.info("Recorded %s document %s -> %s", record.kind.value, record.id, record.output_path)

    def list(self) -> list[DocumentRecord]:
        """Return all records, newest first. Unreadable rows are skipped."""
        records = []
        for raw in reversed(self.settings.get(DOCUMENTS, []) or []):
            try:
                records.append(DocumentRecord.model_validate(raw))
            except ValidationError:
                logger.warning("Skipping malformed document record: %r", raw)
        return records

    def count(self) -> int:
        return len(self.settings.get(DOCUMENTS, []) or [])


class KeywordStore:
    """The most recent keyword list; each set replaces the previous list."""

    def __init__(self, settings: SettingsStore):
        self.settings = settings

    def get(self) -> KeywordList:
        return list(self.settings.get(LAST_KEYWORDS, []) or [])

    def set(self, keywords: KeywordList) -> None:
        self.settings.set(LAST_KEYWORDS, list(keywords))
