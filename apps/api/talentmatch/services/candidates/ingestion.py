"""
Candidate ingestion: raw user records -> canonical text -> embedding -> store.

Flow per record:
  1. validate (must carry a username)
  2. skip if the username already exists
  3. build_candidate_search_document(record) -> embed_one(text)
  4. insert; a duplicate on insert (concurrent import) is a skip, not a failure

Records are processed in fixed-size batches; records within a batch run
concurrently. One record's failure never aborts the batch or the run, so
re-running the same input after a partial failure only retries what failed.
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Sequence

from pydantic import ValidationError

from talentmatch.providers import EmbeddingProvider
from talentmatch.schemas import IngestSummary, RawCandidateRecord

from .errors import DuplicateHandleError
from .search_document import build_candidate_profile, build_candidate_search_document
from .store import CandidateStore

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 10


class IngestOutcome(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


def _record_label(raw: Any) -> str:
    if isinstance(raw, dict) and raw.get("username"):
        return str(raw["username"])
    return "<no username>"


class CandidateIngestionService:
    def __init__(
        self,
        store: CandidateStore,
        embedder: EmbeddingProvider,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self.store = store
        self.embedder = embedder
        self.batch_size = batch_size

    async def ingest_record(self, raw: Any) -> IngestOutcome:
        """Ingest one record. Never raises; the outcome says what happened."""
        label = _record_label(raw)
        try:
            record = RawCandidateRecord.model_validate(raw)
        except ValidationError as e:
            logger.warning("Rejecting record %s: %s", label, e.errors()[:3])
            return IngestOutcome.FAILED

        try:
            if await self.store.exists(record.username):
                logger.info("User %s already exists, skipping", record.username)
                return IngestOutcome.SKIPPED

            text = build_candidate_search_document(record)
            embedding = await self.embedder.embed_one(text)
            profile = build_candidate_profile(record, embedding)
            await self.store.insert(profile)
        except DuplicateHandleError:
            logger.info("User %s was inserted concurrently, skipping", record.username)
            return IngestOutcome.SKIPPED
        except Exception as e:
            logger.error("Error processing user %s: %s", record.username, e, exc_info=True)
            return IngestOutcome.FAILED

        logger.info("Inserted user %s", record.username)
        return IngestOutcome.SUCCESS

    async def ingest(self, records: Sequence[Any]) -> IngestSummary:
        summary = IngestSummary()
        total = len(records)
        for start in range(0, total, self.batch_size):
            batch = records[start:start + self.batch_size]
            logger.info(
                "Processing batch %d (%d users)...",
                start // self.batch_size + 1,
                len(batch),
            )
            outcomes = await asyncio.gather(*(self.ingest_record(raw) for raw in batch))
            for outcome in outcomes:
                if outcome is IngestOutcome.SUCCESS:
                    summary.success += 1
                elif outcome is IngestOutcome.SKIPPED:
                    summary.skipped += 1
                else:
                    summary.failed += 1

        logger.info(
            "Ingestion complete | total=%d success=%d failed=%d skipped=%d stored=%d",
            total,
            summary.success,
            summary.failed,
            summary.skipped,
            await self.store.count(),
        )
        return summary
