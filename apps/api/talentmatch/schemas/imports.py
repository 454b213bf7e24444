from typing import Any

from pydantic import BaseModel


class ImportRequest(BaseModel):
    # Records are validated one at a time by ingestion; a bad record fails alone
    users: Any = None


class IngestSummary(BaseModel):
    success: int = 0
    failed: int = 0
    skipped: int = 0

    @property
    def total(self) -> int:
        return self.success + self.failed + self.skipped

    def message(self) -> str:
        return (
            f"Processed {self.total} users: {self.success} added, "
            f"{self.failed} failed, {self.skipped} skipped."
        )


class ImportResponse(BaseModel):
    success: bool = True
    results: IngestSummary
    message: str
