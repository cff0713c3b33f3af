"""Cascade delete summary schema."""

from pydantic import BaseModel


class StorageReleaseSummary(BaseModel):
    """Outcome of releasing stored files bound to deleted PDFs."""

    attempted: int
    released: int
    failed_keys: list[str]

    model_config = {"from_attributes": True}


class DeletionSummaryResponse(BaseModel):
    """Counts of rows removed by a cascade delete."""

    root: str
    root_id: int
    courses: int
    semesters: int
    subjects: int
    pdfs: int
    storage: StorageReleaseSummary
    stages: list[str]

    model_config = {"from_attributes": True}
