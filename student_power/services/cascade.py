"""Cascade deletion of a catalog subtree.

Deleting a University, Course, Semester or Subject removes every descendant
row and releases the stored files of descendant PDFs. The work runs as an
ordered pipeline of stages:

    resolve -> release_external -> delete_pdfs -> delete_subjects
            -> delete_semesters -> delete_courses -> delete_root

A root below University starts the pipeline lower (a Subject root skips the
subject, semester and course stages). Each delete stage commits on its own,
leaves first, so an interrupted run never leaves a child pointing at a
deleted parent and can simply be re-run.

Storage release is best-effort: a failed object delete is logged and counted
but never stops the row deletes. A database failure stops the pipeline with
DatabaseConnectionError.
"""

import asyncio
import enum
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from student_power.exceptions import (
    DatabaseConnectionError,
    RecordNotFoundError,
    S3OperationError,
)
from student_power.models.course import Course
from student_power.models.pdf import Pdf
from student_power.models.semester import Semester
from student_power.models.subject import Subject
from student_power.models.university import University
from student_power.utils.s3 import S3Storage
from student_power.utils.validation import parse_identifier

logger = logging.getLogger(__name__)


class CascadeLevel(str, enum.Enum):
    """Levels of the catalog hierarchy, top to bottom."""

    UNIVERSITY = "university"
    COURSE = "course"
    SEMESTER = "semester"
    SUBJECT = "subject"
    PDF = "pdf"

    @property
    def label(self) -> str:
        return "PDF" if self is CascadeLevel.PDF else self.value.capitalize()

    @property
    def child(self) -> Optional["CascadeLevel"]:
        members = list(CascadeLevel)
        index = members.index(self)
        return members[index + 1] if index + 1 < len(members) else None

    def descendants(self) -> list["CascadeLevel"]:
        """Levels strictly below this one, top to bottom."""
        levels = []
        level = self.child
        while level is not None:
            levels.append(level)
            level = level.child
        return levels


ROOT_LEVELS = (
    CascadeLevel.UNIVERSITY,
    CascadeLevel.COURSE,
    CascadeLevel.SEMESTER,
    CascadeLevel.SUBJECT,
)


class CascadeStage(str, enum.Enum):
    """Pipeline stages in execution order."""

    RESOLVE = "resolve"
    RELEASE_EXTERNAL = "release_external"
    DELETE_PDFS = "delete_pdfs"
    DELETE_SUBJECTS = "delete_subjects"
    DELETE_SEMESTERS = "delete_semesters"
    DELETE_COURSES = "delete_courses"
    DELETE_ROOT = "delete_root"


DELETE_STAGES = {
    CascadeLevel.PDF: CascadeStage.DELETE_PDFS,
    CascadeLevel.SUBJECT: CascadeStage.DELETE_SUBJECTS,
    CascadeLevel.SEMESTER: CascadeStage.DELETE_SEMESTERS,
    CascadeLevel.COURSE: CascadeStage.DELETE_COURSES,
}


@dataclass
class CascadePlan:
    """Descendant ids collected by the resolve stage."""

    level: CascadeLevel
    root_id: int
    ids: dict[CascadeLevel, list[int]] = field(default_factory=dict)
    storage_keys: list[str] = field(default_factory=list)

    def ids_for(self, level: CascadeLevel) -> list[int]:
        return self.ids.get(level, [])


@dataclass
class StorageRelease:
    """Outcome of the release_external stage."""

    attempted: int = 0
    released: int = 0
    failed_keys: list[str] = field(default_factory=list)


@dataclass
class CascadeSummary:
    """What a completed cascade removed."""

    root: str
    root_id: int
    courses: int = 0
    semesters: int = 0
    subjects: int = 0
    pdfs: int = 0
    storage: StorageRelease = field(default_factory=StorageRelease)
    stages: list[str] = field(default_factory=list)

    def record_deleted(self, level: CascadeLevel, count: int) -> None:
        attribute = {
            CascadeLevel.COURSE: "courses",
            CascadeLevel.SEMESTER: "semesters",
            CascadeLevel.SUBJECT: "subjects",
            CascadeLevel.PDF: "pdfs",
        }[level]
        setattr(self, attribute, count)


class HierarchyStore(ABC):
    """Persistence operations the cascade needs, one level at a time."""

    @abstractmethod
    async def find_child_ids(
        self, level: CascadeLevel, parent_ids: Sequence[int]
    ) -> list[int]:
        """Ids of rows at ``level`` whose parent is in parent_ids."""

    @abstractmethod
    async def find_storage_keys(self, pdf_ids: Sequence[int]) -> list[str]:
        """Non-empty storage keys of the given PDFs."""

    @abstractmethod
    async def delete_ids(self, level: CascadeLevel, ids: Sequence[int]) -> int:
        """Delete rows at ``level`` by id and commit. Returns rows removed."""

    @abstractmethod
    async def delete_root(self, level: CascadeLevel, root_id: int) -> bool:
        """Delete the root row and commit. Returns False if it was absent."""


class SqlHierarchyStore(HierarchyStore):
    """HierarchyStore over the SQLAlchemy models.

    Id lists are processed in chunks to stay under the driver's bind
    parameter limit.
    """

    CHUNK_SIZE = 1000

    MODELS = {
        CascadeLevel.UNIVERSITY: University,
        CascadeLevel.COURSE: Course,
        CascadeLevel.SEMESTER: Semester,
        CascadeLevel.SUBJECT: Subject,
        CascadeLevel.PDF: Pdf,
    }
    PARENT_COLUMNS = {
        CascadeLevel.COURSE: Course.university_id,
        CascadeLevel.SEMESTER: Semester.course_id,
        CascadeLevel.SUBJECT: Subject.semester_id,
        CascadeLevel.PDF: Pdf.subject_id,
    }

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    def _chunks(self, ids: Sequence[int]):
        for start in range(0, len(ids), self.CHUNK_SIZE):
            yield list(ids[start : start + self.CHUNK_SIZE])

    async def find_child_ids(
        self, level: CascadeLevel, parent_ids: Sequence[int]
    ) -> list[int]:
        model = self.MODELS[level]
        parent_column = self.PARENT_COLUMNS[level]
        found: list[int] = []
        try:
            for chunk in self._chunks(parent_ids):
                result = await self.db.execute(
                    select(model.id).where(parent_column.in_(chunk))
                )
                found.extend(result.scalars().all())
        except (DBAPIError, SQLAlchemyError) as e:
            raise await self._failure(f"resolve {level.value}", e) from e
        return found

    async def find_storage_keys(self, pdf_ids: Sequence[int]) -> list[str]:
        keys: list[str] = []
        try:
            for chunk in self._chunks(pdf_ids):
                result = await self.db.execute(
                    select(Pdf.storage_key).where(
                        Pdf.id.in_(chunk), Pdf.storage_key.is_not(None)
                    )
                )
                keys.extend(key for key in result.scalars().all() if key)
        except (DBAPIError, SQLAlchemyError) as e:
            raise await self._failure("resolve storage keys", e) from e
        return keys

    async def delete_ids(self, level: CascadeLevel, ids: Sequence[int]) -> int:
        model = self.MODELS[level]
        deleted = 0
        try:
            for chunk in self._chunks(ids):
                result = await self.db.execute(
                    delete(model).where(model.id.in_(chunk))
                )
                deleted += result.rowcount or 0
            await self.db.commit()
        except (DBAPIError, SQLAlchemyError) as e:
            raise await self._failure(f"delete {level.value}", e) from e
        return deleted

    async def delete_root(self, level: CascadeLevel, root_id: int) -> bool:
        model = self.MODELS[level]
        try:
            result = await self.db.execute(delete(model).where(model.id == root_id))
            await self.db.commit()
        except (DBAPIError, SQLAlchemyError) as e:
            raise await self._failure(f"delete {level.value} root", e) from e
        return (result.rowcount or 0) > 0

    async def _failure(self, action: str, error: SQLAlchemyError):
        await self.db.rollback()
        logger.error(
            f"Cascade step failed: {action}",
            extra={"error": str(error)},
            exc_info=True,
        )
        return DatabaseConnectionError(f"Database error during {action}: {error}")


class CascadeDeleteCoordinator:
    """Runs the cascade pipeline for one root entity.

    Usage:
        coordinator = CascadeDeleteCoordinator(SqlHierarchyStore(db), s3)
        summary = await coordinator.delete(CascadeLevel.UNIVERSITY, "12")

    Attributes:
        store: Row lookups and deletes
        storage: Object storage for PDF files; None when storage is not
            configured, in which case every key counts as failed
    """

    def __init__(self, store: HierarchyStore, storage: Optional[S3Storage]) -> None:
        self.store = store
        self.storage = storage

    async def delete(self, level: CascadeLevel, raw_id: str | int) -> CascadeSummary:
        """Delete a root entity and its whole subtree.

        Args:
            level: Level of the root entity.
            raw_id: Root identifier, as received or already parsed.

        Returns:
            CascadeSummary with per-level counts and storage outcome.

        Raises:
            ValueError: If level cannot be a cascade root.
            InvalidIdentifierError: If raw_id is malformed.
            RecordNotFoundError: If the root row does not exist.
            DatabaseConnectionError: If any database stage fails.
        """
        if level not in ROOT_LEVELS:
            raise ValueError(f"{level.value} cannot be a cascade root")
        root_id = (
            raw_id if isinstance(raw_id, int) else parse_identifier(raw_id, level.label)
        )
        summary = CascadeSummary(root=level.value, root_id=root_id)

        logger.info(
            "Cascade delete started",
            extra={"root": level.value, "root_id": root_id},
        )

        plan = await self.resolve(level, root_id)
        summary.stages.append(CascadeStage.RESOLVE.value)

        summary.storage = await self.release_external(plan.storage_keys)
        summary.stages.append(CascadeStage.RELEASE_EXTERNAL.value)

        for child in reversed(level.descendants()):
            count = await self.store.delete_ids(child, plan.ids_for(child))
            summary.record_deleted(child, count)
            summary.stages.append(DELETE_STAGES[child].value)

        if not await self.store.delete_root(level, root_id):
            logger.warning(
                "Cascade delete root not found",
                extra={"root": level.value, "root_id": root_id},
            )
            raise RecordNotFoundError(level.label, root_id)
        summary.stages.append(CascadeStage.DELETE_ROOT.value)

        logger.info(
            "Cascade delete completed",
            extra={
                "root": level.value,
                "root_id": root_id,
                "courses": summary.courses,
                "semesters": summary.semesters,
                "subjects": summary.subjects,
                "pdfs": summary.pdfs,
                "storage_attempted": summary.storage.attempted,
                "storage_released": summary.storage.released,
            },
        )
        return summary

    async def resolve(self, level: CascadeLevel, root_id: int) -> CascadePlan:
        """Collect descendant ids top-down and the storage keys of PDFs."""
        plan = CascadePlan(level=level, root_id=root_id)
        parent_ids = [root_id]
        for child in level.descendants():
            parent_ids = await self.store.find_child_ids(child, parent_ids)
            plan.ids[child] = parent_ids
        plan.storage_keys = await self.store.find_storage_keys(
            plan.ids_for(CascadeLevel.PDF)
        )
        return plan

    async def release_external(self, keys: Sequence[str]) -> StorageRelease:
        """Delete each stored object independently, recording failures."""
        outcome = StorageRelease(attempted=len(keys))
        for key in keys:
            if self.storage is None:
                outcome.failed_keys.append(key)
                continue
            try:
                await asyncio.to_thread(self.storage.delete_file, key)
            except S3OperationError as e:
                logger.warning(
                    "Failed to release stored file during cascade",
                    extra={"storage_key": key, "error": str(e)},
                )
                outcome.failed_keys.append(key)
                continue
            outcome.released += 1

        if self.storage is None and keys:
            logger.warning(
                "Object storage unavailable, stored files not released",
                extra={"keys": len(keys)},
            )
        return outcome
