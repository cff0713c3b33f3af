"""Unit tests for catalog services over a mocked database session."""

from itertools import count
from unittest.mock import AsyncMock, MagicMock

import pytest
from conftest import make_course, make_semester, make_university
from sqlalchemy.exc import IntegrityError, OperationalError

from student_power.exceptions import (
    DatabaseConnectionError,
    DuplicateRecordError,
    InvalidFilterError,
    RecordNotFoundError,
    RelatedRecordNotFoundError,
    ValidationFailedError,
)
from student_power.models.course import Course
from student_power.models.semester import Semester
from student_power.services.base import is_unique_violation
from student_power.services.course_service import (
    CourseService,
    MAX_COURSE_YEARS,
    build_semesters,
    calculate_semester_count,
    duration_errors,
)
from student_power.services.semester_service import SemesterService
from student_power.services.subject_service import SubjectService
from student_power.services.university_service import (
    UniversityService,
    derive_slug,
)


class UniqueViolation(Exception):
    sqlstate = "23505"


def unique_error() -> IntegrityError:
    return IntegrityError("INSERT", {}, UniqueViolation("duplicate key"))


def lookup_result(value):
    """Result object whose scalar lookups return value."""
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    result.scalars.return_value.first.return_value = value
    result.scalars.return_value.all.return_value = (
        value if isinstance(value, list) else [value]
    )
    return result


@pytest.fixture
def mock_db():
    """AsyncSession stand-in that assigns ids on flush."""
    db = MagicMock()
    added: list = []
    ids = count(1)

    def add(instance):
        added.append(instance)

    async def flush():
        for instance in added:
            if instance.id is None:
                instance.id = next(ids)

    db.add.side_effect = add
    db.add_all.side_effect = lambda instances: added.extend(instances)
    db.flush = AsyncMock(side_effect=flush)
    db.refresh = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.execute = AsyncMock()
    db.delete = AsyncMock()
    db.added = added
    return db


class TestSemesterCount:
    """Tests for duration parsing."""

    @pytest.mark.parametrize(
        "duration,expected",
        [
            ("4 years", 8),
            ("2.5 years", 5),
            ("abc", 0),
            ("3", 6),
            ("1.75 years", 3),
            ("", 0),
        ],
    )
    def test_calculate_semester_count(self, duration, expected):
        assert calculate_semester_count(duration) == expected

    def test_build_semesters_numbers_and_slugs(self):
        semesters = build_semesters(course_id=7, count=3)

        assert [s.number for s in semesters] == [1, 2, 3]
        assert [s.slug for s in semesters] == [
            "semester-1",
            "semester-2",
            "semester-3",
        ]
        assert semesters[1].name == "Semester 2"
        assert all(s.course_id == 7 for s in semesters)


    @pytest.mark.parametrize("duration", ["10 years", "3", "flexible", ""])
    def test_duration_within_bound_accepted(self, duration):
        assert duration_errors(duration) == []

    @pytest.mark.parametrize(
        "duration", ["10.5 years", "99999999999999999999999999999999 years"]
    )
    def test_duration_over_bound_rejected(self, duration):
        assert duration_errors(duration) == [
            f"Duration must be at most {MAX_COURSE_YEARS} years"
        ]


class TestUniqueViolation:
    """Tests for unique constraint detection."""

    def test_detects_sqlstate(self):
        assert is_unique_violation(unique_error()) is True

    def test_other_sqlstate_is_not_unique(self):
        class ForeignKeyViolation(Exception):
            sqlstate = "23503"

        error = IntegrityError("INSERT", {}, ForeignKeyViolation("fk"))

        assert is_unique_violation(error) is False

    def test_falls_back_to_message(self):
        error = IntegrityError(
            "INSERT", {}, Exception("UNIQUE constraint failed: universities.slug")
        )

        assert is_unique_violation(error) is True


class TestUniversityService:
    """Tests for UniversityService."""

    def test_derive_slug_rejects_symbol_only_names(self):
        with pytest.raises(ValidationFailedError):
            derive_slug("!!! ???")

    @pytest.mark.asyncio
    async def test_create_university_derives_slug(self, mock_db):
        service = UniversityService(mock_db)

        university = await service.create_university(
            name="Delhi University",
            description="Public central university",
            location="Delhi",
            logo=None,
        )

        assert university.slug == "delhi-university"
        assert university.id == 1
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_duplicate_slug_raises_and_rolls_back(self, mock_db):
        mock_db.flush.side_effect = unique_error()
        service = UniversityService(mock_db)

        with pytest.raises(DuplicateRecordError):
            await service.create_university(
                name="Delhi University",
                description="Public central university",
                location="Delhi",
            )

        mock_db.rollback.assert_awaited_once()
        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_connection_failure_raises_database_error(self, mock_db):
        mock_db.flush.side_effect = OperationalError("INSERT", {}, Exception("down"))
        service = UniversityService(mock_db)

        with pytest.raises(DatabaseConnectionError):
            await service.create(
                name="X Y", slug="x-y", description="desc", location="Z"
            )

        mock_db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_update_with_new_name_reslugs(self, mock_db):
        university = make_university()
        mock_db.execute.return_value = lookup_result(university)
        service = UniversityService(mock_db)

        updated = await service.update_university(1, name="University of Delhi")

        assert updated.slug == "university-of-delhi"
        assert updated.name == "University of Delhi"
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_update_missing_raises_not_found(self, mock_db):
        mock_db.execute.return_value = lookup_result(None)
        service = UniversityService(mock_db)

        with pytest.raises(RecordNotFoundError):
            await service.update_university(99, location="Mumbai")

        mock_db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_get_by_id_or_slug_prefers_id(self, mock_db):
        university = make_university(id=12)
        mock_db.execute.return_value = lookup_result(university)
        service = UniversityService(mock_db)

        found = await service.get_by_id_or_slug("12")

        assert found is university
        assert mock_db.execute.await_count == 1

    @pytest.mark.asyncio
    async def test_get_by_id_or_slug_falls_back_to_slug(self, mock_db):
        university = make_university()
        mock_db.execute.side_effect = [lookup_result(None), lookup_result(university)]
        service = UniversityService(mock_db)

        found = await service.get_by_id_or_slug("2024")

        assert found is university
        assert mock_db.execute.await_count == 2

    @pytest.mark.asyncio
    async def test_get_by_id_or_slug_not_found(self, mock_db):
        mock_db.execute.return_value = lookup_result(None)
        service = UniversityService(mock_db)

        with pytest.raises(RecordNotFoundError) as exc_info:
            await service.get_by_id_or_slug("nowhere")

        assert exc_info.value.record_id == "nowhere"
        assert mock_db.execute.await_count == 1

    @pytest.mark.asyncio
    async def test_find_rejects_unknown_filter(self, mock_db):
        service = UniversityService(mock_db)

        with pytest.raises(InvalidFilterError):
            await service.find(colour="red")

        mock_db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_find_ignores_none_filters(self, mock_db):
        universities = [make_university(id=2), make_university(id=1)]
        mock_db.execute.return_value = lookup_result(universities)
        service = UniversityService(mock_db)

        found = await service.find(location=None)

        assert found == universities


class TestCourseService:
    """Tests for CourseService.create_course()."""

    @pytest.mark.asyncio
    async def test_create_course_generates_semesters(self, mock_db):
        mock_db.execute.return_value = lookup_result(make_university())
        service = CourseService(mock_db)

        course, created = await service.create_course(
            university_id=1,
            name="Bachelor of Computer Applications",
            code="BCA",
            description="Three year undergraduate programme",
            duration="3 years",
        )

        assert created == 6
        assert course.slug == "bachelor-of-computer-applications"
        semesters = [obj for obj in mock_db.added if isinstance(obj, Semester)]
        assert [s.number for s in semesters] == [1, 2, 3, 4, 5, 6]
        assert all(s.course_id == course.id for s in semesters)
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_duration_without_number_creates_no_semesters(self, mock_db):
        mock_db.execute.return_value = lookup_result(make_university())
        service = CourseService(mock_db)

        _, created = await service.create_course(
            university_id=1,
            name="Certificate",
            code="CERT",
            description="Short certificate course",
            duration="flexible",
        )

        assert created == 0
        assert not [obj for obj in mock_db.added if isinstance(obj, Semester)]

    @pytest.mark.asyncio
    async def test_missing_university_rejected(self, mock_db):
        mock_db.execute.return_value = lookup_result(None)
        service = CourseService(mock_db)

        with pytest.raises(RelatedRecordNotFoundError) as exc_info:
            await service.create_course(
                university_id=42,
                name="BCA",
                code="BCA",
                description="Three year programme",
                duration="3 years",
            )

        assert exc_info.value.field == "university_id"
        assert not [obj for obj in mock_db.added if isinstance(obj, Course)]

    @pytest.mark.asyncio
    async def test_semester_failure_rolls_back_course(self, mock_db):
        mock_db.execute.return_value = lookup_result(make_university())
        flushes = {"count": 0}
        original_flush = mock_db.flush.side_effect

        async def flush():
            flushes["count"] += 1
            if flushes["count"] == 2:
                raise OperationalError("INSERT", {}, Exception("lost"))
            await original_flush()

        mock_db.flush.side_effect = flush
        service = CourseService(mock_db)

        with pytest.raises(DatabaseConnectionError):
            await service.create_course(
                university_id=1,
                name="BCA",
                code="BCA",
                description="Three year programme",
                duration="3 years",
            )

        mock_db.rollback.assert_awaited_once()
        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_excessive_duration_rejected_before_any_write(self, mock_db):
        mock_db.execute.return_value = lookup_result(make_university())
        service = CourseService(mock_db)

        with pytest.raises(ValidationFailedError) as exc_info:
            await service.create_course(
                university_id=1,
                name="Endless Programme",
                code="END",
                description="A programme that never finishes",
                duration="99999999999999999999999999999999 years",
            )

        assert exc_info.value.errors == ["Duration must be at most 10 years"]
        assert mock_db.added == []
        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_rejects_excessive_duration(self, mock_db):
        service = CourseService(mock_db)

        with pytest.raises(ValidationFailedError):
            await service.update_course(10, duration="40 years")

        mock_db.commit.assert_not_awaited()


class TestSemesterService:
    """Tests for SemesterService."""

    @pytest.mark.asyncio
    async def test_create_semester_names_by_number(self, mock_db):
        mock_db.execute.return_value = lookup_result(make_course())
        service = SemesterService(mock_db)

        semester = await service.create_semester(course_id=10, number=7)

        assert semester.name == "Semester 7"
        assert semester.slug == "semester-7"


class TestSubjectService:
    """Tests for SubjectService.create_subject()."""

    @pytest.mark.asyncio
    async def test_semester_of_other_course_rejected(self, mock_db):
        mock_db.execute.side_effect = [
            lookup_result(make_course(id=10)),
            lookup_result(make_semester(course_id=11)),
        ]
        service = SubjectService(mock_db)

        with pytest.raises(ValidationFailedError):
            await service.create_subject(
                course_id=10,
                semester_id=100,
                name="Data Structures",
                code="CS201",
                credits=4,
                description="Lists and trees",
            )

        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_subject_success(self, mock_db):
        mock_db.execute.side_effect = [
            lookup_result(make_course(id=10)),
            lookup_result(make_semester(course_id=10)),
        ]
        service = SubjectService(mock_db)

        subject = await service.create_subject(
            course_id=10,
            semester_id=100,
            name="Data Structures & Algorithms",
            code="CS201",
            credits=4,
            description="Lists and trees",
        )

        assert subject.slug == "data-structures-algorithms"
        mock_db.commit.assert_awaited_once()
