"""create_catalog_tables

Revision ID: 3f1a9c2d7b10
Revises:
Create Date: 2026-10-18 10:12:41.502113

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f1a9c2d7b10"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "universities",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("location", sa.String(length=200), nullable=False),
        sa.Column("logo", sa.String(length=1000), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_universities_slug"), "universities", ["slug"], unique=True
    )

    # Foreign keys carry no ON DELETE CASCADE: deletes run leaves-first
    op.create_table(
        "courses",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("university_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=False),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("duration", sa.String(length=50), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["university_id"], ["universities.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "university_id", "slug", name="uq_course_university_slug"
        ),
    )
    op.create_index(
        op.f("ix_courses_university_id"), "courses", ["university_id"], unique=False
    )
    op.create_index(op.f("ix_courses_slug"), "courses", ["slug"], unique=False)

    op.create_table(
        "semesters",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("course_id", sa.Integer(), nullable=False),
        sa.Column("number", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["course_id"], ["courses.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("course_id", "slug", name="uq_semester_course_slug"),
    )
    op.create_index(
        op.f("ix_semesters_course_id"), "semesters", ["course_id"], unique=False
    )
    op.create_index(op.f("ix_semesters_slug"), "semesters", ["slug"], unique=False)

    op.create_table(
        "subjects",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("course_id", sa.Integer(), nullable=False),
        sa.Column("semester_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=False),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("credits", sa.Integer(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["course_id"], ["courses.id"]),
        sa.ForeignKeyConstraint(["semester_id"], ["semesters.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("semester_id", "slug", name="uq_subject_semester_slug"),
    )
    op.create_index(
        op.f("ix_subjects_course_id"), "subjects", ["course_id"], unique=False
    )
    op.create_index(
        op.f("ix_subjects_semester_id"), "subjects", ["semester_id"], unique=False
    )
    op.create_index(op.f("ix_subjects_slug"), "subjects", ["slug"], unique=False)

    op.create_table(
        "pdfs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("subject_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("file_name", sa.String(length=255), nullable=False),
        sa.Column("file_url", sa.String(length=2048), nullable=False),
        sa.Column("file_size", sa.BigInteger(), nullable=False),
        sa.Column("storage_key", sa.String(length=512), nullable=True),
        sa.Column(
            "category",
            sa.Enum(
                "notes",
                "assignments",
                "papers",
                "other",
                name="pdfcategory",
                native_enum=False,
                length=20,
            ),
            nullable=False,
        ),
        *_timestamps(),
        sa.ForeignKeyConstraint(["subject_id"], ["subjects.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_pdfs_subject_id"), "pdfs", ["subject_id"], unique=False)
    op.create_index(
        op.f("ix_pdfs_storage_key"), "pdfs", ["storage_key"], unique=False
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_pdfs_storage_key"), table_name="pdfs")
    op.drop_index(op.f("ix_pdfs_subject_id"), table_name="pdfs")
    op.drop_table("pdfs")
    op.drop_index(op.f("ix_subjects_slug"), table_name="subjects")
    op.drop_index(op.f("ix_subjects_semester_id"), table_name="subjects")
    op.drop_index(op.f("ix_subjects_course_id"), table_name="subjects")
    op.drop_table("subjects")
    op.drop_index(op.f("ix_semesters_slug"), table_name="semesters")
    op.drop_index(op.f("ix_semesters_course_id"), table_name="semesters")
    op.drop_table("semesters")
    op.drop_index(op.f("ix_courses_slug"), table_name="courses")
    op.drop_index(op.f("ix_courses_university_id"), table_name="courses")
    op.drop_table("courses")
    op.drop_index(op.f("ix_universities_slug"), table_name="universities")
    op.drop_table("universities")
