"""Initial schema: users, categories, questions, exams, rating marks, activities

Revision ID: 001
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None

ACTIVE = sa.text("deleted_at IS NULL")


def _entity_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.String(24), primary_key=True),
        sa.Column("creator_id", sa.String(24), nullable=True),
        sa.Column("owner_id", sa.String(24), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    ]


def _owner_indexes(table: str) -> None:
    op.create_index(f"ix_{table}_creator_id", table, ["creator_id"])
    op.create_index(f"ix_{table}_owner_id", table, ["owner_id"])


def upgrade() -> None:
    # Users
    op.create_table(
        "users",
        *_entity_columns(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("permissions", postgresql.JSONB(), nullable=False),
        sa.Column("category_rating_marks", postgresql.JSONB(), nullable=False),
        sa.Column("question_rating_marks", postgresql.JSONB(), nullable=False),
        sa.Column("category_exams", postgresql.JSONB(), nullable=False),
    )
    _owner_indexes("users")
    op.create_index("ix_users_email", "users", ["email"])
    op.create_index("ux_users_email_active", "users", ["email"], unique=True, postgresql_where=ACTIVE)

    # Categories
    op.create_table(
        "categories",
        *_entity_columns(),
        sa.Column("approval_status", sa.String(8), nullable=False, server_default="PENDING"),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("required_score", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("question_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("approved_question_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("rating_mark_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("rating_average_mark", sa.Float(), nullable=True),
    )
    _owner_indexes("categories")
    op.create_index("ix_categories_name", "categories", ["name"])
    op.create_index("ux_categories_name_active", "categories", ["name"], unique=True, postgresql_where=ACTIVE)

    # Questions
    op.create_table(
        "questions",
        *_entity_columns(),
        sa.Column("approval_status", sa.String(8), nullable=False, server_default="PENDING"),
        sa.Column("category_id", sa.String(24), sa.ForeignKey("categories.id"), nullable=False),
        sa.Column("type", sa.String(6), nullable=False),
        sa.Column("difficulty", sa.String(6), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("choices", postgresql.JSONB(), nullable=True),
        sa.Column("answers", postgresql.JSONB(), nullable=True),
        sa.Column("rating_mark_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("rating_average_mark", sa.Float(), nullable=True),
    )
    _owner_indexes("questions")
    op.create_index("ix_questions_category_id", "questions", ["category_id"])
    op.create_index("ux_questions_title_active", "questions", ["title"], unique=True, postgresql_where=ACTIVE)

    # Exams and their question snapshots
    op.create_table(
        "exams",
        *_entity_columns(),
        sa.Column("category_id", sa.String(24), sa.ForeignKey("categories.id"), nullable=False),
        sa.Column("question_number", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("correct_answer_count", sa.Integer(), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
    )
    _owner_indexes("exams")
    op.create_index("ix_exams_category_id", "exams", ["category_id"])

    op.create_table(
        "exam_questions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("exam_id", sa.String(24), sa.ForeignKey("exams.id", ondelete="CASCADE"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("question_id", sa.String(24), sa.ForeignKey("questions.id"), nullable=False),
        sa.Column("choice", sa.Integer(), nullable=True),
        sa.Column("answer", sa.String(255), nullable=True),
    )
    op.create_index("ix_exam_questions_exam_id", "exam_questions", ["exam_id"])

    # Rating marks: one per (creator, target)
    op.create_table(
        "rating_marks",
        *_entity_columns(),
        sa.Column("category_id", sa.String(24), sa.ForeignKey("categories.id"), nullable=True),
        sa.Column("question_id", sa.String(24), sa.ForeignKey("questions.id"), nullable=True),
        sa.Column("mark", sa.Integer(), nullable=False),
        sa.CheckConstraint("mark >= 1 AND mark <= 5", name="ck_rating_marks_mark_range"),
        sa.CheckConstraint("(category_id IS NULL) <> (question_id IS NULL)", name="ck_rating_marks_single_target"),
    )
    _owner_indexes("rating_marks")
    op.create_index("ix_rating_marks_category_id", "rating_marks", ["category_id"])
    op.create_index("ix_rating_marks_question_id", "rating_marks", ["question_id"])
    op.create_index(
        "ux_rating_marks_creator_category",
        "rating_marks",
        ["creator_id", "category_id"],
        unique=True,
        postgresql_where=sa.text("category_id IS NOT NULL"),
    )
    op.create_index(
        "ux_rating_marks_creator_question",
        "rating_marks",
        ["creator_id", "question_id"],
        unique=True,
        postgresql_where=sa.text("question_id IS NOT NULL"),
    )

    # Activities
    op.create_table(
        "activities",
        *_entity_columns(),
        sa.Column("event", sa.String(64), nullable=False),
        sa.Column("category_id", sa.String(24), nullable=True),
        sa.Column("category_name", sa.String(100), nullable=True),
    )
    _owner_indexes("activities")
    op.create_index("ix_activities_event", "activities", ["event"])
    op.create_index("ix_activities_category_id", "activities", ["category_id"])


def downgrade() -> None:
    op.drop_table("activities")
    op.drop_table("rating_marks")
    op.drop_table("exam_questions")
    op.drop_table("exams")
    op.drop_table("questions")
    op.drop_table("categories")
    op.drop_table("users")
