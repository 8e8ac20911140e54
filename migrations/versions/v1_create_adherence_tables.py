"""Create adherence engine schema

Revision ID: v1
Revises:
Create Date: 2026-10-18 00:00:00

Users with reorder lifecycle fields, raw activity logs, tracking
preferences, daily completions and per-category streaks
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'v1'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("timezone", sa.String(), nullable=True),

        # Reorder lifecycle
        sa.Column("last_order_date", sa.DateTime(), nullable=True),
        sa.Column("reorder_window_start", sa.DateTime(), nullable=True),
        sa.Column("reorder_deadline", sa.DateTime(), nullable=True),
        sa.Column("streak_status", sa.String(), nullable=False, server_default="building"),
        sa.Column("streak_discount_earned", sa.Integer(), nullable=False, server_default='0'),
        sa.Column("streak_current_days", sa.Integer(), nullable=False, server_default='0'),

        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)
    op.create_index(op.f("ix_users_reorder_window_start"), "users", ["reorder_window_start"], unique=False)
    op.create_index(op.f("ix_users_reorder_deadline"), "users", ["reorder_deadline"], unique=False)

    op.create_table(
        "daily_activity_logs",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("log_date", sa.Date(), nullable=False),
        sa.Column("meals_logged", sa.JSON(), nullable=True),
        sa.Column("workout_completed", sa.Boolean(), nullable=False, server_default='false'),
        sa.Column("nutrition_completed", sa.Boolean(), nullable=False, server_default='false'),
        sa.Column("supplements_taken", sa.Boolean(), nullable=False, server_default='false'),
        sa.Column("is_rest_day", sa.Boolean(), nullable=False, server_default='false'),
        sa.Column("supplement_morning", sa.Boolean(), nullable=False, server_default='false'),
        sa.Column("supplement_afternoon", sa.Boolean(), nullable=False, server_default='false'),
        sa.Column("supplement_evening", sa.Boolean(), nullable=False, server_default='false'),
        sa.Column("sleep_quality", sa.Integer(), nullable=True),
        sa.Column("energy_level", sa.Integer(), nullable=True),
        sa.Column("mood_level", sa.Integer(), nullable=True),
        sa.Column("water_intake_oz", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "log_date", name="uq_daily_activity_logs_user_date"),
    )
    op.create_index(op.f("ix_daily_activity_logs_user_id"), "daily_activity_logs", ["user_id"], unique=False)

    op.create_table(
        "meal_logs",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("meal_type", sa.String(), nullable=False),
        sa.Column("calories", sa.Integer(), nullable=True),
        sa.Column("protein_grams", sa.Integer(), nullable=True),
        sa.Column("carbs_grams", sa.Integer(), nullable=True),
        sa.Column("fat_grams", sa.Integer(), nullable=True),
        sa.Column("logged_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_meal_logs_user_id"), "meal_logs", ["user_id"], unique=False)
    op.create_index(op.f("ix_meal_logs_logged_at"), "meal_logs", ["logged_at"], unique=False)

    op.create_table(
        "workout_logs",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("completed_at", sa.DateTime(), nullable=False),
        sa.Column("exercises_completed", sa.JSON(), nullable=True),
        sa.Column("duration_minutes", sa.Integer(), nullable=True),
        sa.Column("difficulty", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_workout_logs_user_id"), "workout_logs", ["user_id"], unique=False)
    op.create_index(op.f("ix_workout_logs_completed_at"), "workout_logs", ["completed_at"], unique=False)

    op.create_table(
        "workout_plans",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default='true'),
        sa.Column("workout_schedule", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_workout_plans_user_id"), "workout_plans", ["user_id"], unique=False)

    op.create_table(
        "tracking_preferences",
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("track_nutrition", sa.Boolean(), nullable=False, server_default='true'),
        sa.Column("track_workouts", sa.Boolean(), nullable=False, server_default='true'),
        sa.Column("track_supplements", sa.Boolean(), nullable=False, server_default='true'),
        sa.Column("track_lifestyle", sa.Boolean(), nullable=False, server_default='true'),
        sa.Column("hydration_goal_oz", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id"),
    )

    op.create_table(
        "daily_completions",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("log_date", sa.String(10), nullable=False),
        sa.Column("nutrition_score", sa.Float(), nullable=True),
        sa.Column("workout_score", sa.Float(), nullable=True),
        sa.Column("supplement_score", sa.Float(), nullable=True),
        sa.Column("lifestyle_score", sa.Float(), nullable=True),
        sa.Column("daily_score", sa.Float(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "log_date", name="uq_daily_completions_user_date"),
    )
    op.create_index(op.f("ix_daily_completions_user_id"), "daily_completions", ["user_id"], unique=False)

    op.create_table(
        "user_streaks",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("streak_type", sa.String(), nullable=False),
        sa.Column("current_streak", sa.Integer(), nullable=False, server_default='0'),
        sa.Column("longest_streak", sa.Integer(), nullable=False, server_default='0'),
        sa.Column("last_logged_date", sa.Date(), nullable=True),
        sa.Column("last_completed_date", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "streak_type", name="uq_user_streaks_user_type"),
    )
    op.create_index(op.f("ix_user_streaks_user_id"), "user_streaks", ["user_id"], unique=False)


def downgrade() -> None:
    op.drop_table("user_streaks")
    op.drop_table("daily_completions")
    op.drop_table("tracking_preferences")
    op.drop_table("workout_plans")
    op.drop_table("workout_logs")
    op.drop_table("meal_logs")
    op.drop_table("daily_activity_logs")
    op.drop_table("users")
