import uuid

from sqlalchemy import Column, String, Date, DateTime, Integer, Boolean, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.sql import func
from adherence_engine.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class DailyActivityLog(Base):
    """Raw per-day inputs, one row per user per local calendar day."""
    __tablename__ = "daily_activity_logs"

    id = Column(String, primary_key=True, default=_uuid)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    log_date = Column(Date, nullable=False)  # user-local date

    meals_logged = Column(JSON, nullable=True)  # ["breakfast", "lunch", ...]
    workout_completed = Column(Boolean, nullable=False, default=False)
    nutrition_completed = Column(Boolean, nullable=False, default=False)
    supplements_taken = Column(Boolean, nullable=False, default=False)
    is_rest_day = Column(Boolean, nullable=False, default=False)

    supplement_morning = Column(Boolean, nullable=False, default=False)
    supplement_afternoon = Column(Boolean, nullable=False, default=False)
    supplement_evening = Column(Boolean, nullable=False, default=False)

    # Ordinal 1-5 or null when not logged
    sleep_quality = Column(Integer, nullable=True)
    energy_level = Column(Integer, nullable=True)
    mood_level = Column(Integer, nullable=True)
    water_intake_oz = Column(Integer, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "log_date", name="uq_daily_activity_logs_user_date"),
    )

    def __repr__(self):
        return f"<DailyActivityLog user_id={self.user_id} date={self.log_date}>"


class MealLog(Base):
    __tablename__ = "meal_logs"

    id = Column(String, primary_key=True, default=_uuid)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    meal_type = Column(String, nullable=False)  # breakfast, lunch, dinner, snack
    calories = Column(Integer, nullable=True)
    protein_grams = Column(Integer, nullable=True)
    carbs_grams = Column(Integer, nullable=True)
    fat_grams = Column(Integer, nullable=True)
    logged_at = Column(DateTime, nullable=False, index=True)  # naive UTC

    def __repr__(self):
        return f"<MealLog user_id={self.user_id} type={self.meal_type} at={self.logged_at}>"


class WorkoutLog(Base):
    __tablename__ = "workout_logs"

    id = Column(String, primary_key=True, default=_uuid)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    completed_at = Column(DateTime, nullable=False, index=True)  # naive UTC
    exercises_completed = Column(JSON, nullable=True)  # [{"name": ..., "sets": ...}]
    duration_minutes = Column(Integer, nullable=True)
    difficulty = Column(Integer, nullable=True)

    def __repr__(self):
        return f"<WorkoutLog user_id={self.user_id} at={self.completed_at}>"


class WorkoutPlan(Base):
    __tablename__ = "workout_plans"

    id = Column(String, primary_key=True, default=_uuid)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    # [{"day": "monday", "isRestDay": false, "workoutId": "..."}]
    workout_schedule = Column(JSON, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    def __repr__(self):
        return f"<WorkoutPlan id={self.id} user_id={self.user_id} active={self.is_active}>"


class TrackingPreferences(Base):
    __tablename__ = "tracking_preferences"

    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    track_nutrition = Column(Boolean, nullable=False, default=True)
    track_workouts = Column(Boolean, nullable=False, default=True)
    track_supplements = Column(Boolean, nullable=False, default=True)
    track_lifestyle = Column(Boolean, nullable=False, default=True)
    hydration_goal_oz = Column(Integer, nullable=True)  # 0 disables the water category

    def __repr__(self):
        return f"<TrackingPreferences user_id={self.user_id}>"
