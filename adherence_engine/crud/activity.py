from datetime import date, datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from adherence_engine.models import (
    DailyActivityLog, MealLog, WorkoutLog, WorkoutPlan, TrackingPreferences
)


def get_daily_log(db: Session, user_id: str, log_date: date) -> Optional[DailyActivityLog]:
    """Get the daily log for one user-local date."""
    return db.query(DailyActivityLog).filter(
        DailyActivityLog.user_id == user_id,
        DailyActivityLog.log_date == log_date,
    ).first()

def list_daily_logs(db: Session, user_id: str, start_date: date, end_date: date) -> List[DailyActivityLog]:
    """Daily logs with ``start_date <= log_date <= end_date``."""
    return db.query(DailyActivityLog).filter(
        DailyActivityLog.user_id == user_id,
        DailyActivityLog.log_date >= start_date,
        DailyActivityLog.log_date <= end_date,
    ).order_by(DailyActivityLog.log_date).all()

def get_meal_logs_between(db: Session, user_id: str, start_utc: datetime, end_utc: datetime) -> List[MealLog]:
    """Meals logged in the naive UTC range ``[start_utc, end_utc)``."""
    return db.query(MealLog).filter(
        MealLog.user_id == user_id,
        MealLog.logged_at >= start_utc,
        MealLog.logged_at < end_utc,
    ).order_by(MealLog.logged_at).all()

def get_workout_logs_between(db: Session, user_id: str, start_utc: datetime, end_utc: datetime) -> List[WorkoutLog]:
    """Workouts completed in the naive UTC range ``[start_utc, end_utc)``."""
    return db.query(WorkoutLog).filter(
        WorkoutLog.user_id == user_id,
        WorkoutLog.completed_at >= start_utc,
        WorkoutLog.completed_at < end_utc,
    ).order_by(WorkoutLog.completed_at).all()

def get_active_workout_plan(db: Session, user_id: str) -> Optional[WorkoutPlan]:
    """Most recently created active plan."""
    return db.query(WorkoutPlan).filter(
        WorkoutPlan.user_id == user_id,
        WorkoutPlan.is_active.is_(True),
    ).order_by(WorkoutPlan.created_at.desc()).first()

def get_tracking_preferences(db: Session, user_id: str) -> Optional[TrackingPreferences]:
    return db.query(TrackingPreferences).filter(TrackingPreferences.user_id == user_id).first()
