from adherence_engine.database import Base
from adherence_engine.models.user import User
from adherence_engine.models.activity import (
    DailyActivityLog, MealLog, WorkoutLog, WorkoutPlan, TrackingPreferences
)
from adherence_engine.models.daily_completion import DailyCompletion
from adherence_engine.models.user_streak import UserStreak

__all__ = [
    "Base", "User", "DailyActivityLog", "MealLog", "WorkoutLog", "WorkoutPlan",
    "TrackingPreferences", "DailyCompletion", "UserStreak"
]
