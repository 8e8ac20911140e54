from adherence_engine.schemas.plan import (
    RestDay, PlannedWorkout, PlannedDay, ExerciseCompletion,
    parse_weekly_schedule, parse_exercises
)
from adherence_engine.schemas.streak import (
    StreakResponse, DailyCompletionResponse, StreakSummary,
    WorkoutBreakdown, NutritionBreakdown, SupplementBreakdown, WaterBreakdown, LifestyleBreakdown,
    DayBreakdown, DayProgress, MonthlyView,
    StreakRewards, StreakDiscount, DiscountTier, DiscountTierCatalogue
)

__all__ = [
    "RestDay", "PlannedWorkout", "PlannedDay", "ExerciseCompletion",
    "parse_weekly_schedule", "parse_exercises",
    "StreakResponse", "DailyCompletionResponse", "StreakSummary",
    "WorkoutBreakdown", "NutritionBreakdown", "SupplementBreakdown", "WaterBreakdown", "LifestyleBreakdown",
    "DayBreakdown", "DayProgress", "MonthlyView",
    "StreakRewards", "StreakDiscount", "DiscountTier", "DiscountTierCatalogue"
]
