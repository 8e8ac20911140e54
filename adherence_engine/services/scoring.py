"""
Category scorers: reduce one user-local day of raw logs to 0.0-1.0 scores.

All functions here are pure. ``DayInputs`` is assembled from persisted rows
by the completion service; the scorers never touch the database.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set

from adherence_engine.config import WEIGHTS_WITH_WORKOUT, WEIGHTS_WITHOUT_WORKOUT
from adherence_engine.schemas.plan import ExerciseCompletion, PlannedDay, RestDay, parse_exercises

MAIN_MEALS = ("breakfast", "lunch", "dinner")
CALORIE_RANGE = (1500, 3000)
LIFESTYLE_WATER_BONUS_OZ = 64


@dataclass
class DayInputs:
    has_daily_log: bool = False
    meal_types: Set[str] = field(default_factory=set)
    meal_count: int = 0
    total_calories: int = 0
    workout_logged: bool = False
    exercises: List[ExerciseCompletion] = field(default_factory=list)
    planned_day: Optional[PlannedDay] = None
    marked_rest_day: bool = False
    supplement_doses: int = 0
    sleep_quality: Optional[int] = None
    energy_level: Optional[int] = None
    mood_level: Optional[int] = None
    water_intake_oz: int = 0

    @classmethod
    def from_records(cls, daily_log, meals: Iterable, workouts: Iterable, planned_day: Optional[PlannedDay]) -> "DayInputs":
        meals = list(meals)
        workouts = list(workouts)
        exercises: List[ExerciseCompletion] = []
        for workout in workouts:
            exercises.extend(parse_exercises(workout.exercises_completed))

        inputs = cls(
            has_daily_log=daily_log is not None,
            meal_types={(m.meal_type or "").lower() for m in meals},
            meal_count=len(meals),
            total_calories=sum(m.calories or 0 for m in meals),
            workout_logged=len(workouts) > 0,
            exercises=exercises,
            planned_day=planned_day,
        )
        if daily_log is not None:
            inputs.marked_rest_day = bool(daily_log.is_rest_day)
            inputs.supplement_doses = sum(
                1 for taken in (daily_log.supplement_morning, daily_log.supplement_afternoon, daily_log.supplement_evening)
                if taken
            )
            inputs.sleep_quality = daily_log.sleep_quality
            inputs.energy_level = daily_log.energy_level
            inputs.mood_level = daily_log.mood_level
            inputs.water_intake_oz = daily_log.water_intake_oz or 0
        return inputs

    @property
    def is_rest_day(self) -> bool:
        return self.marked_rest_day or isinstance(self.planned_day, RestDay)

    @property
    def distinct_exercises(self) -> int:
        return len({e.name.strip().lower() for e in self.exercises})


def nutrition_score(inputs: DayInputs) -> float:
    if not inputs.has_daily_log and inputs.meal_count == 0:
        return 0.0
    score = 0.25 * sum(1 for meal in MAIN_MEALS if meal in inputs.meal_types)
    if "snack" in inputs.meal_types:
        score += 0.10
    if CALORIE_RANGE[0] <= inputs.total_calories <= CALORIE_RANGE[1]:
        score += 0.15
    return round(min(score, 1.0), 2)


def workout_score(inputs: DayInputs) -> Optional[float]:
    """None when no plan entry exists for the weekday and nothing was logged."""
    if inputs.is_rest_day:
        return 1.0
    if inputs.planned_day is None and not inputs.workout_logged:
        return None
    count = inputs.distinct_exercises
    if count >= 6:
        return 1.0
    if count >= 4:
        return 0.75
    if count >= 2:
        return 0.50
    if count >= 1:
        return 0.25
    return 0.0


def supplement_score(inputs: DayInputs) -> float:
    if not inputs.has_daily_log:
        return 0.0
    return round(inputs.supplement_doses / 3, 2)


def lifestyle_score(inputs: DayInputs) -> float:
    # Presence of an entry counts, not its value
    score = 0.0
    if inputs.sleep_quality is not None:
        score += 0.33
    if inputs.energy_level is not None:
        score += 0.33
    if inputs.mood_level is not None:
        score += 0.34
    if inputs.water_intake_oz >= LIFESTYLE_WATER_BONUS_OZ:
        score += 0.10
    return round(min(score, 1.0), 2)


def overall_score(scores: Dict[str, Optional[float]]) -> float:
    """
    Weighted mean over the applicable (non-null) categories, with weights
    re-normalized to sum to 1.
    """
    preset = WEIGHTS_WITHOUT_WORKOUT if scores.get("workout") is None else WEIGHTS_WITH_WORKOUT
    applicable = {k: w for k, w in preset.items() if scores.get(k) is not None}
    total_weight = sum(applicable.values())
    if total_weight == 0:
        return 0.0
    weighted = sum(scores[k] * w for k, w in applicable.items())
    return round(min(max(weighted / total_weight, 0.0), 1.0), 2)


def score_day(inputs: DayInputs) -> Dict[str, Optional[float]]:
    """All four category scores plus the overall score, keyed by streak type."""
    scores: Dict[str, Optional[float]] = {
        "nutrition": nutrition_score(inputs),
        "workout": workout_score(inputs),
        "supplements": supplement_score(inputs),
        "lifestyle": lifestyle_score(inputs),
    }
    scores["overall"] = overall_score(scores)
    return scores
