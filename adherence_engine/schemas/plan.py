"""
Typed views over the loosely-typed JSON payloads stored with workout plans
and workout logs.
"""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ValidationError

from adherence_engine.utils.logger import get_logger

logger = get_logger(__name__)

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


class RestDay(BaseModel):
    kind: Literal["rest"] = "rest"


class PlannedWorkout(BaseModel):
    kind: Literal["workout"] = "workout"
    workout_id: Optional[str] = None


PlannedDay = Union[RestDay, PlannedWorkout]


class ExerciseCompletion(BaseModel):
    name: str
    sets: Optional[int] = None


def parse_planned_day(entry: Dict[str, Any]) -> PlannedDay:
    """
    An explicit ``isRestDay`` flag decides rest vs. workout. Without the
    flag, an entry is a rest day when it names no workout (or the
    ``"rest"`` placeholder).
    """
    workout_id = entry.get("workoutId") or entry.get("workout_id")
    workout_id = str(workout_id) if workout_id else None
    for flag in ("isRestDay", "is_rest_day"):
        if flag in entry:
            return RestDay() if entry[flag] else PlannedWorkout(workout_id=workout_id)
    if not workout_id or workout_id == "rest":
        return RestDay()
    return PlannedWorkout(workout_id=workout_id)


def _weekday_index(entry: Dict[str, Any]) -> Optional[int]:
    """
    Weekday of a schedule entry (Monday=0). ``day`` may be a name or an
    ISO weekday number (Monday=1 .. Sunday=7); ``dayName`` is the fallback.
    """
    day = entry.get("day")
    if isinstance(day, int) and not isinstance(day, bool):
        if 1 <= day <= 7:
            return day - 1
    elif isinstance(day, str) and day.strip().lower() in WEEKDAYS:
        return WEEKDAYS.index(day.strip().lower())

    day_name = str(entry.get("dayName") or entry.get("day_name") or "").strip().lower()
    if day_name in WEEKDAYS:
        return WEEKDAYS.index(day_name)
    return None


def parse_weekly_schedule(raw: Any) -> Dict[int, PlannedDay]:
    """
    Map weekday index (Monday=0, as ``date.weekday()``) to the planned day.

    Weekdays with no entry are absent from the result; malformed entries
    are skipped.
    """
    if not isinstance(raw, list):
        return {}

    schedule: Dict[int, PlannedDay] = {}
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        weekday = _weekday_index(entry)
        if weekday is None:
            logger.debug(f"Skipping schedule entry with unknown day {entry.get('day')!r}")
            continue
        schedule[weekday] = parse_planned_day(entry)
    return schedule


def parse_exercises(raw: Any) -> List[ExerciseCompletion]:
    if not isinstance(raw, list):
        return []

    exercises: List[ExerciseCompletion] = []
    for item in raw:
        if isinstance(item, str):
            exercises.append(ExerciseCompletion(name=item))
            continue
        if not isinstance(item, dict):
            continue
        sets = item.get("sets")
        if isinstance(sets, list):
            sets = len(sets)
        try:
            exercises.append(ExerciseCompletion(
                name=str(item.get("name") or item.get("exerciseName") or ""),
                sets=sets if isinstance(sets, int) else None,
            ))
        except ValidationError:
            continue
    return [e for e in exercises if e.name]
