"""
Smart streak monthly view.

Rebuilds the trailing window of per-day breakdowns from raw logs and derives
a current and longest streak from it, independently of the incrementally
maintained ``user_streaks`` rows. The per-day pass rule here is coarser
(percentage of enabled categories that hit their bar), so the two streaks
may disagree; disagreement with the overall streak is logged, never fixed up.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from pydantic import ValidationError
from sqlalchemy.orm import Session

from adherence_engine import crud
from adherence_engine.cache import get_cached_data, set_cached_data, smart_streak_cache_key
from adherence_engine.config import settings
from adherence_engine.exceptions import UserNotFound
from adherence_engine.schemas.plan import RestDay, parse_weekly_schedule
from adherence_engine.schemas.streak import (
    DayBreakdown,
    DayProgress,
    LifestyleBreakdown,
    MonthlyView,
    NutritionBreakdown,
    SupplementBreakdown,
    WaterBreakdown,
    WorkoutBreakdown,
)
from adherence_engine.services.scoring import MAIN_MEALS
from adherence_engine.services.streak_service import StreakState, effective_current_streak
from adherence_engine.utils.clock import Clock, resolve_clock
from adherence_engine.utils.logger import get_logger
from adherence_engine.utils.timezone import (
    local_day_bounds_utc,
    seconds_until_local_midnight,
    to_local_date,
)

logger = get_logger(__name__)


@dataclass
class TrackingSettings:
    workouts: bool = True
    nutrition: bool = True
    supplements: bool = True
    lifestyle: bool = True
    hydration_goal_oz: int = 64

    @property
    def water(self) -> bool:
        return self.hydration_goal_oz > 0

    @classmethod
    def from_row(cls, prefs) -> "TrackingSettings":
        if prefs is None:
            return cls(hydration_goal_oz=settings.DEFAULT_HYDRATION_GOAL_OZ)
        goal = prefs.hydration_goal_oz
        return cls(
            workouts=prefs.track_workouts is not False,
            nutrition=prefs.track_nutrition is not False,
            supplements=prefs.track_supplements is not False,
            lifestyle=prefs.track_lifestyle is not False,
            hydration_goal_oz=settings.DEFAULT_HYDRATION_GOAL_OZ if goal is None else goal,
        )


@dataclass
class DayRecord:
    """Everything logged for one local day, already bucketed by local date."""
    day: date
    daily_log: Any = None
    completion: Any = None
    meals: List[Any] = field(default_factory=list)
    workouts: List[Any] = field(default_factory=list)
    planned_rest: bool = False


def build_breakdown(record: DayRecord, tracking: TrackingSettings) -> DayBreakdown:
    log = record.daily_log
    meal_types = {(m.meal_type or "").lower() for m in record.meals}
    nutrition_score = record.completion.nutrition_score if record.completion is not None else None

    sleep = log is not None and log.sleep_quality is not None
    energy = log is not None and log.energy_level is not None
    mood = log is not None and log.mood_level is not None

    return DayBreakdown(
        workout=WorkoutBreakdown(done=len(record.workouts) > 0, is_rest_day=is_rest_day(record)),
        nutrition=NutritionBreakdown(
            score=round(nutrition_score * 100) if nutrition_score else 0,
            meals_logged=len(record.meals),
            main_meals=sum(1 for meal in MAIN_MEALS if meal in meal_types),
        ),
        supplements=SupplementBreakdown(
            taken=0 if log is None else sum(
                1 for taken in (log.supplement_morning, log.supplement_afternoon, log.supplement_evening) if taken
            ),
        ),
        water=WaterBreakdown(
            current=(log.water_intake_oz or 0) if log is not None else 0,
            goal=tracking.hydration_goal_oz,
        ),
        lifestyle=LifestyleBreakdown(
            sleep_logged=sleep,
            energy_logged=energy,
            mood_logged=mood,
            complete=sleep and energy and mood,
        ),
    )


def is_rest_day(record: DayRecord) -> bool:
    return bool(record.daily_log is not None and record.daily_log.is_rest_day) or record.planned_rest


def day_progress(record: DayRecord, tracking: TrackingSettings, is_today: bool) -> DayProgress:
    """
    Percentage of enabled categories that hit their bar. A category only
    counts toward the total when it has data, except on today where every
    enabled category counts.
    """
    breakdown = build_breakdown(record, tracking)
    rest = breakdown.workout.is_rest_day

    # (enabled, has data, passed)
    categories = [
        (tracking.workouts, rest or breakdown.workout.done, rest or breakdown.workout.done),
        (tracking.nutrition, breakdown.nutrition.meals_logged > 0, breakdown.nutrition.meals_logged > 0),
        (tracking.supplements, breakdown.supplements.taken > 0,
         breakdown.supplements.taken >= breakdown.supplements.total),
        (tracking.water, breakdown.water.current > 0, breakdown.water.current >= breakdown.water.goal),
        (tracking.lifestyle,
         breakdown.lifestyle.sleep_logged or breakdown.lifestyle.energy_logged or breakdown.lifestyle.mood_logged,
         breakdown.lifestyle.complete),
    ]

    total = 0
    completed = 0
    has_data = False
    for enabled, category_has_data, passed in categories:
        if not enabled:
            continue
        has_data = has_data or category_has_data
        if is_today or category_has_data:
            total += 1
            if passed:
                completed += 1

    return DayProgress(
        date=record.day.isoformat(),
        percentage=round(completed / total * 100) if total else 0,
        is_rest_day=rest,
        has_data=has_data,
        breakdown=breakdown,
    )


def day_qualifies(progress: DayProgress, pass_percent: int) -> bool:
    return progress.percentage >= pass_percent or progress.is_rest_day


def window_streaks(progress: List[DayProgress], today: date, pass_percent: int):
    """
    (current, longest) over a chronological window ending on ``today``.

    Today adds to the current streak when it already qualifies and only
    breaks it once it has data and fails; otherwise the walk stops at the
    first earlier day that fails.
    """
    current = 0
    index = len(progress) - 1
    if index >= 0 and progress[index].date == today.isoformat():
        today_progress = progress[index]
        index -= 1
        if day_qualifies(today_progress, pass_percent):
            current += 1
        elif today_progress.has_data:
            # evaluated and failed
            index = -1
    while index >= 0 and day_qualifies(progress[index], pass_percent):
        current += 1
        index -= 1

    longest = 0
    run = 0
    for day in progress:
        if day_qualifies(day, pass_percent):
            run += 1
            longest = max(longest, run)
        else:
            run = 0
    return current, longest


def build_monthly_view(
    records: List[DayRecord],
    today: date,
    tracking: TrackingSettings,
    pass_percent: int = 50,
) -> MonthlyView:
    """Pure assembly of the view from chronologically ordered day records."""
    progress = [day_progress(record, tracking, record.day == today) for record in records]
    current, longest = window_streaks(progress, today, pass_percent)
    today_progress = next((p for p in progress if p.date == today.isoformat()), None)
    return MonthlyView(
        current_streak=current,
        longest_streak=longest,
        monthly_progress=progress,
        today_breakdown=today_progress.breakdown if today_progress else None,
    )


def _rest_weekdays(db: Session, user_id: str) -> set:
    plan = crud.get_active_workout_plan(db, user_id)
    if plan is None:
        return set()
    schedule = parse_weekly_schedule(plan.workout_schedule)
    return {weekday for weekday, planned in schedule.items() if isinstance(planned, RestDay)}


def load_day_records(db: Session, user_id: str, tz_name: str, today: date, window_days: int) -> List[DayRecord]:
    """One record per local day in ``[today - window_days + 1, today]``."""
    start = today - timedelta(days=window_days - 1)
    start_utc, _ = local_day_bounds_utc(start, tz_name)
    _, end_utc = local_day_bounds_utc(today, tz_name)

    records: Dict[date, DayRecord] = {}
    rest_weekdays = _rest_weekdays(db, user_id)
    for offset in range(window_days):
        day = start + timedelta(days=offset)
        records[day] = DayRecord(day=day, planned_rest=day.weekday() in rest_weekdays)

    for log in crud.list_daily_logs(db, user_id, start, today):
        records[log.log_date].daily_log = log
    for completion in crud.list_daily_completions(db, user_id, start.isoformat(), today.isoformat()):
        record = records.get(date.fromisoformat(completion.log_date))
        if record is not None:
            record.completion = completion
    for meal in crud.get_meal_logs_between(db, user_id, start_utc, end_utc):
        records[to_local_date(meal.logged_at, tz_name)].meals.append(meal)
    for workout in crud.get_workout_logs_between(db, user_id, start_utc, end_utc):
        records[to_local_date(workout.completed_at, tz_name)].workouts.append(workout)

    return [records[day] for day in sorted(records)]


def _log_divergence(db: Session, user_id: str, view: MonthlyView, today: date) -> None:
    overall = StreakState.from_row(crud.get_user_streak(db, user_id, "overall"))
    incremental = effective_current_streak(overall, today, settings.STREAK_GRACE_DAYS)
    if incremental != view.current_streak:
        logger.warning(
            f"Smart streak for {user_id} diverges from overall streak: "
            f"window={view.current_streak} incremental={incremental}"
        )


def get_smart_streak_data(
    db: Session,
    user_id: str,
    timezone: Optional[str] = None,
    clock: Optional[Clock] = None,
    use_cache: bool = True,
) -> MonthlyView:
    """
    Monthly view for the user's local today, cached until local midnight.

    ``timezone`` overrides the stored user timezone (e.g. the device's
    current zone).
    """
    clock = resolve_clock(clock)
    user = crud.get_user(db, user_id)
    if user is None:
        raise UserNotFound(user_id)

    tz_name = timezone or user.timezone or settings.DEFAULT_TIMEZONE
    cache_key = smart_streak_cache_key(user_id, tz_name)
    if use_cache:
        cached = get_cached_data(cache_key)
        if cached is not None:
            try:
                return MonthlyView.model_validate(cached)
            except ValidationError:
                logger.warning(f"Discarding malformed cached smart streak for {user_id}")

    now = clock.now()
    today = to_local_date(now, tz_name)
    records = load_day_records(db, user_id, tz_name, today, settings.MONTHLY_WINDOW_DAYS)
    tracking = TrackingSettings.from_row(crud.get_tracking_preferences(db, user_id))
    view = build_monthly_view(records, today, tracking, settings.SMART_STREAK_PASS_PERCENT)

    _log_divergence(db, user_id, view, today)

    if use_cache:
        set_cached_data(cache_key, view.model_dump(mode="json"), seconds_until_local_midnight(now, tz_name))
    return view
