from __future__ import annotations
from datetime import date
from typing import Dict, Optional

from sqlalchemy.orm import Session

from adherence_engine import crud
from adherence_engine.exceptions import UserNotFound
from adherence_engine.models import DailyCompletion, User
from adherence_engine.schemas.plan import PlannedDay, parse_weekly_schedule
from adherence_engine.services.scoring import DayInputs, score_day
from adherence_engine.utils.clock import Clock, resolve_clock
from adherence_engine.utils.logger import get_logger
from adherence_engine.utils.timezone import DateLike, local_day_bounds_utc, parse_day, to_naive_utc

logger = get_logger(__name__)

# streak type -> DailyCompletion column
SCORE_COLUMN_BY_TYPE = {
    "nutrition": "nutrition_score",
    "workout": "workout_score",
    "supplements": "supplement_score",
    "lifestyle": "lifestyle_score",
    "overall": "daily_score",
}


def planned_day_for(db: Session, user_id: str, day: date) -> Optional[PlannedDay]:
    """The active plan's entry for the weekday of ``day``, or None when unplanned."""
    plan = crud.get_active_workout_plan(db, user_id)
    if plan is None:
        return None
    return parse_weekly_schedule(plan.workout_schedule).get(day.weekday())


def load_day_inputs(db: Session, user: User, day: date) -> DayInputs:
    """
    Gather one local day of raw logs for ``user``.

    Meals and workouts are stored with UTC timestamps and selected by the
    UTC range of the user's local day. Database errors propagate so that a
    failed fetch aborts the pass instead of scoring a category as zero.
    """
    start_utc, end_utc = local_day_bounds_utc(day, user.timezone)
    daily_log = crud.get_daily_log(db, user.id, day)
    meals = crud.get_meal_logs_between(db, user.id, start_utc, end_utc)
    workouts = crud.get_workout_logs_between(db, user.id, start_utc, end_utc)
    return DayInputs.from_records(daily_log, meals, workouts, planned_day_for(db, user.id, day))


def scores_to_columns(scores: Dict[str, Optional[float]]) -> Dict[str, Optional[float]]:
    return {SCORE_COLUMN_BY_TYPE[streak_type]: value for streak_type, value in scores.items()}


def compute_and_persist(
    db: Session,
    user_id: str,
    log_date: DateLike,
    clock: Optional[Clock] = None,
    commit: bool = True,
) -> DailyCompletion:
    """
    Score one user-local date and upsert its DailyCompletion row.

    Idempotent: running it twice over unchanged logs leaves the stored row
    untouched. With ``commit=False`` the write stays in the caller's
    transaction.
    """
    clock = resolve_clock(clock)
    day = parse_day(log_date)
    user = crud.get_user(db, user_id)
    if user is None:
        raise UserNotFound(user_id)

    scores = score_day(load_day_inputs(db, user, day))
    logger.debug(f"Scores for {user_id} on {day.isoformat()}: {scores}")

    completion = crud.upsert_daily_completion(
        db, user_id, day.isoformat(), scores_to_columns(scores), to_naive_utc(clock.now())
    )
    if commit:
        db.commit()
    return completion
