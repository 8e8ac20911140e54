"""
Incrementally maintained category streaks.

``decide_streak`` is the decision table, a pure function of the prior state
and one day's score. Reads never write: a stale counter is reported as an
effective streak of 0 and is only zeroed in storage by ``run_decay``.
"""
from __future__ import annotations
from dataclasses import dataclass, replace
from datetime import date, timedelta
from typing import Dict, Optional

from sqlalchemy.orm import Session

from adherence_engine import crud
from adherence_engine.config import STREAK_TYPES, settings
from adherence_engine.models import UserStreak
from adherence_engine.schemas.streak import StreakResponse
from adherence_engine.utils.clock import Clock, resolve_clock
from adherence_engine.utils.logger import get_logger
from adherence_engine.utils.timezone import to_local_date, to_naive_utc

logger = get_logger(__name__)


@dataclass(frozen=True)
class StreakState:
    current_streak: int = 0
    longest_streak: int = 0
    last_logged_date: Optional[date] = None
    last_completed_date: Optional[date] = None

    @classmethod
    def from_row(cls, row: Optional[UserStreak]) -> Optional["StreakState"]:
        if row is None:
            return None
        return cls(
            current_streak=row.current_streak or 0,
            longest_streak=row.longest_streak or 0,
            last_logged_date=row.last_logged_date,
            last_completed_date=row.last_completed_date,
        )


def threshold_for(streak_type: str) -> float:
    return settings.STREAK_THRESHOLDS[streak_type]


def decide_streak(
    prior: Optional[StreakState],
    score: float,
    log_date: date,
    threshold: float,
    grace_days: int = 2,
) -> StreakState:
    """
    Apply one day's score to a category streak.

    A passing day within ``grace_days`` of the last completed day extends
    the streak; a longer gap restarts it at 1. A failing day only resets
    the counter once the last completion is more than a day stale.
    Scores for dates before the last completed day hold the counter.
    """
    passed = score is not None and score >= threshold

    if prior is None:
        if passed:
            return StreakState(1, 1, log_date, log_date)
        return StreakState(0, 0, log_date, None)

    current = prior.current_streak
    last_completed = prior.last_completed_date

    if passed:
        if last_completed is None:
            current = 1
            last_completed = log_date
        elif log_date > last_completed:
            gap = (log_date - last_completed).days
            current = current + 1 if gap <= grace_days else 1
            last_completed = log_date
        # log_date == last_completed is a re-score; earlier dates are late data
    elif last_completed is None or last_completed < log_date - timedelta(days=1):
        current = 0

    last_logged = max(d for d in (prior.last_logged_date, log_date) if d is not None)
    return replace(
        prior,
        current_streak=current,
        longest_streak=max(prior.longest_streak, current),
        last_logged_date=last_logged,
        last_completed_date=last_completed,
    )


def effective_current_streak(state: Optional[StreakState], today: date, grace_days: int = 2) -> int:
    """What the counter reads as today, without writing the decay."""
    if state is None or state.last_completed_date is None:
        return 0
    if (today - state.last_completed_date).days > grace_days:
        return 0
    return state.current_streak


def update_category_streak(
    db: Session,
    user_id: str,
    streak_type: str,
    score: Optional[float],
    log_date: date,
    threshold: Optional[float] = None,
    clock: Optional[Clock] = None,
) -> UserStreak:
    """
    Read-modify-write one streak row. Does not commit; the caller holds the
    ``streak:<user>:<type>`` lock for the whole transaction.
    """
    clock = resolve_clock(clock)
    if threshold is None:
        threshold = threshold_for(streak_type)

    prior = StreakState.from_row(crud.get_user_streak(db, user_id, streak_type, for_update=True))
    state = decide_streak(prior, score, log_date, threshold, settings.STREAK_GRACE_DAYS)

    if prior is not None and state.current_streak < prior.current_streak:
        logger.info(f"{streak_type} streak for {user_id} reset from {prior.current_streak} to {state.current_streak}")

    return crud.save_streak_state(
        db,
        user_id,
        streak_type,
        state.current_streak,
        state.longest_streak,
        state.last_logged_date,
        state.last_completed_date,
        to_naive_utc(clock.now()),
    )


def update_streaks_for_day(
    db: Session,
    user_id: str,
    scores: Dict[str, Optional[float]],
    log_date: date,
    clock: Optional[Clock] = None,
) -> Dict[str, UserStreak]:
    """Apply a scored day to every applicable streak. A null workout score leaves the workout streak alone."""
    updated: Dict[str, UserStreak] = {}
    for streak_type in STREAK_TYPES:
        score = scores.get(streak_type)
        if score is None:
            continue
        updated[streak_type] = update_category_streak(db, user_id, streak_type, score, log_date, clock=clock)
    return updated


def to_response(row: UserStreak, today: date) -> StreakResponse:
    state = StreakState.from_row(row)
    return StreakResponse(
        streak_type=row.streak_type,
        current_streak=row.current_streak,
        longest_streak=row.longest_streak,
        last_logged_date=row.last_logged_date,
        last_completed_date=row.last_completed_date,
        effective_streak=effective_current_streak(state, today, settings.STREAK_GRACE_DAYS),
    )


def get_user_streak(
    db: Session,
    user_id: str,
    streak_type: str,
    clock: Optional[Clock] = None,
) -> Optional[StreakResponse]:
    """Pure read: a stale streak comes back with ``effective_streak`` 0 but is not rewritten."""
    clock = resolve_clock(clock)
    row = crud.get_user_streak(db, user_id, streak_type)
    if row is None:
        return None
    user = crud.get_user(db, user_id)
    today = to_local_date(clock.now(), user.timezone if user else None)
    return to_response(row, today)


def run_decay(db: Session, clock: Optional[Clock] = None) -> int:
    """
    Zero every streak whose last completion fell out of the grace window.

    Users are grouped by timezone so each group is compared against its own
    local today. Set-based and idempotent. Does not commit.
    """
    clock = resolve_clock(clock)
    now = clock.now()
    decayed = 0
    for tz_name, user_ids in crud.user_ids_by_timezone(db).items():
        today = to_local_date(now, tz_name)
        cutoff = today - timedelta(days=settings.STREAK_GRACE_DAYS)
        count = crud.decay_stale_streaks(db, user_ids, cutoff, to_naive_utc(now))
        if count:
            logger.info(f"Decayed {count} streaks for timezone {tz_name or settings.DEFAULT_TIMEZONE} (cutoff {cutoff})")
        decayed += count
    return decayed
