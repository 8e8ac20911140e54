"""
Entry points of the adherence engine.

``on_log_written`` is called by the log-writing endpoints after any meal,
workout or daily-log mutation. The sweeps are called by an external
scheduler (see ``adherence_engine.jobs``). Each call is one transaction.
"""
from __future__ import annotations
from contextlib import ExitStack
from typing import Dict, Optional

from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.orm import Session

from adherence_engine import crud
from adherence_engine.cache import invalidate_smart_streak
from adherence_engine.config import STREAK_TYPES
from adherence_engine.exceptions import ConcurrencyConflict, PersistenceUnavailable, UserNotFound
from adherence_engine.locks import completion_lock_key, engine_lock, streak_lock_key
from adherence_engine.models import DailyCompletion
from adherence_engine.schemas.streak import DailyCompletionResponse, StreakSummary
from adherence_engine.services.completion_service import SCORE_COLUMN_BY_TYPE, compute_and_persist
from adherence_engine.services.reorder_service import refresh_accrual, reset_streak_for_lapsed_users, update_streak_statuses
from adherence_engine.services.streak_service import run_decay, to_response, update_streaks_for_day
from adherence_engine.utils.clock import Clock, resolve_clock
from adherence_engine.utils.logger import get_logger, trace_context
from adherence_engine.utils.timezone import DateLike, parse_day, to_local_date

logger = get_logger(__name__)

MAX_ATTEMPTS = 2


def _scoring_pass(db: Session, user_id: str, log_date: DateLike, clock: Clock) -> DailyCompletion:
    day = parse_day(log_date)
    with ExitStack() as locks:
        locks.enter_context(engine_lock(completion_lock_key(user_id, day.isoformat())))
        for streak_type in STREAK_TYPES:
            locks.enter_context(engine_lock(streak_lock_key(user_id, streak_type)))

        completion = compute_and_persist(db, user_id, day, clock=clock, commit=False)
        scores = {streak_type: getattr(completion, column) for streak_type, column in SCORE_COLUMN_BY_TYPE.items()}
        update_streaks_for_day(db, user_id, scores, day, clock=clock)

        user = crud.get_user(db, user_id)
        refresh_accrual(db, user, clock)

        db.commit()
        return completion


def on_log_written(db: Session, user_id: str, log_date: DateLike, clock: Optional[Clock] = None) -> DailyCompletion:
    """
    Re-score ``log_date`` (user-local) for ``user_id`` and update the
    affected streaks.

    Raises:
        ConcurrencyConflict: still locked after one retry
        PersistenceUnavailable: the database could not be reached; nothing was committed
        UserNotFound: unknown user
    """
    clock = resolve_clock(clock)
    day = parse_day(log_date)

    with trace_context("log", trace_id=f"log-{user_id}-{day.isoformat()}"):
        for attempt in range(1, MAX_ATTEMPTS + 1):
            try:
                completion = _scoring_pass(db, user_id, day, clock)
                break
            except ConcurrencyConflict as e:
                db.rollback()
                if attempt < MAX_ATTEMPTS:
                    logger.warning(f"Concurrent write on {e.key}, retrying with fresh reads")
                    continue
                logger.error(f"Giving up scoring {user_id} on {day.isoformat()}: {e}")
                raise
            except (OperationalError, DBAPIError) as e:
                db.rollback()
                logger.exception(f"Persistence failure while scoring {user_id} on {day.isoformat()}")
                raise PersistenceUnavailable(str(e)) from e
            except Exception:
                db.rollback()
                raise

        invalidate_smart_streak(user_id)
        logger.info(f"Scored {user_id} on {day.isoformat()}: daily_score={completion.daily_score}")
        return completion


def get_streak_summary(db: Session, user_id: str, clock: Optional[Clock] = None) -> StreakSummary:
    """All streak rows with their effective values, plus today's completion."""
    clock = resolve_clock(clock)
    user = crud.get_user(db, user_id)
    if user is None:
        raise UserNotFound(user_id)

    today = to_local_date(clock.now(), user.timezone)
    streaks = {row.streak_type: to_response(row, today) for row in crud.get_all_user_streaks(db, user_id)}
    completion = crud.get_daily_completion(db, user_id, today.isoformat())
    return StreakSummary(
        user_id=user_id,
        today_local_date=today,
        streaks=streaks,
        today_completion=DailyCompletionResponse.model_validate(completion) if completion else None,
    )


def _run_sweep(db: Session, name: str, sweep):
    with trace_context(f"sweep-{name}"):
        try:
            result = sweep()
            db.commit()
        except (OperationalError, DBAPIError) as e:
            db.rollback()
            logger.exception(f"{name} sweep aborted: database unavailable")
            raise PersistenceUnavailable(str(e)) from e
        except Exception:
            db.rollback()
            logger.exception(f"{name} sweep aborted")
            raise
        logger.info(f"{name} sweep finished: {result}")
        return result


def run_daily_status_sweep(db: Session, clock: Optional[Clock] = None) -> Dict[str, int]:
    return _run_sweep(db, "status", lambda: update_streak_statuses(db, clock))


def run_lapse_sweep(db: Session, clock: Optional[Clock] = None) -> int:
    return _run_sweep(db, "lapse", lambda: reset_streak_for_lapsed_users(db, clock))


def run_decay_sweep(db: Session, clock: Optional[Clock] = None) -> int:
    return _run_sweep(db, "decay", lambda: run_decay(db, clock))
