from __future__ import annotations
from datetime import date, datetime
from typing import List, Optional
import uuid

from sqlalchemy import or_, update
from sqlalchemy.orm import Session

from adherence_engine.database import dialect_insert
from adherence_engine.models import UserStreak

STATE_COLUMNS = ("current_streak", "longest_streak", "last_logged_date", "last_completed_date")


def get_user_streak(db: Session, user_id: str, streak_type: str, for_update: bool = False) -> Optional[UserStreak]:
    """
    Read one streak row without side effects.

    ``for_update`` takes a row lock on PostgreSQL for the read-modify-write
    in the streak updater; SQLite ignores it.
    """
    query = db.query(UserStreak).filter(
        UserStreak.user_id == user_id,
        UserStreak.streak_type == streak_type,
    ).populate_existing()
    if for_update:
        query = query.with_for_update()
    return query.first()

def get_all_user_streaks(db: Session, user_id: str) -> List[UserStreak]:
    return db.query(UserStreak).filter(UserStreak.user_id == user_id).all()

def save_streak_state(
    db: Session,
    user_id: str,
    streak_type: str,
    current_streak: int,
    longest_streak: int,
    last_logged_date: Optional[date],
    last_completed_date: Optional[date],
    now: datetime,
) -> UserStreak:
    """
    Upsert a streak row keyed by (user, streak_type). Unchanged state is
    not rewritten. Does not commit.
    """
    table = UserStreak.__table__
    stmt = dialect_insert(db, table).values(
        id=str(uuid.uuid4()),
        user_id=user_id,
        streak_type=streak_type,
        current_streak=current_streak,
        longest_streak=longest_streak,
        last_logged_date=last_logged_date,
        last_completed_date=last_completed_date,
        created_at=now,
        updated_at=now,
    )
    changed = or_(*[table.c[column].is_distinct_from(stmt.excluded[column]) for column in STATE_COLUMNS])
    stmt = stmt.on_conflict_do_update(
        index_elements=[table.c.user_id, table.c.streak_type],
        set_={**{column: stmt.excluded[column] for column in STATE_COLUMNS}, "updated_at": stmt.excluded.updated_at},
        where=changed,
    )
    db.execute(stmt)
    return get_user_streak(db, user_id, streak_type)

def decay_stale_streaks(db: Session, user_ids: List[str], completed_before: date, now: datetime) -> int:
    """
    Zero ``current_streak`` for rows whose last completion is older than
    ``completed_before``. Rows already at zero are not touched, so a rerun
    writes nothing. Does not commit.
    """
    if not user_ids:
        return 0
    result = db.execute(
        update(UserStreak)
        .where(
            UserStreak.user_id.in_(user_ids),
            UserStreak.current_streak > 0,
            UserStreak.last_completed_date < completed_before,
        )
        .values(current_streak=0, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount or 0
