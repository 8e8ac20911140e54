from datetime import datetime
from typing import Dict, List, Optional
import uuid

from sqlalchemy import or_
from sqlalchemy.orm import Session

from adherence_engine.database import dialect_insert
from adherence_engine.models import DailyCompletion

SCORE_COLUMNS = ("nutrition_score", "workout_score", "supplement_score", "lifestyle_score", "daily_score")


def get_daily_completion(db: Session, user_id: str, log_date: str) -> Optional[DailyCompletion]:
    """Get the completion row for a ``YYYY-MM-DD`` user-local date."""
    return db.query(DailyCompletion).filter(
        DailyCompletion.user_id == user_id,
        DailyCompletion.log_date == log_date,
    ).populate_existing().first()

def list_daily_completions(db: Session, user_id: str, start_date: str, end_date: str) -> List[DailyCompletion]:
    """Completions with ``start_date <= log_date <= end_date`` (ISO strings sort by date)."""
    return db.query(DailyCompletion).filter(
        DailyCompletion.user_id == user_id,
        DailyCompletion.log_date >= start_date,
        DailyCompletion.log_date <= end_date,
    ).order_by(DailyCompletion.log_date).all()

def upsert_daily_completion(
    db: Session,
    user_id: str,
    log_date: str,
    scores: Dict[str, Optional[float]],
    now: datetime,
) -> DailyCompletion:
    """
    Insert or overwrite the completion row for (user, date) in one statement.

    The conflict branch only fires when a score actually changed, so
    re-scoring unchanged logs leaves the row (including ``updated_at``)
    untouched. Does not commit.
    """
    table = DailyCompletion.__table__
    values = {column: scores.get(column) for column in SCORE_COLUMNS}
    if values["daily_score"] is None:
        values["daily_score"] = 0.0

    stmt = dialect_insert(db, table).values(
        id=str(uuid.uuid4()),
        user_id=user_id,
        log_date=log_date,
        created_at=now,
        updated_at=now,
        **values,
    )
    changed = or_(*[table.c[column].is_distinct_from(stmt.excluded[column]) for column in SCORE_COLUMNS])
    stmt = stmt.on_conflict_do_update(
        index_elements=[table.c.user_id, table.c.log_date],
        set_={**{column: stmt.excluded[column] for column in SCORE_COLUMNS}, "updated_at": stmt.excluded.updated_at},
        where=changed,
    )
    db.execute(stmt)
    return get_daily_completion(db, user_id, log_date)
