from datetime import datetime, timedelta
from typing import Dict, List, Optional

from sqlalchemy import and_, func, or_, update
from sqlalchemy.orm import Session

from adherence_engine.models import User


def get_user(db: Session, user_id: str) -> Optional[User]:
    """Get a user by ID."""
    return db.query(User).filter(User.id == user_id).populate_existing().first()

def user_ids_by_timezone(db: Session) -> Dict[Optional[str], List[str]]:
    """Group all user IDs by their stored timezone name."""
    groups: Dict[Optional[str], List[str]] = {}
    for user_id, tz_name in db.query(User.id, User.timezone).all():
        groups.setdefault(tz_name, []).append(user_id)
    return groups

def update_streak_accrual(db: Session, user: User, streak_days: int, discount: int) -> bool:
    """Mirror the tier streak onto the user. Returns True when a field changed. Does not commit."""
    if user.streak_current_days == streak_days and user.streak_discount_earned == discount:
        return False
    user.streak_current_days = streak_days
    user.streak_discount_earned = discount
    return True

def start_reorder_window(db: Session, user: User, now: datetime, window_days: int, deadline_days: int) -> User:
    """Stamp an order and open the next reorder window. Does not commit."""
    user.last_order_date = now
    user.reorder_window_start = now + timedelta(days=window_days)
    user.reorder_deadline = now + timedelta(days=deadline_days)
    user.streak_status = "building"
    return user


# --- Reorder sweeps ---
# Each transition is a single set-based UPDATE guarded by the source
# statuses, so rows already in the target state are never rewritten.

def _consistent_window():
    return and_(
        User.reorder_window_start.isnot(None),
        User.reorder_deadline.isnot(None),
        User.reorder_window_start <= User.reorder_deadline,
    )

def _transition(db: Session, target: str, source_statuses: List[str], *conditions) -> int:
    result = db.execute(
        update(User)
        .where(_consistent_window(), User.streak_status.in_(source_statuses), *conditions)
        .values(streak_status=target)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount or 0

def mark_ready(db: Session, now: datetime, warning_days: int) -> int:
    return _transition(
        db, "ready", ["building"],
        User.reorder_window_start <= now,
        User.reorder_deadline > now + timedelta(days=warning_days),
    )

def mark_warning(db: Session, now: datetime, warning_days: int) -> int:
    return _transition(
        db, "warning", ["building", "ready"],
        User.reorder_window_start <= now,
        User.reorder_deadline <= now + timedelta(days=warning_days),
        User.reorder_deadline > now,
    )

def mark_grace(db: Session, now: datetime, grace_days: int) -> int:
    return _transition(
        db, "grace", ["building", "ready", "warning"],
        User.reorder_deadline <= now,
        User.reorder_deadline > now - timedelta(days=grace_days),
    )

def mark_lapsed(db: Session, now: datetime, grace_days: int) -> int:
    """Lapse every non-lapsed user past the grace period and zero their accrual."""
    result = db.execute(
        update(User)
        .where(
            User.reorder_deadline.isnot(None),
            User.reorder_deadline < now - timedelta(days=grace_days),
            User.streak_status != "lapsed",
        )
        .values(streak_status="lapsed", streak_current_days=0, streak_discount_earned=0)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount or 0

def find_inconsistent_reorder_rows(db: Session) -> List[User]:
    """
    Users whose reorder fields cannot be evaluated: an advanced status with
    a missing window, or a window that opens after its deadline.
    """
    missing = and_(
        User.streak_status.in_(["ready", "warning", "grace"]),
        or_(User.reorder_window_start.is_(None), User.reorder_deadline.is_(None)),
    )
    inverted = and_(
        User.reorder_window_start.isnot(None),
        User.reorder_deadline.isnot(None),
        User.reorder_window_start > User.reorder_deadline,
    )
    return db.query(User).filter(or_(missing, inverted)).all()

def count_users_by_status(db: Session) -> Dict[str, int]:
    rows = db.query(User.streak_status, func.count(User.id)).group_by(User.streak_status).all()
    return {status: count for status, count in rows}
