"""
Reorder lifecycle: discount tier accrual and the
building -> ready -> warning -> grace -> lapsed status machine.
"""
from __future__ import annotations
import math
from datetime import datetime
from typing import Dict, Optional, Tuple

from sqlalchemy.orm import Session

from adherence_engine import crud
from adherence_engine.config import (
    BASE_TIER,
    DISCOUNT_REDEEMABLE_STATUSES,
    DISCOUNT_TIERS,
    TIER_BADGES,
    settings,
)
from adherence_engine.exceptions import UserNotFound
from adherence_engine.models import User
from adherence_engine.schemas.streak import DiscountTier, DiscountTierCatalogue, StreakDiscount, StreakRewards
from adherence_engine.services.streak_service import StreakState, effective_current_streak
from adherence_engine.utils.clock import Clock, resolve_clock
from adherence_engine.utils.logger import get_logger
from adherence_engine.utils.timezone import to_local_date, to_naive_utc

logger = get_logger(__name__)

TIER_STREAK_TYPES = ("supplements", "overall")


def discount_tier(streak_days: int) -> Tuple[int, str]:
    """(discount percent, tier name) for a streak length."""
    for min_days, discount, name in DISCOUNT_TIERS:
        if streak_days >= min_days:
            return discount, name
    return 0, BASE_TIER


def can_redeem(user: User) -> bool:
    """
    A discount is redeemable inside the reorder window, or on a first order
    placed before any window exists.
    """
    status = user.streak_status or "building"
    if status == "lapsed":
        return False
    return user.reorder_window_start is None or status in DISCOUNT_REDEEMABLE_STATUSES


def tier_streak_days(db: Session, user: User, clock: Optional[Clock] = None) -> int:
    """Effective current streak of the tier streak: supplements if present, else overall."""
    clock = resolve_clock(clock)
    today = to_local_date(clock.now(), user.timezone)
    for streak_type in TIER_STREAK_TYPES:
        row = crud.get_user_streak(db, user.id, streak_type)
        if row is not None:
            return effective_current_streak(StreakState.from_row(row), today, settings.STREAK_GRACE_DAYS)
    return 0


def refresh_accrual(db: Session, user: User, clock: Optional[Clock] = None) -> bool:
    """
    Mirror the tier streak into ``streak_current_days`` and
    ``streak_discount_earned``. Lapsed users keep their zeroed accrual
    until their next order. Does not commit.
    """
    if user.streak_status == "lapsed":
        return False
    days = tier_streak_days(db, user, clock)
    discount, tier = discount_tier(days)
    changed = crud.update_streak_accrual(db, user, days, discount)
    if changed:
        logger.debug(f"Accrual for {user.id}: {days} days, {discount}% ({tier})")
    return changed


def apply_streak_discount(db: Session, user_id: str, order_id: str, clock: Optional[Clock] = None) -> int:
    """
    Redeem the accrued discount for an order and open the next reorder
    window. An order placed outside the window redeems nothing but still
    restarts it. Returns the discount percent applied.
    """
    clock = resolve_clock(clock)
    user = crud.get_user(db, user_id)
    if user is None:
        raise UserNotFound(user_id)

    try:
        refresh_accrual(db, user, clock)
        discount = (user.streak_discount_earned or 0) if can_redeem(user) else 0
        crud.start_reorder_window(
            db,
            user,
            to_naive_utc(clock.now()),
            settings.REORDER_WINDOW_DAYS,
            settings.REORDER_DEADLINE_DAYS,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(f"Applied {discount}% streak discount to order {order_id} for user {user_id}")
    return discount


def update_streak_statuses(db: Session, clock: Optional[Clock] = None) -> Dict[str, int]:
    """
    Advance every user through ready, warning and grace. Each step is one
    guarded UPDATE, so rerunning against unchanged data writes nothing.
    Rows with an unusable window are logged and left alone. Does not commit.
    """
    clock = resolve_clock(clock)
    now = to_naive_utc(clock.now())

    for user in crud.find_inconsistent_reorder_rows(db):
        logger.warning(
            f"Skipping user {user.id} in status sweep: status={user.streak_status} "
            f"window_start={user.reorder_window_start} deadline={user.reorder_deadline}"
        )

    counts = {
        "ready": crud.mark_ready(db, now, settings.REORDER_WARNING_DAYS),
        "warning": crud.mark_warning(db, now, settings.REORDER_WARNING_DAYS),
        "grace": crud.mark_grace(db, now, settings.REORDER_GRACE_DAYS),
    }
    logger.info(f"Status sweep transitions: {counts}; users by status: {crud.count_users_by_status(db)}")
    return counts


def reset_streak_for_lapsed_users(db: Session, clock: Optional[Clock] = None) -> int:
    """Lapse users past deadline plus grace and zero their accrual. Does not commit."""
    clock = resolve_clock(clock)
    lapsed = crud.mark_lapsed(db, to_naive_utc(clock.now()), settings.REORDER_GRACE_DAYS)
    logger.info(f"Lapsed {lapsed} users")
    return lapsed


def _days_until(target: Optional[datetime], now: datetime) -> Optional[int]:
    if target is None:
        return None
    remaining = math.ceil((target - now).total_seconds() / 86400)
    return max(remaining, 0)


def get_streak_rewards(db: Session, user_id: str, clock: Optional[Clock] = None) -> StreakRewards:
    clock = resolve_clock(clock)
    user = crud.get_user(db, user_id)
    if user is None:
        raise UserNotFound(user_id)

    streak_days = tier_streak_days(db, user, clock)
    discount, tier = discount_tier(streak_days)
    now = to_naive_utc(clock.now())
    return StreakRewards(
        current_streak=streak_days,
        discount_earned=discount,
        discount_tier=tier,
        last_order_date=user.last_order_date,
        reorder_window_start=user.reorder_window_start,
        reorder_deadline=user.reorder_deadline,
        streak_status=user.streak_status or "building",
        days_until_reorder_window=_days_until(user.reorder_window_start, now),
        days_until_deadline=_days_until(user.reorder_deadline, now),
    )


def get_streak_discount(db: Session, user_id: str) -> StreakDiscount:
    """The stored accrual and whether the current status lets it be redeemed."""
    user = crud.get_user(db, user_id)
    if user is None:
        raise UserNotFound(user_id)

    days = user.streak_current_days or 0
    _, tier = discount_tier(days)
    status = user.streak_status or "building"
    return StreakDiscount(
        discount_percent=user.streak_discount_earned or 0,
        can_apply=can_redeem(user),
        streak_days=days,
        tier=tier,
        status=status,
    )


def get_discount_tiers() -> DiscountTierCatalogue:
    tiers = [
        DiscountTier(days=min_days, discount=discount, badge=TIER_BADGES[name], label=name)
        for min_days, discount, name in sorted(DISCOUNT_TIERS)
    ]
    return DiscountTierCatalogue(tiers=tiers, max_discount=max(discount for _, discount, _ in DISCOUNT_TIERS))
