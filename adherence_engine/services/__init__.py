from adherence_engine.services.engine import (
    on_log_written,
    get_streak_summary,
    run_daily_status_sweep,
    run_lapse_sweep,
    run_decay_sweep,
)
from adherence_engine.services.completion_service import compute_and_persist
from adherence_engine.services.streak_service import get_user_streak, update_category_streak
from adherence_engine.services.smart_streak import get_smart_streak_data
from adherence_engine.services.reorder_service import (
    apply_streak_discount,
    update_streak_statuses,
    reset_streak_for_lapsed_users,
    get_streak_rewards,
    get_streak_discount,
    get_discount_tiers,
)
