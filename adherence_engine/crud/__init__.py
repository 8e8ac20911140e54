from adherence_engine.crud.user import (
    get_user,
    user_ids_by_timezone,
    update_streak_accrual,
    start_reorder_window,
    mark_ready,
    mark_warning,
    mark_grace,
    mark_lapsed,
    find_inconsistent_reorder_rows,
    count_users_by_status,
)
from adherence_engine.crud.activity import (
    get_daily_log,
    list_daily_logs,
    get_meal_logs_between,
    get_workout_logs_between,
    get_active_workout_plan,
    get_tracking_preferences,
)
from adherence_engine.crud.completion import (
    get_daily_completion,
    list_daily_completions,
    upsert_daily_completion,
)
from adherence_engine.crud.streak import (
    get_user_streak,
    get_all_user_streaks,
    save_streak_state,
    decay_stale_streaks,
)
