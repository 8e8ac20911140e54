"""
Tests for the smart streak monthly view
"""
from datetime import date, datetime, timedelta
from types import SimpleNamespace
from unittest import mock

from adherence_engine.services import smart_streak
from adherence_engine.services.smart_streak import (
    DayRecord,
    TrackingSettings,
    build_monthly_view,
    day_progress,
    get_smart_streak_data,
)

TODAY = date(2024, 6, 15)


def log(**fields):
    values = dict(
        is_rest_day=False,
        supplement_morning=False,
        supplement_afternoon=False,
        supplement_evening=False,
        sleep_quality=None,
        energy_level=None,
        mood_level=None,
        water_intake_oz=0,
    )
    values.update(fields)
    return SimpleNamespace(**values)


def full_log():
    return log(
        supplement_morning=True, supplement_afternoon=True, supplement_evening=True,
        sleep_quality=3, energy_level=3, mood_level=3, water_intake_oz=64,
    )


def meals(*types):
    return [SimpleNamespace(meal_type=t, calories=500) for t in types]


def window(records_by_offset, days=30):
    """Records for the ``days`` ending on TODAY; offset 0 is today."""
    records = []
    for offset in range(days - 1, -1, -1):
        day = TODAY - timedelta(days=offset)
        record = records_by_offset.get(offset, DayRecord(day=day))
        record.day = day
        records.append(record)
    return records


def good_day():
    return DayRecord(day=TODAY, daily_log=full_log(), meals=meals("breakfast"), workouts=[object()])


class TestDayProgress:
    def test_full_day_is_100_percent(self):
        progress = day_progress(good_day(), TrackingSettings(), is_today=False)
        assert progress.percentage == 100
        assert progress.has_data

    def test_past_day_counts_only_categories_with_data(self):
        # Supplements partially taken (fails its bar), water logged and met
        record = DayRecord(day=TODAY, daily_log=log(supplement_morning=True, water_intake_oz=80))
        progress = day_progress(record, TrackingSettings(), is_today=False)
        assert progress.percentage == 50

    def test_today_counts_every_enabled_category(self):
        record = DayRecord(day=TODAY, daily_log=log(water_intake_oz=80))
        progress = day_progress(record, TrackingSettings(), is_today=True)
        assert progress.percentage == 20

    def test_disabled_categories_are_ignored(self):
        record = DayRecord(day=TODAY, daily_log=log(water_intake_oz=80))
        tracking = TrackingSettings(workouts=False, nutrition=False, supplements=False, lifestyle=False)
        assert day_progress(record, tracking, is_today=True).percentage == 100

    def test_zero_hydration_goal_disables_water(self):
        assert not TrackingSettings(hydration_goal_oz=0).water

    def test_breakdown(self):
        record = DayRecord(
            day=TODAY,
            daily_log=log(supplement_evening=True, sleep_quality=2, water_intake_oz=30),
            completion=SimpleNamespace(nutrition_score=0.85),
            meals=meals("breakfast", "snack", "dinner"),
            planned_rest=True,
        )
        breakdown = day_progress(record, TrackingSettings(hydration_goal_oz=80), is_today=False).breakdown
        assert breakdown.workout.is_rest_day
        assert not breakdown.workout.done
        assert (breakdown.nutrition.score, breakdown.nutrition.meals_logged, breakdown.nutrition.main_meals) == (85, 3, 2)
        assert breakdown.supplements.taken == 1
        assert (breakdown.water.current, breakdown.water.goal) == (30, 80)
        assert breakdown.lifestyle.sleep_logged and not breakdown.lifestyle.complete


class TestWindowStreaks:
    def test_walk_stops_at_first_failed_day(self):
        records = window({0: good_day(), 1: good_day(), 2: good_day(),
                          3: DayRecord(day=TODAY, daily_log=log(supplement_morning=True))})
        view = build_monthly_view(records, TODAY, TrackingSettings())
        assert view.current_streak == 3
        assert len(view.monthly_progress) == 30
        assert view.monthly_progress[-1].date == "2024-06-15"

    def test_today_without_data_does_not_break_the_walk(self):
        records = window({1: good_day(), 2: good_day()})
        view = build_monthly_view(records, TODAY, TrackingSettings())
        assert view.current_streak == 2
        assert view.today_breakdown is not None

    def test_today_with_failing_data_breaks_the_walk(self):
        records = window({0: DayRecord(day=TODAY, daily_log=log(supplement_morning=True)), 1: good_day(), 2: good_day()})
        view = build_monthly_view(records, TODAY, TrackingSettings())
        assert view.monthly_progress[-1].has_data
        assert view.current_streak == 0
        assert view.longest_streak == 2

    def test_rest_days_qualify(self):
        rest = DayRecord(day=TODAY, planned_rest=True)
        records = window({1: good_day(), 2: rest, 3: good_day()})
        assert build_monthly_view(records, TODAY, TrackingSettings()).current_streak == 3

    def test_longest_run_anywhere_in_window(self):
        runs = {offset: good_day() for offset in range(10, 15)}
        runs.update({0: good_day(), 1: good_day()})
        view = build_monthly_view(window(runs), TODAY, TrackingSettings())
        assert view.current_streak == 2
        assert view.longest_streak == 5


class TestGetSmartStreakData:
    def test_builds_view_from_database(self, db_session, clock, make_user, add_daily_log, add_meal, add_plan):
        make_user("u1", timezone="UTC")
        add_plan("u1", [{"day": "friday", "isRestDay": True}])
        add_daily_log("u1", TODAY, supplement_morning=True, supplement_afternoon=True, supplement_evening=True,
                      water_intake_oz=64)
        add_meal("u1", "lunch", datetime(2024, 6, 15, 12, 0))

        view = get_smart_streak_data(db_session, "u1", clock=clock)

        assert len(view.monthly_progress) == 30
        assert view.monthly_progress[0].date == "2024-05-17"
        today = view.monthly_progress[-1]
        assert today.breakdown.supplements.taken == 3
        assert today.breakdown.nutrition.meals_logged == 1
        # Friday June 14 is a planned rest day
        assert view.monthly_progress[-2].is_rest_day
        assert view.current_streak >= 1

    def test_divergence_from_incremental_streak_is_logged(self, db_session, clock, make_user, add_daily_log):
        make_user("u1", timezone="UTC")
        add_daily_log("u1", TODAY - timedelta(days=1), sleep_quality=3, energy_level=3, mood_level=3)

        with mock.patch.object(smart_streak.logger, "warning") as warning:
            view = get_smart_streak_data(db_session, "u1", clock=clock)

        assert view.current_streak == 1
        assert warning.called
        assert "diverges" in warning.call_args[0][0]

    def test_cached_view_is_returned_without_rebuilding(self, db_session, clock, make_user):
        make_user("u1", timezone="UTC")
        first = get_smart_streak_data(db_session, "u1", clock=clock, use_cache=False)

        with mock.patch.object(smart_streak, "get_cached_data", return_value=first.model_dump(mode="json")), \
                mock.patch.object(smart_streak, "load_day_records") as load:
            cached = get_smart_streak_data(db_session, "u1", clock=clock)

        assert cached == first
        load.assert_not_called()

    def test_fresh_view_is_cached_until_local_midnight(self, db_session, clock, make_user):
        make_user("u1", timezone="UTC")
        with mock.patch.object(smart_streak, "set_cached_data") as set_cached:
            get_smart_streak_data(db_session, "u1", clock=clock)

        key, _, ttl = set_cached.call_args[0]
        assert key == "smart_streak:u1:UTC"
        assert ttl == 8 * 3600
