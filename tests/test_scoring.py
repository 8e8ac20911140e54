"""
Tests for the category scorers and the weighted overall score
"""
from types import SimpleNamespace

import pytest

from adherence_engine.schemas.plan import (
    PlannedWorkout,
    RestDay,
    parse_exercises,
    parse_planned_day,
    parse_weekly_schedule,
)
from adherence_engine.services.scoring import (
    DayInputs,
    lifestyle_score,
    nutrition_score,
    overall_score,
    score_day,
    supplement_score,
    workout_score,
)


def meal(meal_type, calories=None):
    return SimpleNamespace(meal_type=meal_type, calories=calories)


def daily_log(**fields):
    values = dict(
        is_rest_day=False,
        supplement_morning=False,
        supplement_afternoon=False,
        supplement_evening=False,
        sleep_quality=None,
        energy_level=None,
        mood_level=None,
        water_intake_oz=None,
    )
    values.update(fields)
    return SimpleNamespace(**values)


def workout(*names):
    return SimpleNamespace(exercises_completed=[{"name": n, "sets": 3} for n in names])


class TestNutritionScore:
    def test_three_main_meals_in_calorie_range(self):
        """Breakfast, lunch and dinner totalling 2200 kcal without a snack"""
        meals = [meal("breakfast", 500), meal("lunch", 800), meal("dinner", 900)]
        inputs = DayInputs.from_records(None, meals, [], None)
        assert nutrition_score(inputs) == 0.90

    def test_snack_and_calories_cap_at_one(self):
        meals = [meal("breakfast", 500), meal("lunch", 700), meal("dinner", 800), meal("snack", 200)]
        inputs = DayInputs.from_records(None, meals, [], None)
        assert nutrition_score(inputs) == 1.0

    def test_calories_outside_range_earn_no_bonus(self):
        inputs = DayInputs.from_records(None, [meal("breakfast", 400)], [], None)
        assert nutrition_score(inputs) == 0.25

    def test_nothing_logged_is_zero_not_null(self):
        assert nutrition_score(DayInputs()) == 0.0
        assert nutrition_score(DayInputs.from_records(daily_log(), [], [], None)) == 0.0


class TestWorkoutScore:
    def test_planned_rest_day_without_workout_is_full_score(self):
        inputs = DayInputs.from_records(None, [], [], RestDay())
        assert workout_score(inputs) == 1.0

    def test_rest_day_flag_on_daily_log(self):
        inputs = DayInputs.from_records(daily_log(is_rest_day=True), [], [], PlannedWorkout(workout_id="w1"))
        assert workout_score(inputs) == 1.0

    def test_unplanned_day_without_workout_is_not_applicable(self):
        assert workout_score(DayInputs.from_records(daily_log(), [], [], None)) is None

    def test_planned_day_missed_is_zero(self):
        inputs = DayInputs.from_records(None, [], [], PlannedWorkout(workout_id="w1"))
        assert workout_score(inputs) == 0.0

    @pytest.mark.parametrize("count,expected", [(1, 0.25), (2, 0.5), (3, 0.5), (4, 0.75), (5, 0.75), (6, 1.0), (9, 1.0)])
    def test_distinct_exercise_brackets(self, count, expected):
        names = [f"exercise-{i}" for i in range(count)]
        inputs = DayInputs.from_records(None, [], [workout(*names)], None)
        assert workout_score(inputs) == expected

    def test_exercises_are_counted_once_across_sessions(self):
        inputs = DayInputs.from_records(None, [], [workout("Squat", "Bench"), workout("squat", "Row")], None)
        assert inputs.distinct_exercises == 3
        assert workout_score(inputs) == 0.5


class TestSupplementScore:
    def test_doses_over_three(self):
        inputs = DayInputs.from_records(daily_log(supplement_morning=True, supplement_evening=True), [], [], None)
        assert supplement_score(inputs) == 0.67

    def test_no_daily_log_is_zero(self):
        assert supplement_score(DayInputs()) == 0.0


class TestLifestyleScore:
    def test_presence_not_value_counts(self):
        inputs = DayInputs.from_records(daily_log(sleep_quality=1, energy_level=1, mood_level=1), [], [], None)
        assert lifestyle_score(inputs) == 1.0

    def test_water_bonus(self):
        inputs = DayInputs.from_records(daily_log(sleep_quality=4, water_intake_oz=64), [], [], None)
        assert lifestyle_score(inputs) == 0.43

    def test_capped_at_one(self):
        inputs = DayInputs.from_records(
            daily_log(sleep_quality=3, energy_level=3, mood_level=3, water_intake_oz=100), [], [], None
        )
        assert lifestyle_score(inputs) == 1.0


class TestOverallScore:
    def test_with_workout_uses_four_way_weights(self):
        scores = {"nutrition": 1.0, "workout": 0.0, "supplements": 1.0, "lifestyle": 1.0}
        assert overall_score(scores) == 0.70

    def test_without_workout_uses_three_way_weights(self):
        scores = {"nutrition": 1.0, "workout": None, "supplements": 0.0, "lifestyle": 1.0}
        assert overall_score(scores) == 0.65

    def test_all_scores_stay_in_bounds(self):
        inputs = DayInputs.from_records(
            daily_log(supplement_morning=True, sleep_quality=2, water_intake_oz=200),
            [meal("breakfast", 5000), meal("snack", 10)],
            [workout("a", "b", "c", "d", "e", "f", "g")],
            PlannedWorkout(workout_id="w1"),
        )
        for value in score_day(inputs).values():
            assert value is None or 0.0 <= value <= 1.0


class TestPlanPayloads:
    def test_rest_entries(self):
        assert isinstance(parse_planned_day({"day": "monday", "isRestDay": True, "workoutId": "w1"}), RestDay)
        assert isinstance(parse_planned_day({"day": "monday", "workoutId": "rest"}), RestDay)
        assert isinstance(parse_planned_day({"day": "monday"}), RestDay)
        assert parse_planned_day({"day": "monday", "workoutId": "w1"}) == PlannedWorkout(workout_id="w1")

    def test_schedule_keyed_by_weekday(self):
        schedule = parse_weekly_schedule([
            {"day": "Saturday", "isRestDay": True},
            {"day": "monday", "workoutId": "w1"},
            {"day": "someday", "workoutId": "w2"},
            "garbage",
        ])
        assert set(schedule) == {0, 5}
        assert isinstance(schedule[5], RestDay)

    def test_explicit_flag_decides_rest_or_workout(self):
        assert parse_planned_day({"day": "saturday", "isRestDay": False}) == PlannedWorkout()
        assert parse_planned_day({"day": "saturday", "is_rest_day": False, "workoutId": "w1"}) == PlannedWorkout(workout_id="w1")
        assert isinstance(parse_planned_day({"day": "saturday", "isRestDay": True, "workoutId": "w1"}), RestDay)

    def test_numeric_day_and_day_name(self):
        schedule = parse_weekly_schedule([
            {"day": 6, "dayName": "Saturday", "isRestDay": True},
            {"day": 1, "isRestDay": False},
            {"dayName": "Sunday", "isRestDay": False},
            {"day": 9, "isRestDay": False},
        ])
        assert set(schedule) == {0, 5, 6}
        assert isinstance(schedule[5], RestDay)
        assert schedule[0] == PlannedWorkout()
        assert schedule[6] == PlannedWorkout()

    def test_flagged_workout_day_missed_scores_zero(self):
        planned = parse_weekly_schedule([{"day": "saturday", "isRestDay": False}])[5]
        inputs = DayInputs.from_records(None, [], [], planned)
        assert score_day(inputs)["workout"] == 0.0

    def test_malformed_schedule_is_empty(self):
        assert parse_weekly_schedule({"monday": "rest"}) == {}
        assert parse_weekly_schedule(None) == {}

    def test_exercises_accept_strings_and_dicts(self):
        exercises = parse_exercises(["Squat", {"exerciseName": "Row", "sets": [{}, {}]}, {"name": ""}, 7])
        assert [(e.name, e.sets) for e in exercises] == [("Squat", None), ("Row", 2)]
