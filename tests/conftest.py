"""
Pytest configuration and fixtures

Every test gets a fresh in-memory SQLite database (one shared connection via
StaticPool), a frozen clock, and Redis switched off so the cache is a no-op
and locks are in-process.
"""
import uuid
from datetime import date, datetime

import pytest
import pytz
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from adherence_engine import cache
from adherence_engine.config import settings
from adherence_engine.models import (
    Base, User, DailyActivityLog, MealLog, WorkoutLog, WorkoutPlan, TrackingPreferences
)
from adherence_engine.utils.clock import FixedClock
from adherence_engine.utils.timezone import to_naive_utc

# Saturday, mid-afternoon UTC
NOW = datetime(2024, 6, 15, 16, 0, tzinfo=pytz.utc)
TODAY = date(2024, 6, 15)


@pytest.fixture(autouse=True)
def _redis_disabled(monkeypatch):
    monkeypatch.setattr(settings, "REDIS_ENABLED", False)
    cache.reset_redis_client()
    yield
    cache.reset_redis_client()


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def make_user(db_session):
    def _make_user(user_id=None, timezone="UTC", **fields):
        user = User(
            id=user_id or f"user-{uuid.uuid4().hex[:8]}",
            timezone=timezone,
            streak_status=fields.pop("streak_status", "building"),
            streak_discount_earned=fields.pop("streak_discount_earned", 0),
            streak_current_days=fields.pop("streak_current_days", 0),
            **fields,
        )
        db_session.add(user)
        db_session.commit()
        return user
    return _make_user


@pytest.fixture
def add_daily_log(db_session):
    def _add_daily_log(user_id, log_date, **fields):
        log = DailyActivityLog(user_id=user_id, log_date=log_date, **fields)
        db_session.add(log)
        db_session.commit()
        return log
    return _add_daily_log


@pytest.fixture
def add_meal(db_session):
    def _add_meal(user_id, meal_type, logged_at, calories=None):
        meal = MealLog(
            user_id=user_id,
            meal_type=meal_type,
            calories=calories,
            logged_at=to_naive_utc(logged_at),
        )
        db_session.add(meal)
        db_session.commit()
        return meal
    return _add_meal


@pytest.fixture
def add_workout(db_session):
    def _add_workout(user_id, completed_at, exercises):
        workout = WorkoutLog(
            user_id=user_id,
            completed_at=to_naive_utc(completed_at),
            exercises_completed=exercises,
        )
        db_session.add(workout)
        db_session.commit()
        return workout
    return _add_workout


@pytest.fixture
def add_plan(db_session):
    def _add_plan(user_id, schedule, is_active=True, created_at=None):
        plan = WorkoutPlan(
            user_id=user_id,
            workout_schedule=schedule,
            is_active=is_active,
            created_at=created_at or datetime(2024, 1, 1),
        )
        db_session.add(plan)
        db_session.commit()
        return plan
    return _add_plan


@pytest.fixture
def set_preferences(db_session):
    def _set_preferences(user_id, **fields):
        prefs = TrackingPreferences(user_id=user_id, **fields)
        db_session.add(prefs)
        db_session.commit()
        return prefs
    return _set_preferences
