from sqlalchemy import Column, String, DateTime, Integer
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from adherence_engine.database import Base

class User(Base):
    """Subscriber with the reorder lifecycle fields the streak engine maintains."""
    __tablename__ = "users"

    id = Column(String, primary_key=True)
    email = Column(String, unique=True, index=True, nullable=True)
    timezone = Column(String, nullable=True)  # IANA name; resolved with fallback

    # Reorder lifecycle
    last_order_date = Column(DateTime, nullable=True)
    reorder_window_start = Column(DateTime, nullable=True, index=True)
    reorder_deadline = Column(DateTime, nullable=True, index=True)
    streak_status = Column(String, default="building", nullable=False)  # building, ready, warning, grace, lapsed
    streak_discount_earned = Column(Integer, default=0, nullable=False)  # percent
    streak_current_days = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    streaks = relationship("UserStreak", back_populates="user", cascade="all, delete-orphan")
    daily_completions = relationship("DailyCompletion", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User id={self.id} status={self.streak_status} discount={self.streak_discount_earned}>"
