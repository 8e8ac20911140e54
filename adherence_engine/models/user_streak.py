import uuid

from sqlalchemy import Column, String, Date, DateTime, Integer, ForeignKey, UniqueConstraint, text
from sqlalchemy.orm import relationship
from adherence_engine.database import Base


class UserStreak(Base):
    __tablename__ = "user_streaks"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    streak_type = Column(String, nullable=False)  # overall, nutrition, workout, supplements, lifestyle

    # Streak counters
    current_streak = Column(Integer, nullable=False, default=0)
    longest_streak = Column(Integer, nullable=False, default=0)

    # User-local dates
    last_logged_date = Column(Date, nullable=True)
    last_completed_date = Column(Date, nullable=True)

    created_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))

    user = relationship("User", back_populates="streaks")

    __table_args__ = (
        UniqueConstraint("user_id", "streak_type", name="uq_user_streaks_user_type"),
    )

    def __repr__(self) -> str:
        return (
            f"<UserStreak user_id={self.user_id} type={self.streak_type} current={self.current_streak} "
            f"longest={self.longest_streak} last_completed={self.last_completed_date}>"
        )
