import uuid

from sqlalchemy import Column, String, DateTime, Float, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from adherence_engine.database import Base


class DailyCompletion(Base):
    __tablename__ = "daily_completions"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    log_date = Column(String(10), nullable=False)  # YYYY-MM-DD, user-local

    # 0.00-1.00, null when the category does not apply
    nutrition_score = Column(Float, nullable=True)
    workout_score = Column(Float, nullable=True)
    supplement_score = Column(Float, nullable=True)
    lifestyle_score = Column(Float, nullable=True)
    daily_score = Column(Float, nullable=False, default=0.0)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now())

    user = relationship("User", back_populates="daily_completions")

    __table_args__ = (
        UniqueConstraint("user_id", "log_date", name="uq_daily_completions_user_date"),
    )

    def __repr__(self) -> str:
        return f"<DailyCompletion user_id={self.user_id} date={self.log_date} score={self.daily_score}>"
