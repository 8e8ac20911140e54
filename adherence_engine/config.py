import os
from pydantic_settings import BaseSettings
from typing import Dict

class Settings(BaseSettings):
    """Engine settings."""
    # Base settings
    DEBUG: bool = False

    # Database settings
    DB_HOST: str = os.getenv("DB_HOST", "localhost")
    DB_PORT: str = os.getenv("DB_PORT", "5432")
    DB_USER: str = os.getenv("DB_USER", "postgres")
    DB_PASSWORD: str = os.getenv("DB_PASSWORD", "postgres")
    DB_NAME: str = os.getenv("DB_NAME", "adherence")
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        f"postgresql://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}"
    )

    # Redis settings (locks + smart streak cache)
    REDIS_ENABLED: bool = os.getenv("REDIS_ENABLED", "true").lower() == "true"
    REDIS_HOST: str = os.getenv("REDIS_HOST", "localhost")
    REDIS_PORT: int = int(os.getenv("REDIS_PORT", "6379"))

    # Writer locks
    LOCK_TIMEOUT_SECONDS: float = float(os.getenv("LOCK_TIMEOUT_SECONDS", "30"))
    LOCK_WAIT_SECONDS: float = float(os.getenv("LOCK_WAIT_SECONDS", "5"))

    # Day boundaries
    DEFAULT_TIMEZONE: str = os.getenv("DEFAULT_TIMEZONE", "America/New_York")
    FALLBACK_TIMEZONE: str = os.getenv("FALLBACK_TIMEZONE", "UTC")

    # Scoring
    STREAK_THRESHOLDS: Dict[str, float] = {
        "nutrition": 0.50,
        "workout": 0.50,
        "supplements": 0.33,
        "lifestyle": 0.40,
        "overall": 0.50,
    }
    STREAK_GRACE_DAYS: int = int(os.getenv("STREAK_GRACE_DAYS", "2"))
    DEFAULT_HYDRATION_GOAL_OZ: int = int(os.getenv("DEFAULT_HYDRATION_GOAL_OZ", "64"))
    MONTHLY_WINDOW_DAYS: int = int(os.getenv("MONTHLY_WINDOW_DAYS", "30"))
    SMART_STREAK_PASS_PERCENT: int = int(os.getenv("SMART_STREAK_PASS_PERCENT", "50"))

    # Reorder lifecycle
    REORDER_WINDOW_DAYS: int = int(os.getenv("REORDER_WINDOW_DAYS", "75"))
    REORDER_DEADLINE_DAYS: int = int(os.getenv("REORDER_DEADLINE_DAYS", "95"))
    REORDER_WARNING_DAYS: int = int(os.getenv("REORDER_WARNING_DAYS", "10"))
    REORDER_GRACE_DAYS: int = int(os.getenv("REORDER_GRACE_DAYS", "5"))

    class Config:
        env_file = ".env"
        case_sensitive = True

# Create settings instance
settings = Settings()

# Streak types tracked per user
STREAK_TYPES = ("overall", "nutrition", "workout", "supplements", "lifestyle")

# Overall score weights, chosen by whether the workout category applies
WEIGHTS_WITH_WORKOUT = {
    "nutrition": 0.25,
    "workout": 0.30,
    "supplements": 0.25,
    "lifestyle": 0.20,
}
WEIGHTS_WITHOUT_WORKOUT = {
    "nutrition": 0.35,
    "supplements": 0.35,
    "lifestyle": 0.30,
}

# Streak length (days) -> (discount percent, tier name), highest first
DISCOUNT_TIERS = [
    (90, 20, "Champion"),
    (60, 15, "Loyal"),
    (30, 10, "Dedicated"),
    (14, 8, "Committed"),
    (7, 5, "Consistent"),
]
BASE_TIER = "Building"

# Badges shown alongside the earnable tiers
TIER_BADGES = {
    "Consistent": "🥉",
    "Committed": "🥈",
    "Dedicated": "🥇",
    "Loyal": "💎",
    "Champion": "👑",
}

# Reorder statuses in which an accrued discount can be redeemed
DISCOUNT_REDEEMABLE_STATUSES = ("ready", "warning", "grace")
