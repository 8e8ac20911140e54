from pydantic import BaseModel
from typing import Dict, List, Optional
from datetime import date, datetime


class StreakResponse(BaseModel):
    streak_type: str
    current_streak: int
    longest_streak: int
    last_logged_date: Optional[date]
    last_completed_date: Optional[date]
    effective_streak: int

    class Config:
        from_attributes = True


class DailyCompletionResponse(BaseModel):
    user_id: str
    log_date: str
    nutrition_score: Optional[float]
    workout_score: Optional[float]
    supplement_score: Optional[float]
    lifestyle_score: Optional[float]
    daily_score: float

    class Config:
        from_attributes = True


class StreakSummary(BaseModel):
    user_id: str
    today_local_date: date
    streaks: Dict[str, StreakResponse]
    today_completion: Optional[DailyCompletionResponse]


class WorkoutBreakdown(BaseModel):
    done: bool
    is_rest_day: bool


class NutritionBreakdown(BaseModel):
    score: int
    meals_logged: int
    main_meals: int
    goal: int = 3


class SupplementBreakdown(BaseModel):
    taken: int
    total: int = 3


class WaterBreakdown(BaseModel):
    current: int
    goal: int


class LifestyleBreakdown(BaseModel):
    sleep_logged: bool
    energy_logged: bool
    mood_logged: bool
    complete: bool


class DayBreakdown(BaseModel):
    workout: WorkoutBreakdown
    nutrition: NutritionBreakdown
    supplements: SupplementBreakdown
    water: WaterBreakdown
    lifestyle: LifestyleBreakdown


class DayProgress(BaseModel):
    date: str
    percentage: int
    is_rest_day: bool
    has_data: bool
    breakdown: DayBreakdown


class MonthlyView(BaseModel):
    current_streak: int
    longest_streak: int
    monthly_progress: List[DayProgress]
    today_breakdown: Optional[DayBreakdown]


class StreakRewards(BaseModel):
    current_streak: int
    discount_earned: int
    discount_tier: str
    last_order_date: Optional[datetime]
    reorder_window_start: Optional[datetime]
    reorder_deadline: Optional[datetime]
    streak_status: str
    days_until_reorder_window: Optional[int]
    days_until_deadline: Optional[int]


class StreakDiscount(BaseModel):
    discount_percent: int
    can_apply: bool
    streak_days: int
    tier: str
    status: str


class DiscountTier(BaseModel):
    days: int
    discount: int
    badge: str
    label: str


class DiscountTierCatalogue(BaseModel):
    tiers: List[DiscountTier]
    max_discount: int
