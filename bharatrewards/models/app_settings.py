"""Admin-editable app settings."""
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from bharatrewards.core.config import settings


class AppSettings(BaseModel):
    min_redeem_points: int = Field(default=settings.DEFAULT_MIN_REDEEM_POINTS, ge=0)
    points_per_question: int = Field(default=settings.DEFAULT_POINTS_PER_QUESTION, ge=0)
    currency_rate: float = Field(default=settings.DEFAULT_CURRENCY_RATE, gt=0)  # points per currency unit

    class Config:
        alias_generator = to_camel
        populate_by_name = True
