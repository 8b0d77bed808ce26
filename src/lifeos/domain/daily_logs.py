"""Domain models for daily food logs."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from lifeos.domain.nutrition import MacroProfile
from lifeos.domain.planning import MealType


@dataclass(frozen=True)
class DailyLog:
    """A logged meal, either tied to a recipe or carrying manual macros."""

    id: UUID
    user_id: UUID
    date: date
    meal_type: MealType | None
    recipe_id: UUID | None
    servings: float
    calories: int
    protein: float
    carbs: float
    fat: float
    notes: str | None
    created_at: datetime

    @property
    def macros(self) -> MacroProfile:
        return MacroProfile(
            float(self.calories), self.protein, self.carbs, self.fat
        )
