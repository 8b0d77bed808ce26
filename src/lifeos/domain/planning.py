"""Domain models for weekly meal plans."""

from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum
from uuid import UUID


class MealType(StrEnum):
    """Meal slot kinds."""

    BREAKFAST = "BREAKFAST"
    LUNCH = "LUNCH"
    DINNER = "DINNER"
    SNACK = "SNACK"


@dataclass(frozen=True)
class MealSlot:
    """One planned meal."""

    id: UUID
    meal_plan_id: UUID
    date: date
    meal_type: MealType
    recipe_id: UUID | None
    notes: str | None = None


@dataclass(frozen=True)
class MealPlan:
    """A user's plan for the week starting at ``week_start``."""

    id: UUID
    user_id: UUID
    week_start: date
    slots: list[MealSlot] = field(default_factory=list)


@dataclass(frozen=True)
class MealSlotInput:
    """A slot as submitted when replacing a week's plan."""

    date: date
    meal_type: MealType
    recipe_id: UUID
    notes: str | None = None


@dataclass(frozen=True)
class Requirement:
    """Total quantity of one ingredient, in one unit, needed for a week."""

    name: str
    unit: str | None
    quantity: float
