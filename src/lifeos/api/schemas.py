"""Request payload models for the nutrition API."""

import datetime as dt
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from lifeos.domain.nutrition import RecipeLineInput
from lifeos.domain.planning import MealSlotInput, MealType


class _MealTypeField(BaseModel):
    @field_validator("meal_type", mode="before", check_fields=False)
    @classmethod
    def _upper_meal_type(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper()
        return value


class RecipeLinePayload(BaseModel):
    name: str = Field(min_length=1)
    quantity: float = Field(gt=0)
    unit: str | None = None
    calories: float = Field(default=0.0, ge=0)
    protein: float = Field(default=0.0, ge=0)
    carbs: float = Field(default=0.0, ge=0)
    fat: float = Field(default=0.0, ge=0)

    def to_input(self) -> RecipeLineInput:
        return RecipeLineInput(
            name=self.name,
            quantity=self.quantity,
            unit=self.unit,
            calories=self.calories,
            protein=self.protein,
            carbs=self.carbs,
            fat=self.fat,
        )


class RecipePayload(BaseModel):
    name: str = Field(min_length=1)
    description: str | None = None
    servings: int = Field(default=1, ge=1)
    ingredients: list[RecipeLinePayload] = Field(min_length=1)

    def line_inputs(self) -> list[RecipeLineInput]:
        return [line.to_input() for line in self.ingredients]


class MealSlotPayload(_MealTypeField):
    date: dt.date
    meal_type: MealType
    recipe_id: UUID
    notes: str | None = None

    def to_input(self) -> MealSlotInput:
        return MealSlotInput(
            date=self.date,
            meal_type=self.meal_type,
            recipe_id=self.recipe_id,
            notes=self.notes,
        )


class MealPlanPayload(BaseModel):
    week_start: dt.date
    slots: list[MealSlotPayload] = Field(min_length=1)


class PantryPayload(BaseModel):
    name: str = Field(min_length=1)
    quantity: float = Field(ge=0)
    unit: str | None = None


class PantryUpdatePayload(BaseModel):
    name: str | None = None
    quantity: float | None = Field(default=None, ge=0)
    unit: str | None = None


class ShoppingItemPayload(BaseModel):
    name: str = Field(min_length=1)
    quantity: float = Field(default=1.0, ge=0)
    unit: str | None = None


class ShoppingItemUpdatePayload(BaseModel):
    checked: bool | None = None
    quantity: float | None = Field(default=None, ge=0)
    unit: str | None = None


class GenerateShoppingListPayload(BaseModel):
    week_start: dt.date


class DailyLogPayload(_MealTypeField):
    date: dt.date
    meal_type: MealType | None = None
    recipe_id: UUID | None = None
    servings: float = Field(default=1.0, gt=0)
    calories: float | None = Field(default=None, ge=0)
    protein: float | None = Field(default=None, ge=0)
    carbs: float | None = Field(default=None, ge=0)
    fat: float | None = Field(default=None, ge=0)
    notes: str | None = None


class DailyLogUpdatePayload(_MealTypeField):
    """Partial edit; only fields present in the request body are applied."""

    date: dt.date | None = None
    meal_type: MealType | None = None
    recipe_id: UUID | None = None
    servings: float | None = Field(default=None, gt=0)
    calories: float | None = Field(default=None, ge=0)
    protein: float | None = Field(default=None, ge=0)
    carbs: float | None = Field(default=None, ge=0)
    fat: float | None = Field(default=None, ge=0)
    notes: str | None = None


class IngredientPayload(BaseModel):
    name: str = Field(min_length=1)
    unit: str | None = None
    calories: float = Field(default=0.0, ge=0)
    protein: float = Field(default=0.0, ge=0)
    carbs: float = Field(default=0.0, ge=0)
    fat: float = Field(default=0.0, ge=0)
    barcode: str | None = None
