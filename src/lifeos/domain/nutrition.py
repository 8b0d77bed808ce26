"""Nutrition domain models: ingredients and recipes."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class MacroProfile:
    """Calories and macronutrients for some amount of food."""

    calories: float
    protein: float
    carbs: float
    fat: float

    def plus(self, other: "MacroProfile") -> "MacroProfile":
        return MacroProfile(
            calories=self.calories + other.calories,
            protein=self.protein + other.protein,
            carbs=self.carbs + other.carbs,
            fat=self.fat + other.fat,
        )


ZERO_MACROS = MacroProfile(0.0, 0.0, 0.0, 0.0)


@dataclass(frozen=True)
class Ingredient:
    """Catalog entry holding nutrition facts for one unit of an ingredient."""

    id: UUID
    name: str
    unit: str | None
    calories: float
    protein: float
    carbs: float
    fat: float
    source: str = "manual"
    barcode: str | None = None


@dataclass(frozen=True)
class RecipeLineInput:
    """A recipe line as authored: absolute macros for the given quantity."""

    name: str
    quantity: float
    unit: str | None
    calories: float
    protein: float
    carbs: float
    fat: float

    @property
    def macros(self) -> MacroProfile:
        return MacroProfile(self.calories, self.protein, self.carbs, self.fat)


@dataclass(frozen=True)
class RecipeLine:
    """Stored recipe line, joined with the name of its catalog ingredient."""

    id: UUID
    recipe_id: UUID
    ingredient_id: UUID
    ingredient_name: str
    quantity: float
    unit: str | None
    calories: float
    protein: float
    carbs: float
    fat: float
    ordering: int

    @property
    def macros(self) -> MacroProfile:
        return MacroProfile(self.calories, self.protein, self.carbs, self.fat)


@dataclass(frozen=True)
class Recipe:
    """A user's recipe with totals derived from its lines."""

    id: UUID
    user_id: UUID
    name: str
    description: str | None
    servings: int
    total_calories: float
    total_protein: float
    total_carbs: float
    total_fat: float
    created_at: datetime
    lines: list[RecipeLine] = field(default_factory=list)

    @property
    def totals(self) -> MacroProfile:
        return MacroProfile(
            self.total_calories, self.total_protein, self.total_carbs, self.total_fat
        )

    def per_serving(self, servings: float) -> MacroProfile:
        """Return totals per recipe serving, multiplied by ``servings``."""
        recipe_servings = self.servings or 1
        return MacroProfile(
            calories=self.total_calories / recipe_servings * servings,
            protein=self.total_protein / recipe_servings * servings,
            carbs=self.total_carbs / recipe_servings * servings,
            fat=self.total_fat / recipe_servings * servings,
        )
