"""Recipe service: stored lines and the totals derived from them."""

import math
from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID, uuid4

from lifeos.domain.errors import InvalidInputError, NotFoundError
from lifeos.domain.nutrition import (
    ZERO_MACROS,
    Ingredient,
    MacroProfile,
    Recipe,
    RecipeLine,
    RecipeLineInput,
)
from lifeos.services.catalog import IngredientCatalog
from lifeos.services.unit_of_work import (
    ChangeSet,
    DeleteRecipe,
    ReplaceRecipeLines,
    SaveRecipe,
    UnitOfWork,
)

COPY_SUFFIX = " (copy)"


class RecipeRepository(Protocol):
    """Persistence interface for recipes and their lines."""

    def list_recipes(self, user_id: UUID) -> list[Recipe]:
        """Return a user's recipes with lines, newest first."""

    def get_recipe(self, user_id: UUID, recipe_id: UUID) -> Recipe | None:
        """Return a user's recipe with lines ordered by ``ordering``."""


def compute_totals(lines: Iterable[RecipeLineInput | RecipeLine]) -> MacroProfile:
    """Sum the absolute macros of recipe lines."""
    total = ZERO_MACROS
    for line in lines:
        total = total.plus(line.macros)
    return total


@dataclass
class RecipeService:
    """Creates, updates and copies recipes, keeping totals in step with lines."""

    repository: RecipeRepository
    catalog: IngredientCatalog
    unit_of_work: UnitOfWork

    def list_recipes(self, user_id: UUID) -> list[Recipe]:
        """Return the user's recipes."""
        return self.repository.list_recipes(user_id)

    def get_recipe(self, user_id: UUID, recipe_id: UUID) -> Recipe:
        """Return a recipe or raise ``NotFoundError``."""
        recipe = self.repository.get_recipe(user_id, recipe_id)
        if recipe is None:
            raise NotFoundError("Recipe")
        return recipe

    def create_recipe(  # noqa: PLR0913
        self,
        user_id: UUID,
        name: str,
        description: str | None,
        servings: int,
        lines: list[RecipeLineInput],
    ) -> Recipe:
        """Create a recipe with its lines."""
        _validate_recipe(name, servings, lines)
        recipe = Recipe(
            id=uuid4(),
            user_id=user_id,
            name=name.strip(),
            description=description,
            servings=servings,
            total_calories=0.0,
            total_protein=0.0,
            total_carbs=0.0,
            total_fat=0.0,
            created_at=datetime.now(tz=UTC),
        )
        changes = ChangeSet()
        recipe = self._stage_lines(recipe, lines, changes)
        changes.commit(self.unit_of_work)
        return recipe

    def update_recipe(  # noqa: PLR0913
        self,
        user_id: UUID,
        recipe_id: UUID,
        name: str,
        description: str | None,
        servings: int,
        lines: list[RecipeLineInput],
    ) -> Recipe:
        """Replace a recipe's fields and all of its lines."""
        _validate_recipe(name, servings, lines)
        existing = self.get_recipe(user_id, recipe_id)
        recipe = replace(
            existing, name=name.strip(), description=description, servings=servings
        )
        changes = ChangeSet()
        recipe = self._stage_lines(recipe, lines, changes)
        changes.commit(self.unit_of_work)
        return recipe

    def replace_lines(
        self, user_id: UUID, recipe_id: UUID, lines: list[RecipeLineInput]
    ) -> Recipe:
        """Replace a recipe's lines and recompute its totals atomically."""
        existing = self.get_recipe(user_id, recipe_id)
        _validate_recipe(existing.name, existing.servings, lines)
        changes = ChangeSet()
        recipe = self._stage_lines(existing, lines, changes)
        changes.commit(self.unit_of_work)
        return recipe

    def duplicate_recipe(self, user_id: UUID, recipe_id: UUID) -> Recipe:
        """Copy a recipe and its lines verbatim under a new name."""
        source = self.get_recipe(user_id, recipe_id)
        copy_id = uuid4()
        lines = [
            replace(line, id=uuid4(), recipe_id=copy_id)
            for line in sorted(source.lines, key=lambda line: line.ordering)
        ]
        duplicate = replace(
            source,
            id=copy_id,
            name=f"{source.name}{COPY_SUFFIX}",
            created_at=datetime.now(tz=UTC),
            lines=lines,
        )
        changes = ChangeSet()
        changes.add(SaveRecipe(duplicate))
        changes.add(ReplaceRecipeLines(copy_id, lines))
        changes.commit(self.unit_of_work)
        return duplicate

    def delete_recipe(self, user_id: UUID, recipe_id: UUID) -> None:
        """Delete a recipe and its lines."""
        recipe = self.get_recipe(user_id, recipe_id)
        changes = ChangeSet()
        changes.add(DeleteRecipe(recipe.id))
        changes.commit(self.unit_of_work)

    def _stage_lines(
        self, recipe: Recipe, inputs: list[RecipeLineInput], changes: ChangeSet
    ) -> Recipe:
        staged: dict[str, Ingredient] = {}
        lines: list[RecipeLine] = []
        for index, line_input in enumerate(inputs):
            ingredient = self.catalog.stage_from_recipe_line(
                line_input, changes, staged
            )
            lines.append(
                RecipeLine(
                    id=uuid4(),
                    recipe_id=recipe.id,
                    ingredient_id=ingredient.id,
                    ingredient_name=ingredient.name,
                    quantity=line_input.quantity,
                    unit=_line_unit(line_input.unit, ingredient),
                    calories=line_input.calories,
                    protein=line_input.protein,
                    carbs=line_input.carbs,
                    fat=line_input.fat,
                    ordering=index,
                )
            )
        totals = compute_totals(lines)
        updated = replace(
            recipe,
            total_calories=totals.calories,
            total_protein=totals.protein,
            total_carbs=totals.carbs,
            total_fat=totals.fat,
            lines=lines,
        )
        changes.add(SaveRecipe(updated))
        changes.add(ReplaceRecipeLines(updated.id, lines))
        return updated


def _line_unit(unit: str | None, ingredient: Ingredient) -> str | None:
    if unit and unit.strip():
        return unit.strip()
    return ingredient.unit


def _validate_recipe(name: str, servings: int, lines: list[RecipeLineInput]) -> None:
    errors: dict[str, str] = {}
    if not name or not name.strip():
        errors["name"] = "must not be empty"
    if servings <= 0:
        errors["servings"] = "must be positive"
    if not lines:
        errors["ingredients"] = "at least one ingredient is required"
    for index, line in enumerate(lines):
        if not line.name.strip():
            errors[f"ingredients.{index}.name"] = "must not be empty"
        if not math.isfinite(line.quantity) or line.quantity <= 0:
            errors[f"ingredients.{index}.quantity"] = "must be positive"
        for field_name in ("calories", "protein", "carbs", "fat"):
            if getattr(line, field_name) < 0:
                errors[f"ingredients.{index}.{field_name}"] = "must not be negative"
    if errors:
        raise InvalidInputError("Invalid payload", errors)
