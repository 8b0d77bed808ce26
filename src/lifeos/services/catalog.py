"""Ingredient catalog: per-unit nutrition facts keyed by ingredient name."""

import logging
import math
from dataclasses import dataclass, replace
from typing import Protocol
from uuid import uuid4

from lifeos.domain.errors import InvalidInputError
from lifeos.domain.nutrition import Ingredient, RecipeLineInput
from lifeos.domain.units import normalize_name
from lifeos.services.estimation import NutritionEstimationService
from lifeos.services.unit_of_work import ChangeSet, SaveIngredient, UnitOfWork

_logger = logging.getLogger(__name__)

PER_100 = 100.0


class IngredientRepository(Protocol):
    """Persistence interface for catalog ingredients."""

    def find_by_name(self, name: str) -> Ingredient | None:
        """Return the ingredient whose trimmed name matches case-insensitively."""

    def find_by_barcode(self, barcode: str) -> Ingredient | None:
        """Return the ingredient with this barcode, if any."""

    def search(self, query: str | None, limit: int) -> list[Ingredient]:
        """Return ingredients whose name contains ``query``, ordered by name."""


@dataclass
class IngredientCatalog:
    """Application service for the shared ingredient catalog."""

    repository: IngredientRepository
    unit_of_work: UnitOfWork
    estimation_service: NutritionEstimationService | None = None

    def search(self, query: str | None, limit: int = 50) -> list[Ingredient]:
        """Search the catalog by name."""
        return self.repository.search(query.strip() if query else None, limit)

    def upsert_from_recipe_line(self, line: RecipeLineInput) -> Ingredient:
        """Create or update the catalog entry described by a recipe line."""
        changes = ChangeSet()
        ingredient = self.stage_from_recipe_line(line, changes, {})
        changes.commit(self.unit_of_work)
        return ingredient

    def stage_from_recipe_line(
        self,
        line: RecipeLineInput,
        changes: ChangeSet,
        staged: dict[str, Ingredient],
    ) -> Ingredient:
        """Stage the catalog upsert for a line without committing it.

        ``staged`` holds ingredients already staged in the same batch, keyed
        by normalized name, so repeated names within one recipe see each
        other's writes.
        """
        key = normalize_name(line.name)
        existing = staged.get(key) or self.repository.find_by_name(line.name)
        if existing is None:
            ingredient = Ingredient(
                id=uuid4(),
                name=line.name.strip(),
                unit=_clean_text(line.unit),
                calories=_per_unit(line.calories, line.quantity, 0.0),
                protein=_per_unit(line.protein, line.quantity, 0.0),
                carbs=_per_unit(line.carbs, line.quantity, 0.0),
                fat=_per_unit(line.fat, line.quantity, 0.0),
                source="recipe",
            )
        else:
            ingredient = replace(
                existing,
                unit=_clean_text(line.unit) or existing.unit,
                calories=_per_unit(line.calories, line.quantity, existing.calories),
                protein=_per_unit(line.protein, line.quantity, existing.protein),
                carbs=_per_unit(line.carbs, line.quantity, existing.carbs),
                fat=_per_unit(line.fat, line.quantity, existing.fat),
            )
        staged[key] = ingredient
        changes.add(SaveIngredient(ingredient))
        return ingredient

    async def create_ingredient(self, payload: dict[str, object]) -> Ingredient:
        """Create a catalog entry by hand, estimating macros when none are given."""
        name = str(payload.get("name") or "").strip()
        if not name:
            raise InvalidInputError("Invalid payload", {"name": "must not be empty"})
        if self.repository.find_by_name(name) is not None:
            raise InvalidInputError(
                "Ingredient already exists", {"name": "already exists"}
            )
        ingredient = Ingredient(
            id=uuid4(),
            name=name,
            unit=_clean_text(payload.get("unit")),
            calories=float(payload.get("calories") or 0.0),
            protein=float(payload.get("protein") or 0.0),
            carbs=float(payload.get("carbs") or 0.0),
            fat=float(payload.get("fat") or 0.0),
            source=str(payload.get("source") or "manual"),
            barcode=_clean_text(payload.get("barcode")),
        )
        if _has_no_macros(ingredient) and self.estimation_service is not None:
            estimate = await self.estimation_service.estimate(name)
            if estimate is not None:
                ingredient = replace(
                    ingredient,
                    unit=ingredient.unit or estimate.unit,
                    calories=estimate.calories / PER_100,
                    protein=estimate.protein / PER_100,
                    carbs=estimate.carbs / PER_100,
                    fat=estimate.fat / PER_100,
                    source="estimate",
                )
        changes = ChangeSet()
        changes.add(SaveIngredient(ingredient))
        changes.commit(self.unit_of_work)
        _logger.info("Created ingredient %s (source=%s)", name, ingredient.source)
        return ingredient


def _per_unit(absolute: float, quantity: float, fallback: float) -> float:
    if not math.isfinite(quantity) or quantity == 0:
        return fallback
    return absolute / quantity


def _has_no_macros(ingredient: Ingredient) -> bool:
    return not any(
        (ingredient.calories, ingredient.protein, ingredient.carbs, ingredient.fat)
    )


def _clean_text(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    cleaned = value.strip()
    return cleaned or None
