"""Supabase unit of work: one RPC call applies a whole mutation batch.

PostgREST has no client-side transactions, so mutations are serialized into
an op list and handed to the ``apply_mutations`` Postgres function, which
runs them in a single transaction. See ``supabase/migrations``.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from postgrest.exceptions import APIError
from supabase import Client

from lifeos.domain.daily_logs import DailyLog
from lifeos.domain.errors import StaleWriteError
from lifeos.domain.nutrition import Ingredient, Recipe, RecipeLine
from lifeos.domain.pantry import PantryItem
from lifeos.domain.planning import MealPlan, MealSlot
from lifeos.domain.shopping import ShoppingListItem
from lifeos.services.unit_of_work import (
    ClearShoppingItems,
    DeleteDailyLog,
    DeletePantryItem,
    DeleteRecipe,
    DeleteShoppingItem,
    Mutation,
    ReplaceRecipeLines,
    SaveDailyLog,
    SaveIngredient,
    SaveMealPlan,
    SavePantryItem,
    SaveRecipe,
    SaveShoppingItem,
    UnitOfWork,
)

STALE_WRITE = "stale_write"
SERIALIZATION_FAILURE = "40001"

Op = dict[str, object]

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseUnitOfWork(UnitOfWork):
    """Commits mutation batches through the ``apply_mutations`` function."""

    client: Client

    def commit(self, mutations: Sequence[Mutation]) -> None:
        """Apply every mutation in one database transaction."""
        ops = serialize_mutations(mutations)
        if not ops:
            return
        try:
            self.client.rpc("apply_mutations", {"mutations": ops}).execute()
        except APIError as exc:
            if exc.code == SERIALIZATION_FAILURE or STALE_WRITE in (exc.message or ""):
                _logger.warning("Rejected stale write batch of %s ops", len(ops))
                raise StaleWriteError(str(exc.message)) from exc
            raise


def serialize_mutations(mutations: Sequence[Mutation]) -> list[Op]:
    """Translate mutation intents into ``apply_mutations`` ops, in order."""
    ops: list[Op] = []
    for mutation in mutations:
        ops.extend(_serialize(mutation))
    return ops


def _serialize(mutation: Mutation) -> list[Op]:  # noqa: PLR0911
    match mutation:
        case SaveIngredient(ingredient):
            return [_upsert("ingredients", _ingredient_row(ingredient))]
        case SaveRecipe(recipe):
            return [_upsert("recipes", _recipe_row(recipe))]
        case ReplaceRecipeLines(recipe_id, lines):
            return [
                _delete("recipe_ingredients", recipe_id=str(recipe_id)),
                *(_upsert("recipe_ingredients", _line_row(line)) for line in lines),
            ]
        case DeleteRecipe(recipe_id):
            return [
                _delete("recipe_ingredients", recipe_id=str(recipe_id)),
                _delete("recipes", id=str(recipe_id)),
            ]
        case SaveMealPlan(plan):
            return [
                _upsert("meal_plans", _plan_row(plan)),
                _delete("meal_slots", meal_plan_id=str(plan.id)),
                *(_upsert("meal_slots", _slot_row(slot)) for slot in plan.slots),
            ]
        case SavePantryItem(item, expected_quantity):
            op = _upsert("pantry_items", _pantry_row(item))
            if expected_quantity is not None:
                op["expect"] = {"quantity": expected_quantity}
            return [op]
        case DeletePantryItem(item_id):
            return [_delete("pantry_items", id=str(item_id))]
        case SaveShoppingItem(item):
            return [_upsert("shopping_list_items", _shopping_row(item))]
        case DeleteShoppingItem(item_id):
            return [_delete("shopping_list_items", id=str(item_id))]
        case ClearShoppingItems(user_id, source):
            return [
                _delete(
                    "shopping_list_items", user_id=str(user_id), source=str(source)
                )
            ]
        case SaveDailyLog(log):
            return [_upsert("daily_logs", _log_row(log))]
        case DeleteDailyLog(log_id):
            return [_delete("daily_logs", id=str(log_id))]
    raise TypeError(f"Unsupported mutation: {mutation!r}")


def _upsert(table: str, row: dict[str, object]) -> Op:
    return {"op": "upsert", "table": table, "row": row}


def _delete(table: str, **match: str) -> Op:
    return {"op": "delete", "table": table, "match": match}


def _ingredient_row(ingredient: Ingredient) -> dict[str, object]:
    return {
        "id": str(ingredient.id),
        "name": ingredient.name,
        "unit": ingredient.unit,
        "calories": ingredient.calories,
        "protein": ingredient.protein,
        "carbs": ingredient.carbs,
        "fat": ingredient.fat,
        "source": ingredient.source,
        "barcode": ingredient.barcode,
    }


def _recipe_row(recipe: Recipe) -> dict[str, object]:
    return {
        "id": str(recipe.id),
        "user_id": str(recipe.user_id),
        "name": recipe.name,
        "description": recipe.description,
        "servings": recipe.servings,
        "total_calories": recipe.total_calories,
        "total_protein": recipe.total_protein,
        "total_carbs": recipe.total_carbs,
        "total_fat": recipe.total_fat,
        "created_at": recipe.created_at.isoformat(),
    }


def _line_row(line: RecipeLine) -> dict[str, object]:
    return {
        "id": str(line.id),
        "recipe_id": str(line.recipe_id),
        "ingredient_id": str(line.ingredient_id),
        "quantity": line.quantity,
        "unit": line.unit,
        "calories": line.calories,
        "protein": line.protein,
        "carbs": line.carbs,
        "fat": line.fat,
        "ordering": line.ordering,
    }


def _plan_row(plan: MealPlan) -> dict[str, object]:
    return {
        "id": str(plan.id),
        "user_id": str(plan.user_id),
        "week_start": plan.week_start.isoformat(),
    }


def _slot_row(slot: MealSlot) -> dict[str, object]:
    return {
        "id": str(slot.id),
        "meal_plan_id": str(slot.meal_plan_id),
        "date": slot.date.isoformat(),
        "meal_type": str(slot.meal_type),
        "recipe_id": str(slot.recipe_id) if slot.recipe_id else None,
        "notes": slot.notes,
    }


def _pantry_row(item: PantryItem) -> dict[str, object]:
    return {
        "id": str(item.id),
        "user_id": str(item.user_id),
        "name": item.name,
        "quantity": item.quantity,
        "unit": item.unit,
    }


def _shopping_row(item: ShoppingListItem) -> dict[str, object]:
    return {
        "id": str(item.id),
        "user_id": str(item.user_id),
        "name": item.name,
        "quantity": item.quantity,
        "unit": item.unit,
        "checked": item.checked,
        "source": str(item.source),
        "created_at": item.created_at.isoformat(),
    }


def _log_row(log: DailyLog) -> dict[str, object]:
    return {
        "id": str(log.id),
        "user_id": str(log.user_id),
        "date": log.date.isoformat(),
        "meal_type": str(log.meal_type) if log.meal_type else None,
        "recipe_id": str(log.recipe_id) if log.recipe_id else None,
        "servings": log.servings,
        "calories": log.calories,
        "protein": log.protein,
        "carbs": log.carbs,
        "fat": log.fat,
        "notes": log.notes,
        "created_at": log.created_at.isoformat(),
    }
