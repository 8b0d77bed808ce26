"""Atomic write batches.

Services never write rows directly. They stage typed mutations on a
``ChangeSet`` in program order and hand the whole batch to a ``UnitOfWork``,
which applies all of it or none of it.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol
from uuid import UUID

from lifeos.domain.daily_logs import DailyLog
from lifeos.domain.nutrition import Ingredient, Recipe, RecipeLine
from lifeos.domain.pantry import PantryItem
from lifeos.domain.planning import MealPlan
from lifeos.domain.shopping import ShoppingListItem, ShoppingListSource


@dataclass(frozen=True)
class SaveIngredient:
    ingredient: Ingredient


@dataclass(frozen=True)
class SaveRecipe:
    """Insert or update the recipe row; lines are handled separately."""

    recipe: Recipe


@dataclass(frozen=True)
class ReplaceRecipeLines:
    recipe_id: UUID
    lines: list[RecipeLine]


@dataclass(frozen=True)
class DeleteRecipe:
    recipe_id: UUID


@dataclass(frozen=True)
class SaveMealPlan:
    """Insert or update the plan row and replace all of its slots."""

    plan: MealPlan


@dataclass(frozen=True)
class SavePantryItem:
    """Write a pantry row.

    ``expected_quantity`` is the quantity the row had when it was read; the
    write fails with ``StaleWriteError`` if the stored value differs. None
    means the row is new.
    """

    item: PantryItem
    expected_quantity: float | None = None


@dataclass(frozen=True)
class DeletePantryItem:
    item_id: UUID


@dataclass(frozen=True)
class SaveShoppingItem:
    item: ShoppingListItem


@dataclass(frozen=True)
class DeleteShoppingItem:
    item_id: UUID


@dataclass(frozen=True)
class ClearShoppingItems:
    """Delete every shopping list entry of ``source`` for the user."""

    user_id: UUID
    source: ShoppingListSource


@dataclass(frozen=True)
class SaveDailyLog:
    log: DailyLog


@dataclass(frozen=True)
class DeleteDailyLog:
    log_id: UUID


Mutation = (
    SaveIngredient
    | SaveRecipe
    | ReplaceRecipeLines
    | DeleteRecipe
    | SaveMealPlan
    | SavePantryItem
    | DeletePantryItem
    | SaveShoppingItem
    | DeleteShoppingItem
    | ClearShoppingItems
    | SaveDailyLog
    | DeleteDailyLog
)


class UnitOfWork(Protocol):
    """Applies a batch of mutations atomically."""

    def commit(self, mutations: Sequence[Mutation]) -> None:
        """Apply every mutation in order, or none of them."""


@dataclass
class ChangeSet:
    """Ordered collection of staged mutations."""

    mutations: list[Mutation] = field(default_factory=list)

    def add(self, mutation: Mutation) -> None:
        self.mutations.append(mutation)

    def commit(self, unit_of_work: UnitOfWork) -> None:
        """Hand the staged mutations to ``unit_of_work`` and clear them."""
        if not self.mutations:
            return
        unit_of_work.commit(list(self.mutations))
        self.mutations.clear()
