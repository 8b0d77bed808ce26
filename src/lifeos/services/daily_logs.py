"""Daily food logs and the pantry consumption they imply."""

import math
from dataclasses import dataclass, replace
from datetime import UTC, date, datetime
from typing import Protocol
from uuid import UUID, uuid4

from lifeos.domain.daily_logs import DailyLog
from lifeos.domain.errors import InvalidInputError, NotFoundError
from lifeos.domain.nutrition import MacroProfile, Recipe
from lifeos.domain.pantry import LedgerResult
from lifeos.domain.planning import MealType
from lifeos.domain.units import round_calories, round_hundredths
from lifeos.services.pantry import PantryLedger, PantryRepository
from lifeos.services.recipes import RecipeRepository
from lifeos.services.unit_of_work import (
    ChangeSet,
    DeleteDailyLog,
    SaveDailyLog,
    UnitOfWork,
)

_MACRO_FIELDS = ("calories", "protein", "carbs", "fat")


class DailyLogRepository(Protocol):
    """Persistence interface for daily logs."""

    def get_log(self, user_id: UUID, log_id: UUID) -> DailyLog | None:
        """Return a log owned by the user."""

    def list_logs(
        self, user_id: UUID, start: date | None, end: date | None
    ) -> list[DailyLog]:
        """Return logs with ``start <= date <= end``, oldest first."""


def consume_recipe(
    ledger: PantryLedger, recipe: Recipe, servings: float
) -> list[LedgerResult]:
    """Take ``servings`` worth of the recipe's ingredients out of the pantry."""
    return [
        ledger.decrement(name, amount, unit)
        for name, amount, unit in _scaled_lines(recipe, servings)
    ]


def restore_recipe(
    ledger: PantryLedger, recipe: Recipe, servings: float
) -> list[LedgerResult]:
    """Put back what ``consume_recipe`` took for the same servings."""
    return [
        ledger.increment(name, amount, unit)
        for name, amount, unit in _scaled_lines(recipe, servings)
    ]


def _scaled_lines(
    recipe: Recipe, servings: float
) -> list[tuple[str, float, str | None]]:
    if servings <= 0:
        return []
    multiplier = servings / (recipe.servings or 1)
    scaled = []
    for line in sorted(recipe.lines, key=lambda line: line.ordering):
        amount = line.quantity * multiplier
        if not math.isfinite(amount) or amount <= 0:
            continue
        scaled.append((line.ingredient_name, amount, line.unit))
    return scaled


@dataclass
class DailyLogService:
    """Creates, edits and deletes daily logs, keeping the pantry in step.

    The pantry always reflects the logs that currently exist: an edit first
    restores what the old version consumed, then consumes for the new one,
    and both steps commit together with the log row.
    """

    repository: DailyLogRepository
    recipe_repository: RecipeRepository
    pantry_repository: PantryRepository
    unit_of_work: UnitOfWork

    def list_logs(
        self, user_id: UUID, start: date | None = None, end: date | None = None
    ) -> list[DailyLog]:
        """Return the user's logs in a date range."""
        return self.repository.list_logs(user_id, start, end)

    def create_log(self, user_id: UUID, payload: dict[str, object]) -> DailyLog:
        """Log a meal and consume its recipe from the pantry."""
        servings = _servings(payload.get("servings"), default=1.0)
        recipe = self._recipe(user_id, payload.get("recipe_id"))
        if recipe is not None:
            macros = recipe.per_serving(servings)
        else:
            macros = _manual_macros(payload, fallback=None)
        log = DailyLog(
            id=uuid4(),
            user_id=user_id,
            date=_require_date(payload.get("date")),
            meal_type=_meal_type(payload.get("meal_type")),
            recipe_id=recipe.id if recipe else None,
            servings=servings,
            calories=round_calories(macros.calories),
            protein=round_hundredths(macros.protein),
            carbs=round_hundredths(macros.carbs),
            fat=round_hundredths(macros.fat),
            notes=_text(payload.get("notes")),
            created_at=datetime.now(tz=UTC),
        )
        changes = ChangeSet()
        changes.add(SaveDailyLog(log))
        if recipe is not None:
            ledger = PantryLedger.load(self.pantry_repository, user_id, changes)
            consume_recipe(ledger, recipe, servings)
        changes.commit(self.unit_of_work)
        return log

    def update_log(
        self, user_id: UUID, log_id: UUID, payload: dict[str, object]
    ) -> DailyLog:
        """Apply a partial edit.

        An explicit ``recipe_id`` of None switches the log to manual macros.
        """
        existing = self._get(user_id, log_id)
        servings = _servings(payload.get("servings"), default=existing.servings)
        previous_recipe = (
            self.recipe_repository.get_recipe(user_id, existing.recipe_id)
            if existing.recipe_id
            else None
        )
        if "recipe_id" in payload:
            target_recipe = self._recipe(user_id, payload["recipe_id"])
        else:
            target_recipe = previous_recipe
        if target_recipe is not None:
            macros = target_recipe.per_serving(servings)
        else:
            macros = _manual_macros(payload, fallback=existing.macros)

        updated = replace(
            existing,
            date=(
                _require_date(payload["date"])
                if payload.get("date") is not None
                else existing.date
            ),
            meal_type=(
                _meal_type(payload["meal_type"])
                if "meal_type" in payload
                else existing.meal_type
            ),
            notes=_text(payload["notes"]) if "notes" in payload else existing.notes,
            recipe_id=target_recipe.id if target_recipe else None,
            servings=servings,
            calories=round_calories(macros.calories),
            protein=round_hundredths(macros.protein),
            carbs=round_hundredths(macros.carbs),
            fat=round_hundredths(macros.fat),
        )

        changes = ChangeSet()
        ledger = PantryLedger.load(self.pantry_repository, user_id, changes)
        if previous_recipe is not None:
            restore_recipe(ledger, previous_recipe, existing.servings)
        changes.add(SaveDailyLog(updated))
        if target_recipe is not None:
            consume_recipe(ledger, target_recipe, servings)
        changes.commit(self.unit_of_work)
        return updated

    def delete_log(self, user_id: UUID, log_id: UUID) -> None:
        """Delete a log and restore what it consumed."""
        existing = self._get(user_id, log_id)
        changes = ChangeSet()
        if existing.recipe_id:
            recipe = self.recipe_repository.get_recipe(user_id, existing.recipe_id)
            if recipe is not None:
                ledger = PantryLedger.load(self.pantry_repository, user_id, changes)
                restore_recipe(ledger, recipe, existing.servings)
        changes.add(DeleteDailyLog(existing.id))
        changes.commit(self.unit_of_work)

    def _get(self, user_id: UUID, log_id: UUID) -> DailyLog:
        log = self.repository.get_log(user_id, log_id)
        if log is None:
            raise NotFoundError("Daily log")
        return log

    def _recipe(self, user_id: UUID, recipe_id: object) -> Recipe | None:
        if recipe_id is None:
            return None
        recipe = self.recipe_repository.get_recipe(user_id, _uuid(recipe_id))
        if recipe is None:
            raise NotFoundError("Recipe")
        return recipe


def _servings(value: object, default: float) -> float:
    if value is None:
        return default
    servings = float(value)
    if not math.isfinite(servings) or servings <= 0:
        raise InvalidInputError("Invalid payload", {"servings": "must be positive"})
    return servings


def _manual_macros(
    payload: dict[str, object], fallback: MacroProfile | None
) -> MacroProfile:
    values: dict[str, float] = {}
    for field_name in _MACRO_FIELDS:
        raw = payload.get(field_name)
        if raw is None:
            values[field_name] = getattr(fallback, field_name) if fallback else 0.0
            continue
        value = float(raw)
        if not math.isfinite(value) or value < 0:
            raise InvalidInputError(
                "Invalid payload", {field_name: "must not be negative"}
            )
        values[field_name] = value
    return MacroProfile(**values)


def _require_date(value: object) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            pass
    raise InvalidInputError("Invalid payload", {"date": "must be a date"})


def _meal_type(value: object) -> MealType | None:
    if value is None:
        return None
    try:
        return MealType(str(value).upper())
    except ValueError as exc:
        raise InvalidInputError(
            "Invalid payload", {"meal_type": "unknown meal type"}
        ) from exc


def _uuid(value: object) -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError as exc:
        raise InvalidInputError(
            "Invalid payload", {"recipe_id": "must be a UUID"}
        ) from exc


def _text(value: object) -> str | None:
    if value is None:
        return None
    return str(value)
