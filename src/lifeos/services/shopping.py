"""Shopping list: weekly reconciliation against the pantry and manual entries."""

import logging
from dataclasses import dataclass, replace
from datetime import UTC, date, datetime
from typing import Protocol
from uuid import UUID, uuid4

from lifeos.domain.errors import InvalidInputError, NotFoundError
from lifeos.domain.pantry import PantryItem
from lifeos.domain.planning import Requirement
from lifeos.domain.shopping import ShoppingListItem, ShoppingListSource
from lifeos.domain.units import (
    clean_unit,
    is_commensurable,
    normalize_name,
    normalize_unit,
    round_hundredths,
)
from lifeos.services.meal_plans import MealPlanService, RequirementKey
from lifeos.services.pantry import PantryLedger, PantryRepository
from lifeos.services.unit_of_work import (
    ChangeSet,
    ClearShoppingItems,
    DeleteShoppingItem,
    SaveShoppingItem,
    UnitOfWork,
)

_logger = logging.getLogger(__name__)


class ShoppingListRepository(Protocol):
    """Persistence interface for shopping list items."""

    def list_items(self, user_id: UUID) -> list[ShoppingListItem]:
        """Return a user's shopping list, oldest first."""

    def get_item(self, user_id: UUID, item_id: UUID) -> ShoppingListItem | None:
        """Return a shopping list item owned by the user."""


def subtract_pantry(
    required: dict[RequirementKey, Requirement], pantry: list[PantryItem]
) -> dict[RequirementKey, Requirement]:
    """Return what is still needed once pantry stock is used up.

    Each pantry row is spent once: first on the bucket with the same unit,
    then on buckets without a unit (or for a pantry row without a unit, on
    any bucket of that name). Buckets in an incompatible unit are skipped.
    """
    remaining = dict(required)
    for item in pantry:
        name_key = normalize_name(item.name)
        available = item.quantity
        candidates = [key for key in remaining if key[0] == name_key]
        candidates.sort(key=lambda key: key[1] != normalize_unit(item.unit))
        for key in candidates:
            if available <= 0:
                break
            requirement = remaining[key]
            if not is_commensurable(requirement.unit, item.unit):
                _logger.warning(
                    "Not subtracting pantry %s (%s) from requirement in %s",
                    item.name,
                    item.unit,
                    requirement.unit,
                )
                continue
            used = min(available, requirement.quantity)
            available -= used
            remaining[key] = replace(
                requirement, quantity=max(0.0, requirement.quantity - used)
            )
    return {key: value for key, value in remaining.items() if value.quantity > 0}


@dataclass
class ShoppingListService:
    """Generates and edits the user's shopping list."""

    repository: ShoppingListRepository
    pantry_repository: PantryRepository
    meal_plan_service: MealPlanService
    unit_of_work: UnitOfWork

    def list_items(self, user_id: UUID) -> list[ShoppingListItem]:
        """Return the user's shopping list."""
        return self.repository.list_items(user_id)

    def generate(self, user_id: UUID, week_start: date) -> list[ShoppingListItem]:
        """Replace the generated entries with what the week's plan still needs.

        Manual entries are never touched.
        """
        required = self.meal_plan_service.aggregate_week(user_id, week_start)
        pantry = self.pantry_repository.list_items(user_id)
        needed = subtract_pantry(required, pantry)
        created_at = datetime.now(tz=UTC)
        items = [
            ShoppingListItem(
                id=uuid4(),
                user_id=user_id,
                name=requirement.name,
                quantity=round_hundredths(requirement.quantity),
                unit=requirement.unit,
                checked=False,
                source=ShoppingListSource.AUTO,
                created_at=created_at,
            )
            for requirement in needed.values()
            if round_hundredths(requirement.quantity) > 0
        ]
        changes = ChangeSet()
        changes.add(ClearShoppingItems(user_id, ShoppingListSource.AUTO))
        for item in items:
            changes.add(SaveShoppingItem(item))
        changes.commit(self.unit_of_work)
        _logger.info(
            "Generated shopping list for user %s week %s: %s items",
            user_id,
            week_start.isoformat(),
            len(items),
        )
        return items

    def add_item(
        self, user_id: UUID, name: str, quantity: float, unit: str | None
    ) -> ShoppingListItem:
        """Add a manual entry."""
        if not name.strip():
            raise InvalidInputError("Invalid payload", {"name": "must not be empty"})
        if quantity < 0:
            raise InvalidInputError(
                "Invalid payload", {"quantity": "must not be negative"}
            )
        item = ShoppingListItem(
            id=uuid4(),
            user_id=user_id,
            name=name.strip(),
            quantity=quantity,
            unit=clean_unit(unit),
            checked=False,
            source=ShoppingListSource.MANUAL,
            created_at=datetime.now(tz=UTC),
        )
        changes = ChangeSet()
        changes.add(SaveShoppingItem(item))
        changes.commit(self.unit_of_work)
        return item

    def update_item(
        self, user_id: UUID, item_id: UUID, payload: dict[str, object]
    ) -> ShoppingListItem:
        """Edit an entry; checking it moves its quantity into the pantry.

        Unchecking does not take the quantity back out.
        """
        current = self._get(user_id, item_id)
        quantity = payload.get("quantity")
        unit = payload.get("unit")
        checked = payload.get("checked")
        updated = replace(
            current,
            checked=current.checked if checked is None else bool(checked),
            quantity=current.quantity if quantity is None else float(quantity),
            unit=(
                clean_unit(unit if isinstance(unit, str) else None)
                if "unit" in payload
                else current.unit
            ),
        )
        changes = ChangeSet()
        changes.add(SaveShoppingItem(updated))
        if updated.checked and not current.checked:
            ledger = PantryLedger.load(self.pantry_repository, user_id, changes)
            ledger.increment(updated.name, updated.quantity, updated.unit)
        changes.commit(self.unit_of_work)
        return updated

    def toggle_checked(
        self, user_id: UUID, item_id: UUID, checked: bool = True
    ) -> ShoppingListItem:
        """Check or uncheck an entry."""
        return self.update_item(user_id, item_id, {"checked": checked})

    def delete_item(self, user_id: UUID, item_id: UUID) -> None:
        """Remove an entry of either source."""
        current = self._get(user_id, item_id)
        changes = ChangeSet()
        changes.add(DeleteShoppingItem(current.id))
        changes.commit(self.unit_of_work)

    def _get(self, user_id: UUID, item_id: UUID) -> ShoppingListItem:
        item = self.repository.get_item(user_id, item_id)
        if item is None:
            raise NotFoundError("Item")
        return item
