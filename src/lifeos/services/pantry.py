"""Pantry ledger and pantry management."""

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Protocol
from uuid import UUID, uuid4

from lifeos.domain.errors import InvalidInputError, NotFoundError
from lifeos.domain.pantry import LedgerOutcome, LedgerResult, PantryItem
from lifeos.domain.units import (
    clean_unit,
    is_commensurable,
    normalize_name,
    normalize_unit,
    round_quantity,
)
from lifeos.services.unit_of_work import (
    ChangeSet,
    DeletePantryItem,
    SavePantryItem,
    UnitOfWork,
)

_logger = logging.getLogger(__name__)


class PantryRepository(Protocol):
    """Persistence interface for pantry items."""

    def list_items(self, user_id: UUID) -> list[PantryItem]:
        """Return a user's pantry ordered by name."""

    def get_item(self, user_id: UUID, item_id: UUID) -> PantryItem | None:
        """Return a pantry item owned by the user."""


@dataclass
class PantryLedger:
    """A user's pantry stock as seen by one change set.

    Every operation updates the working copy and stages the matching write,
    so later operations in the same batch read earlier results. Stock never
    goes below zero and is rounded on every write.
    """

    user_id: UUID
    changes: ChangeSet
    items: dict[str, PantryItem] = field(default_factory=dict)

    @classmethod
    def load(
        cls, repository: PantryRepository, user_id: UUID, changes: ChangeSet
    ) -> "PantryLedger":
        """Build a ledger from the user's current pantry rows."""
        items = {
            normalize_name(item.name): item for item in repository.list_items(user_id)
        }
        return cls(user_id=user_id, changes=changes, items=items)

    def get(self, name: str) -> PantryItem | None:
        return self.items.get(normalize_name(name))

    def upsert(self, name: str, quantity: float, unit: str | None) -> LedgerResult:
        """Set the stock of ``name`` to ``quantity`` in ``unit``."""
        _require_finite(quantity)
        current = self.get(name)
        if current is None:
            created = self._create(name, quantity, unit)
            return LedgerResult(LedgerOutcome.CREATED_NEW, created)
        updated = replace(
            current, quantity=round_quantity(max(0.0, quantity)), unit=unit
        )
        self._write(current, updated)
        return LedgerResult(LedgerOutcome.APPLIED, updated)

    def increment(self, name: str, delta: float, unit: str | None) -> LedgerResult:
        """Add ``delta`` to the stock of ``name``, creating the row if needed."""
        _require_finite(delta)
        current = self.get(name)
        if current is None:
            created = self._create(name, delta, unit)
            return LedgerResult(LedgerOutcome.CREATED_NEW, created)
        return self._adjust(current, delta, unit)

    def decrement(self, name: str, delta: float, unit: str | None) -> LedgerResult:
        """Subtract ``delta`` from the stock of ``name``; absent rows are left alone."""
        _require_finite(delta)
        current = self.get(name)
        if current is None:
            return LedgerResult(LedgerOutcome.SKIPPED_MISSING, None)
        return self._adjust(current, -delta, unit)

    def _adjust(
        self, current: PantryItem, delta: float, unit: str | None
    ) -> LedgerResult:
        if not is_commensurable(current.unit, unit):
            _logger.warning(
                "Skipping pantry adjustment for %s: unit %s does not match %s",
                current.name,
                unit,
                current.unit,
            )
            return LedgerResult(LedgerOutcome.SKIPPED_INCOMMENSURABLE, current)
        updated = replace(
            current,
            quantity=round_quantity(max(0.0, current.quantity + delta)),
            unit=current.unit if normalize_unit(current.unit) else unit,
        )
        self._write(current, updated)
        return LedgerResult(LedgerOutcome.APPLIED, updated)

    def _create(self, name: str, quantity: float, unit: str | None) -> PantryItem:
        item = PantryItem(
            id=uuid4(),
            user_id=self.user_id,
            name=name.strip(),
            quantity=round_quantity(max(0.0, quantity)),
            unit=unit,
        )
        self.items[normalize_name(item.name)] = item
        self.changes.add(SavePantryItem(item, expected_quantity=None))
        return item

    def _write(self, current: PantryItem, updated: PantryItem) -> None:
        self.items[normalize_name(updated.name)] = updated
        self.changes.add(SavePantryItem(updated, expected_quantity=current.quantity))


def _require_finite(value: float) -> None:
    if not math.isfinite(value):
        raise InvalidInputError("Invalid payload", {"quantity": "must be finite"})


@dataclass
class PantryService:
    """Manual pantry edits."""

    repository: PantryRepository
    unit_of_work: UnitOfWork

    def list_items(self, user_id: UUID) -> list[PantryItem]:
        """Return the user's pantry."""
        return self.repository.list_items(user_id)

    def set_stock(
        self, user_id: UUID, name: str, quantity: float, unit: str | None
    ) -> PantryItem:
        """Create or overwrite the stock for an ingredient name."""
        if not name.strip():
            raise InvalidInputError("Invalid payload", {"name": "must not be empty"})
        changes = ChangeSet()
        ledger = PantryLedger.load(self.repository, user_id, changes)
        result = ledger.upsert(name, quantity, clean_unit(unit))
        changes.commit(self.unit_of_work)
        return result.item

    def update_item(
        self, user_id: UUID, item_id: UUID, payload: dict[str, object]
    ) -> PantryItem:
        """Edit a pantry row's name, quantity or unit."""
        current = self.repository.get_item(user_id, item_id)
        if current is None:
            raise NotFoundError("Pantry item")
        name = str(payload["name"]).strip() if payload.get("name") else current.name
        if normalize_name(name) != normalize_name(current.name):
            others = self.repository.list_items(user_id)
            if any(
                normalize_name(other.name) == normalize_name(name)
                for other in others
                if other.id != current.id
            ):
                raise InvalidInputError(
                    "Invalid payload", {"name": "already in the pantry"}
                )
        quantity = payload.get("quantity")
        if quantity is None:
            quantity = current.quantity
        unit = payload.get("unit")
        _require_finite(float(quantity))
        updated = replace(
            current,
            name=name,
            quantity=round_quantity(max(0.0, float(quantity))),
            unit=(
                clean_unit(unit if isinstance(unit, str) else None)
                if "unit" in payload
                else current.unit
            ),
        )
        changes = ChangeSet()
        changes.add(SavePantryItem(updated, expected_quantity=current.quantity))
        changes.commit(self.unit_of_work)
        return updated

    def delete_item(self, user_id: UUID, item_id: UUID) -> None:
        """Remove a pantry row."""
        current = self.repository.get_item(user_id, item_id)
        if current is None:
            raise NotFoundError("Pantry item")
        changes = ChangeSet()
        changes.add(DeletePantryItem(current.id))
        changes.commit(self.unit_of_work)
