"""Shopping list domain models."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID


class ShoppingListSource(StrEnum):
    """Who owns a shopping list entry."""

    AUTO = "AUTO"
    MANUAL = "MANUAL"


@dataclass(frozen=True)
class ShoppingListItem:
    """A shopping list entry."""

    id: UUID
    user_id: UUID
    name: str
    quantity: float
    unit: str | None
    checked: bool
    source: ShoppingListSource
    created_at: datetime
