"""Pantry domain models."""

from dataclasses import dataclass
from enum import StrEnum
from uuid import UUID


@dataclass(frozen=True)
class PantryItem:
    """On-hand stock of one ingredient for a user."""

    id: UUID
    user_id: UUID
    name: str
    quantity: float
    unit: str | None


class LedgerOutcome(StrEnum):
    """What a pantry ledger operation did."""

    APPLIED = "applied"
    CREATED_NEW = "created_new"
    SKIPPED_INCOMMENSURABLE = "skipped_incommensurable"
    SKIPPED_MISSING = "skipped_missing"


@dataclass(frozen=True)
class LedgerResult:
    """Outcome of a pantry ledger operation and the resulting row, if any."""

    outcome: LedgerOutcome
    item: PantryItem | None
