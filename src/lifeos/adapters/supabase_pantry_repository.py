"""Supabase-backed pantry repository."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from lifeos.domain.pantry import PantryItem
from lifeos.services.pantry import PantryRepository


@dataclass
class SupabasePantryRepository(PantryRepository):
    """Supabase implementation for pantry rows."""

    client: Client

    def list_items(self, user_id: UUID) -> list[PantryItem]:
        response = (
            self.client.table("pantry_items")
            .select("id, user_id, name, quantity, unit")
            .eq("user_id", str(user_id))
            .order("name")
            .execute()
        )
        return [_parse_pantry_item(row) for row in response.data or []]

    def get_item(self, user_id: UUID, item_id: UUID) -> PantryItem | None:
        response = (
            self.client.table("pantry_items")
            .select("id, user_id, name, quantity, unit")
            .eq("id", str(item_id))
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if response.data:
            return _parse_pantry_item(response.data[0])
        return None


def _parse_pantry_item(row: dict[str, object]) -> PantryItem:
    return PantryItem(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        name=str(row["name"]),
        quantity=float(row.get("quantity") or 0),
        unit=row.get("unit"),
    )
