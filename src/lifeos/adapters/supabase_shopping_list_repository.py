"""Supabase-backed shopping list repository."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from lifeos.domain.shopping import ShoppingListItem, ShoppingListSource
from lifeos.services.shopping import ShoppingListRepository

_COLUMNS = "id, user_id, name, quantity, unit, checked, source, created_at"


@dataclass
class SupabaseShoppingListRepository(ShoppingListRepository):
    """Supabase implementation for shopping list items."""

    client: Client

    def list_items(self, user_id: UUID) -> list[ShoppingListItem]:
        response = (
            self.client.table("shopping_list_items")
            .select(_COLUMNS)
            .eq("user_id", str(user_id))
            .order("created_at")
            .execute()
        )
        return [_parse_item(row) for row in response.data or []]

    def get_item(self, user_id: UUID, item_id: UUID) -> ShoppingListItem | None:
        response = (
            self.client.table("shopping_list_items")
            .select(_COLUMNS)
            .eq("id", str(item_id))
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if response.data:
            return _parse_item(response.data[0])
        return None


def _parse_item(row: dict[str, object]) -> ShoppingListItem:
    return ShoppingListItem(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        name=str(row["name"]),
        quantity=float(row.get("quantity") or 0),
        unit=row.get("unit"),
        checked=bool(row.get("checked")),
        source=ShoppingListSource(str(row.get("source") or "MANUAL")),
        created_at=datetime.fromisoformat(str(row["created_at"])),
    )
