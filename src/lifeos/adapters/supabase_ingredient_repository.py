"""Supabase-backed ingredient catalog repository."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from lifeos.domain.nutrition import Ingredient
from lifeos.services.catalog import IngredientRepository

_COLUMNS = "id, name, unit, calories, protein, carbs, fat, source, barcode"


@dataclass
class SupabaseIngredientRepository(IngredientRepository):
    """Supabase implementation for the shared ingredient catalog."""

    client: Client

    def find_by_name(self, name: str) -> Ingredient | None:
        """Return the ingredient matching ``name`` case-insensitively."""
        response = (
            self.client.table("ingredients")
            .select(_COLUMNS)
            .ilike("name", escape_like(name.strip()))
            .limit(1)
            .execute()
        )
        if response.data:
            return parse_ingredient(response.data[0])
        return None

    def find_by_barcode(self, barcode: str) -> Ingredient | None:
        """Return the ingredient imported for ``barcode``."""
        response = (
            self.client.table("ingredients")
            .select(_COLUMNS)
            .eq("barcode", barcode)
            .limit(1)
            .execute()
        )
        if response.data:
            return parse_ingredient(response.data[0])
        return None

    def search(self, query: str | None, limit: int) -> list[Ingredient]:
        """Return ingredients whose name contains ``query``."""
        request = self.client.table("ingredients").select(_COLUMNS)
        if query:
            request = request.ilike("name", f"%{escape_like(query)}%")
        response = request.order("name").limit(limit).execute()
        return [parse_ingredient(row) for row in response.data or []]


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so ``value`` matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def parse_ingredient(row: dict[str, object]) -> Ingredient:
    return Ingredient(
        id=UUID(str(row["id"])),
        name=str(row["name"]),
        unit=row.get("unit"),
        calories=float(row.get("calories") or 0),
        protein=float(row.get("protein") or 0),
        carbs=float(row.get("carbs") or 0),
        fat=float(row.get("fat") or 0),
        source=str(row.get("source") or "manual"),
        barcode=row.get("barcode"),
    )
