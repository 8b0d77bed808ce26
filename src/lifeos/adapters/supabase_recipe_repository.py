"""Supabase-backed recipe repository."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from lifeos.domain.nutrition import Recipe, RecipeLine
from lifeos.services.recipes import RecipeRepository

_SELECT = "*, recipe_ingredients(*, ingredients(name))"


@dataclass
class SupabaseRecipeRepository(RecipeRepository):
    """Supabase implementation for recipes and their lines."""

    client: Client

    def list_recipes(self, user_id: UUID) -> list[Recipe]:
        """Return a user's recipes, newest first."""
        response = (
            self.client.table("recipes")
            .select(_SELECT)
            .eq("user_id", str(user_id))
            .order("created_at", desc=True)
            .execute()
        )
        return [_parse_recipe(row) for row in response.data or []]

    def get_recipe(self, user_id: UUID, recipe_id: UUID) -> Recipe | None:
        """Return one recipe owned by the user."""
        response = (
            self.client.table("recipes")
            .select(_SELECT)
            .eq("id", str(recipe_id))
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if response.data:
            return _parse_recipe(response.data[0])
        return None


def _parse_recipe(row: dict[str, object]) -> Recipe:
    lines = [_parse_line(line) for line in row.get("recipe_ingredients") or []]
    return Recipe(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        name=str(row["name"]),
        description=row.get("description"),
        servings=int(row.get("servings") or 1),
        total_calories=float(row.get("total_calories") or 0),
        total_protein=float(row.get("total_protein") or 0),
        total_carbs=float(row.get("total_carbs") or 0),
        total_fat=float(row.get("total_fat") or 0),
        created_at=datetime.fromisoformat(str(row["created_at"])),
        lines=sorted(lines, key=lambda line: line.ordering),
    )


def _parse_line(row: dict[str, object]) -> RecipeLine:
    ingredient = row.get("ingredients") or {}
    return RecipeLine(
        id=UUID(str(row["id"])),
        recipe_id=UUID(str(row["recipe_id"])),
        ingredient_id=UUID(str(row["ingredient_id"])),
        ingredient_name=str(ingredient.get("name") or ""),
        quantity=float(row["quantity"]),
        unit=row.get("unit"),
        calories=float(row.get("calories") or 0),
        protein=float(row.get("protein") or 0),
        carbs=float(row.get("carbs") or 0),
        fat=float(row.get("fat") or 0),
        ordering=int(row.get("ordering") or 0),
    )
