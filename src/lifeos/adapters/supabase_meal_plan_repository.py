"""Supabase-backed meal plan repository."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from supabase import Client

from lifeos.domain.planning import MealPlan, MealSlot, MealType
from lifeos.services.meal_plans import MealPlanRepository


@dataclass
class SupabaseMealPlanRepository(MealPlanRepository):
    """Supabase implementation for weekly meal plans."""

    client: Client

    def get_plan(self, user_id: UUID, week_start: date) -> MealPlan | None:
        """Return the plan for a week with its slots."""
        response = (
            self.client.table("meal_plans")
            .select("id, user_id, week_start, meal_slots(*)")
            .eq("user_id", str(user_id))
            .eq("week_start", week_start.isoformat())
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        slots = [_parse_slot(slot) for slot in row.get("meal_slots") or []]
        return MealPlan(
            id=UUID(str(row["id"])),
            user_id=UUID(str(row["user_id"])),
            week_start=date.fromisoformat(str(row["week_start"])),
            slots=sorted(slots, key=lambda slot: slot.date),
        )


def _parse_slot(row: dict[str, object]) -> MealSlot:
    recipe_id = row.get("recipe_id")
    return MealSlot(
        id=UUID(str(row["id"])),
        meal_plan_id=UUID(str(row["meal_plan_id"])),
        date=date.fromisoformat(str(row["date"])[:10]),
        meal_type=MealType(str(row["meal_type"])),
        recipe_id=UUID(str(recipe_id)) if recipe_id else None,
        notes=row.get("notes"),
    )
