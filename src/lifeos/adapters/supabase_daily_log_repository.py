"""Supabase-backed daily log repository."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from supabase import Client

from lifeos.domain.daily_logs import DailyLog
from lifeos.domain.planning import MealType
from lifeos.services.daily_logs import DailyLogRepository


@dataclass
class SupabaseDailyLogRepository(DailyLogRepository):
    """Supabase implementation for daily logs."""

    client: Client

    def get_log(self, user_id: UUID, log_id: UUID) -> DailyLog | None:
        response = (
            self.client.table("daily_logs")
            .select("*")
            .eq("id", str(log_id))
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if response.data:
            return _parse_log(response.data[0])
        return None

    def list_logs(
        self, user_id: UUID, start: date | None, end: date | None
    ) -> list[DailyLog]:
        request = (
            self.client.table("daily_logs").select("*").eq("user_id", str(user_id))
        )
        if start is not None:
            request = request.gte("date", start.isoformat())
        if end is not None:
            request = request.lte("date", end.isoformat())
        response = request.order("date").order("created_at").execute()
        return [_parse_log(row) for row in response.data or []]


def _parse_log(row: dict[str, object]) -> DailyLog:
    recipe_id = row.get("recipe_id")
    meal_type = row.get("meal_type")
    return DailyLog(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        date=date.fromisoformat(str(row["date"])[:10]),
        meal_type=MealType(str(meal_type)) if meal_type else None,
        recipe_id=UUID(str(recipe_id)) if recipe_id else None,
        servings=float(row.get("servings") or 1),
        calories=int(row.get("calories") or 0),
        protein=float(row.get("protein") or 0),
        carbs=float(row.get("carbs") or 0),
        fat=float(row.get("fat") or 0),
        notes=row.get("notes"),
        created_at=datetime.fromisoformat(str(row["created_at"])),
    )
