"""Statistics over daily logs."""

from dataclasses import dataclass
from datetime import date, timedelta
from uuid import UUID

from lifeos.domain.daily_logs import DailyLog
from lifeos.domain.stats import DailyTotals, WeekSummary
from lifeos.services.daily_logs import DailyLogRepository
from lifeos.services.meal_plans import DAYS_PER_WEEK


@dataclass
class StatsService:
    """Service for computing nutrition totals per period."""

    repository: DailyLogRepository

    def get_week(self, user_id: UUID, week_start: date) -> WeekSummary:
        """Return per-day totals for the week and averages over logged days."""
        end = week_start + timedelta(days=DAYS_PER_WEEK - 1)
        logs = self.repository.list_logs(user_id, week_start, end)
        return _aggregate_week(week_start, logs)


def _aggregate_week(week_start: date, logs: list[DailyLog]) -> WeekSummary:
    per_day: dict[date, DailyTotals] = {}
    for log in logs:
        current = per_day.get(log.date) or DailyTotals(
            day=log.date, calories=0, protein=0, carbs=0, fat=0
        )
        per_day[log.date] = DailyTotals(
            day=log.date,
            calories=current.calories + log.calories,
            protein=current.protein + log.protein,
            carbs=current.carbs + log.carbs,
            fat=current.fat + log.fat,
        )

    days = [per_day[day] for day in sorted(per_day)]
    if not days:
        return WeekSummary(
            week_start=week_start,
            days=[],
            avg_calories=0.0,
            avg_protein=0.0,
            avg_carbs=0.0,
            avg_fat=0.0,
        )
    count = len(days)
    return WeekSummary(
        week_start=week_start,
        days=days,
        avg_calories=sum(day.calories for day in days) / count,
        avg_protein=sum(day.protein for day in days) / count,
        avg_carbs=sum(day.carbs for day in days) / count,
        avg_fat=sum(day.fat for day in days) / count,
    )
