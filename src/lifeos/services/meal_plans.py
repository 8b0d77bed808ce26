"""Weekly meal plans and the ingredient requirements they imply."""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Protocol
from uuid import UUID, uuid4

from lifeos.domain.errors import InvalidInputError, NotFoundError
from lifeos.domain.nutrition import Recipe
from lifeos.domain.planning import MealPlan, MealSlot, MealSlotInput, Requirement
from lifeos.domain.units import normalize_name, normalize_unit
from lifeos.services.recipes import RecipeRepository
from lifeos.services.unit_of_work import ChangeSet, SaveMealPlan, UnitOfWork

DAYS_PER_WEEK = 7

RequirementKey = tuple[str, str | None]


class MealPlanRepository(Protocol):
    """Persistence interface for meal plans."""

    def get_plan(self, user_id: UUID, week_start: date) -> MealPlan | None:
        """Return the plan for a week with its slots ordered by date."""


def week_range(week_start: date) -> tuple[date, date]:
    """Return the half-open ``[start, end)`` range of a week."""
    return week_start, week_start + timedelta(days=DAYS_PER_WEEK)


@dataclass
class MealPlanService:
    """Replaces weekly plans and aggregates what they require."""

    repository: MealPlanRepository
    recipe_repository: RecipeRepository
    unit_of_work: UnitOfWork

    def get_plan(self, user_id: UUID, week_start: date) -> MealPlan | None:
        """Return the plan for the week, if one exists."""
        return self.repository.get_plan(user_id, week_start)

    def replace_plan(
        self, user_id: UUID, week_start: date, slots: list[MealSlotInput]
    ) -> MealPlan:
        """Replace every slot of the week's plan, creating the plan if needed."""
        if not slots:
            raise InvalidInputError(
                "Invalid payload", {"slots": "at least one slot is required"}
            )
        for slot in slots:
            if self.recipe_repository.get_recipe(user_id, slot.recipe_id) is None:
                raise NotFoundError("Recipe")
        existing = self.repository.get_plan(user_id, week_start)
        plan_id = existing.id if existing else uuid4()
        plan = MealPlan(
            id=plan_id,
            user_id=user_id,
            week_start=week_start,
            slots=sorted(
                (
                    MealSlot(
                        id=uuid4(),
                        meal_plan_id=plan_id,
                        date=slot.date,
                        meal_type=slot.meal_type,
                        recipe_id=slot.recipe_id,
                        notes=slot.notes,
                    )
                    for slot in slots
                ),
                key=lambda slot: slot.date,
            ),
        )
        changes = ChangeSet()
        changes.add(SaveMealPlan(plan))
        changes.commit(self.unit_of_work)
        return plan

    def aggregate_week(
        self, user_id: UUID, week_start: date
    ) -> dict[RequirementKey, Requirement]:
        """Sum line quantities of every recipe planned in the week.

        Buckets are keyed by normalized ingredient name and unit, so the same
        ingredient in two different units stays in two buckets.
        """
        plan = self.repository.get_plan(user_id, week_start)
        if plan is None:
            return {}
        start, end = week_range(week_start)
        recipes: dict[UUID, Recipe | None] = {}
        required: dict[RequirementKey, Requirement] = {}
        for slot in plan.slots:
            if slot.recipe_id is None or not start <= slot.date < end:
                continue
            if slot.recipe_id not in recipes:
                recipes[slot.recipe_id] = self.recipe_repository.get_recipe(
                    user_id, slot.recipe_id
                )
            recipe = recipes[slot.recipe_id]
            if recipe is None:
                continue
            for line in recipe.lines:
                key = (normalize_name(line.ingredient_name), normalize_unit(line.unit))
                current = required.get(key)
                if current is None:
                    required[key] = Requirement(
                        name=line.ingredient_name,
                        unit=line.unit,
                        quantity=line.quantity,
                    )
                else:
                    required[key] = Requirement(
                        name=current.name,
                        unit=current.unit,
                        quantity=current.quantity + line.quantity,
                    )
        return required
