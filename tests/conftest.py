"""Shared test fixtures."""

import copy
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from datetime import date
from uuid import UUID, uuid4

import pytest

from lifeos.adapters.openfoodfacts_client import OpenFoodFactsClient
from lifeos.config import Settings
from lifeos.containers import AppContainer
from lifeos.domain.daily_logs import DailyLog
from lifeos.domain.errors import StaleWriteError
from lifeos.domain.nutrition import Ingredient, Recipe, RecipeLine
from lifeos.domain.pantry import PantryItem
from lifeos.domain.planning import MealPlan
from lifeos.domain.shopping import ShoppingListItem
from lifeos.domain.units import normalize_name
from lifeos.services.auth import TokenVerifier
from lifeos.services.cache import InMemoryCache
from lifeos.services.catalog import IngredientCatalog, IngredientRepository
from lifeos.services.daily_logs import DailyLogRepository, DailyLogService
from lifeos.services.estimation import EstimationClient, NutritionEstimationService
from lifeos.services.meal_plans import MealPlanRepository, MealPlanService
from lifeos.services.pantry import PantryRepository, PantryService
from lifeos.services.products import ProductLookupService
from lifeos.services.recipes import RecipeRepository, RecipeService
from lifeos.services.shopping import ShoppingListRepository, ShoppingListService
from lifeos.services.stats import StatsService
from lifeos.services.unit_of_work import (
    ClearShoppingItems,
    DeleteDailyLog,
    DeletePantryItem,
    DeleteRecipe,
    DeleteShoppingItem,
    Mutation,
    ReplaceRecipeLines,
    SaveDailyLog,
    SaveIngredient,
    SaveMealPlan,
    SavePantryItem,
    SaveRecipe,
    SaveShoppingItem,
    UnitOfWork,
)

USER_ID = UUID("00000000-0000-0000-0000-000000000001")
OTHER_USER_ID = UUID("00000000-0000-0000-0000-000000000002")
TOKEN = "user-token"
OTHER_TOKEN = "other-token"


@dataclass
class InMemoryDatabase:
    """Rows keyed by id, one dict per table."""

    ingredients: dict[UUID, Ingredient] = field(default_factory=dict)
    recipes: dict[UUID, Recipe] = field(default_factory=dict)
    recipe_lines: dict[UUID, list[RecipeLine]] = field(default_factory=dict)
    meal_plans: dict[UUID, MealPlan] = field(default_factory=dict)
    pantry: dict[UUID, PantryItem] = field(default_factory=dict)
    shopping: dict[UUID, ShoppingListItem] = field(default_factory=dict)
    logs: dict[UUID, DailyLog] = field(default_factory=dict)


@dataclass
class InMemoryUnitOfWork(UnitOfWork):
    """Applies batches to a copy of the database and swaps it in on success."""

    db: InMemoryDatabase
    commits: list[list[Mutation]] = field(default_factory=list)
    fail_on: type | None = None

    def commit(self, mutations: Sequence[Mutation]) -> None:
        working = copy.deepcopy(self.db)
        for mutation in mutations:
            if self.fail_on is not None and isinstance(mutation, self.fail_on):
                raise RuntimeError("Simulated storage failure")
            _apply(working, mutation)
        self.db.__dict__.update(working.__dict__)
        self.commits.append(list(mutations))


def _apply(db: InMemoryDatabase, mutation: Mutation) -> None:  # noqa: PLR0912
    match mutation:
        case SaveIngredient(ingredient):
            for existing in db.ingredients.values():
                if existing.id != ingredient.id and normalize_name(
                    existing.name
                ) == normalize_name(ingredient.name):
                    raise RuntimeError("duplicate ingredient name")
            db.ingredients[ingredient.id] = ingredient
        case SaveRecipe(recipe):
            db.recipes[recipe.id] = replace(recipe, lines=[])
        case ReplaceRecipeLines(recipe_id, lines):
            db.recipe_lines[recipe_id] = list(lines)
        case DeleteRecipe(recipe_id):
            db.recipes.pop(recipe_id, None)
            db.recipe_lines.pop(recipe_id, None)
        case SaveMealPlan(plan):
            db.meal_plans[plan.id] = plan
        case SavePantryItem(item, expected_quantity):
            stored = db.pantry.get(item.id)
            if expected_quantity is not None and (
                stored is None or stored.quantity != expected_quantity
            ):
                raise StaleWriteError("stale_write")
            for existing in db.pantry.values():
                if (
                    existing.id != item.id
                    and existing.user_id == item.user_id
                    and normalize_name(existing.name) == normalize_name(item.name)
                ):
                    raise RuntimeError("duplicate pantry name")
            db.pantry[item.id] = item
        case DeletePantryItem(item_id):
            db.pantry.pop(item_id, None)
        case SaveShoppingItem(item):
            db.shopping[item.id] = item
        case DeleteShoppingItem(item_id):
            db.shopping.pop(item_id, None)
        case ClearShoppingItems(user_id, source):
            db.shopping = {
                key: item
                for key, item in db.shopping.items()
                if not (item.user_id == user_id and item.source == source)
            }
        case SaveDailyLog(log):
            db.logs[log.id] = log
        case DeleteDailyLog(log_id):
            db.logs.pop(log_id, None)


@dataclass
class InMemoryIngredientRepository(IngredientRepository):
    db: InMemoryDatabase

    def find_by_name(self, name: str) -> Ingredient | None:
        for ingredient in self.db.ingredients.values():
            if normalize_name(ingredient.name) == normalize_name(name):
                return ingredient
        return None

    def find_by_barcode(self, barcode: str) -> Ingredient | None:
        for ingredient in self.db.ingredients.values():
            if ingredient.barcode == barcode:
                return ingredient
        return None

    def search(self, query: str | None, limit: int) -> list[Ingredient]:
        matches = [
            ingredient
            for ingredient in self.db.ingredients.values()
            if not query or query.lower() in ingredient.name.lower()
        ]
        return sorted(matches, key=lambda ingredient: ingredient.name)[:limit]


@dataclass
class InMemoryRecipeRepository(RecipeRepository):
    db: InMemoryDatabase

    def list_recipes(self, user_id: UUID) -> list[Recipe]:
        recipes = [
            self._with_lines(recipe)
            for recipe in self.db.recipes.values()
            if recipe.user_id == user_id
        ]
        return sorted(recipes, key=lambda recipe: recipe.created_at, reverse=True)

    def get_recipe(self, user_id: UUID, recipe_id: UUID) -> Recipe | None:
        recipe = self.db.recipes.get(recipe_id)
        if recipe is None or recipe.user_id != user_id:
            return None
        return self._with_lines(recipe)

    def _with_lines(self, recipe: Recipe) -> Recipe:
        lines = []
        for line in self.db.recipe_lines.get(recipe.id, []):
            ingredient = self.db.ingredients[line.ingredient_id]
            lines.append(replace(line, ingredient_name=ingredient.name))
        return replace(
            recipe, lines=sorted(lines, key=lambda line: line.ordering)
        )


@dataclass
class InMemoryMealPlanRepository(MealPlanRepository):
    db: InMemoryDatabase

    def get_plan(self, user_id: UUID, week_start: date) -> MealPlan | None:
        for plan in self.db.meal_plans.values():
            if plan.user_id == user_id and plan.week_start == week_start:
                return plan
        return None


@dataclass
class InMemoryPantryRepository(PantryRepository):
    db: InMemoryDatabase

    def list_items(self, user_id: UUID) -> list[PantryItem]:
        items = [item for item in self.db.pantry.values() if item.user_id == user_id]
        return sorted(items, key=lambda item: item.name)

    def get_item(self, user_id: UUID, item_id: UUID) -> PantryItem | None:
        item = self.db.pantry.get(item_id)
        if item is None or item.user_id != user_id:
            return None
        return item


@dataclass
class InMemoryShoppingListRepository(ShoppingListRepository):
    db: InMemoryDatabase

    def list_items(self, user_id: UUID) -> list[ShoppingListItem]:
        items = [item for item in self.db.shopping.values() if item.user_id == user_id]
        return sorted(items, key=lambda item: item.created_at)

    def get_item(self, user_id: UUID, item_id: UUID) -> ShoppingListItem | None:
        item = self.db.shopping.get(item_id)
        if item is None or item.user_id != user_id:
            return None
        return item


@dataclass
class InMemoryDailyLogRepository(DailyLogRepository):
    db: InMemoryDatabase

    def get_log(self, user_id: UUID, log_id: UUID) -> DailyLog | None:
        log = self.db.logs.get(log_id)
        if log is None or log.user_id != user_id:
            return None
        return log

    def list_logs(
        self, user_id: UUID, start: date | None, end: date | None
    ) -> list[DailyLog]:
        logs = [
            log
            for log in self.db.logs.values()
            if log.user_id == user_id
            and (start is None or log.date >= start)
            and (end is None or log.date <= end)
        ]
        return sorted(logs, key=lambda log: (log.date, log.created_at))


@dataclass
class FakeTokenVerifier(TokenVerifier):
    """Token verifier with a fixed token table."""

    tokens: dict[str, UUID] = field(
        default_factory=lambda: {TOKEN: USER_ID, OTHER_TOKEN: OTHER_USER_ID}
    )

    def verify(self, token: str) -> UUID | None:
        return self.tokens.get(token)


@dataclass
class FakeEstimationClient(EstimationClient):
    """Fake LLM client returning a fixed per-100 g estimate."""

    payload: dict[str, object] = field(
        default_factory=lambda: {
            "calories": 130,
            "protein": 2.7,
            "carbs": 28,
            "fat": 0.3,
            "unit": "g",
        }
    )
    prompts: list[str] = field(default_factory=list)

    async def complete_json(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        schema: dict[str, object],
    ) -> dict[str, object]:
        self.prompts.append(prompt)
        return self.payload


@dataclass
class FakeOpenFoodFactsClient(OpenFoodFactsClient):
    """Fake OpenFoodFacts client with products keyed by barcode."""

    products: dict[str, dict[str, object]] = field(
        default_factory=lambda: {
            "3017620422003": {
                "code": "3017620422003",
                "product_name": "Nutella",
                "brands": "Ferrero, Nutella",
                "nutriments": {
                    "energy-kcal_100g": 539,
                    "proteins_100g": 6.3,
                    "carbohydrates_100g": 57.5,
                    "fat_100g": 30.9,
                },
            }
        }
    )
    calls: list[str] = field(default_factory=list)

    async def get_product(self, barcode: str) -> dict[str, object] | None:
        self.calls.append(barcode)
        return self.products.get(barcode)


@dataclass
class Services:
    """Services wired against one in-memory database."""

    db: InMemoryDatabase
    unit_of_work: InMemoryUnitOfWork
    catalog: IngredientCatalog
    recipes: RecipeService
    meal_plans: MealPlanService
    pantry: PantryService
    shopping: ShoppingListService
    daily_logs: DailyLogService
    stats: StatsService
    products: ProductLookupService
    off_client: FakeOpenFoodFactsClient
    estimation_client: FakeEstimationClient


def build_services(settings: Settings | None = None) -> Services:
    db = InMemoryDatabase()
    unit_of_work = InMemoryUnitOfWork(db)
    ingredient_repository = InMemoryIngredientRepository(db)
    recipe_repository = InMemoryRecipeRepository(db)
    pantry_repository = InMemoryPantryRepository(db)
    log_repository = InMemoryDailyLogRepository(db)
    estimation_client = FakeEstimationClient()
    off_client = FakeOpenFoodFactsClient()
    catalog = IngredientCatalog(
        repository=ingredient_repository,
        unit_of_work=unit_of_work,
        estimation_service=NutritionEstimationService(
            client=estimation_client,
            model=settings.openai_model if settings else "gpt-5.2",
            reasoning_effort="low",
            store=False,
        ),
    )
    meal_plans = MealPlanService(
        repository=InMemoryMealPlanRepository(db),
        recipe_repository=recipe_repository,
        unit_of_work=unit_of_work,
    )
    return Services(
        db=db,
        unit_of_work=unit_of_work,
        catalog=catalog,
        recipes=RecipeService(recipe_repository, catalog, unit_of_work),
        meal_plans=meal_plans,
        pantry=PantryService(pantry_repository, unit_of_work),
        shopping=ShoppingListService(
            repository=InMemoryShoppingListRepository(db),
            pantry_repository=pantry_repository,
            meal_plan_service=meal_plans,
            unit_of_work=unit_of_work,
        ),
        daily_logs=DailyLogService(
            repository=log_repository,
            recipe_repository=recipe_repository,
            pantry_repository=pantry_repository,
            unit_of_work=unit_of_work,
        ),
        stats=StatsService(log_repository),
        products=ProductLookupService(
            client=off_client,
            ingredient_repository=ingredient_repository,
            unit_of_work=unit_of_work,
            cache=InMemoryCache(),
            retry_delay_seconds=0,
        ),
        off_client=off_client,
        estimation_client=estimation_client,
    )


def seed_pantry(
    services: Services, name: str, quantity: float, unit: str | None
) -> PantryItem:
    item = PantryItem(
        id=uuid4(), user_id=USER_ID, name=name, quantity=quantity, unit=unit
    )
    services.db.pantry[item.id] = item
    return item


def pantry_quantity(services: Services, name: str) -> float | None:
    for item in services.db.pantry.values():
        if item.user_id == USER_ID and normalize_name(item.name) == normalize_name(
            name
        ):
            return item.quantity
    return None


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service.key.signature",
        openai_api_key="openai-key",
    )


@pytest.fixture
def services(settings: Settings) -> Services:
    return build_services(settings)


@pytest.fixture
def container(settings: Settings, services: Services) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        token_verifier=FakeTokenVerifier(),
        catalog=services.catalog,
        recipe_service=services.recipes,
        meal_plan_service=services.meal_plans,
        pantry_service=services.pantry,
        shopping_list_service=services.shopping,
        daily_log_service=services.daily_logs,
        stats_service=services.stats,
        product_lookup_service=services.products,
        close_resources=close_resources,
    )
