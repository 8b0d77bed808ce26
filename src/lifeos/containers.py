"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from lifeos.adapters.openai_estimation_client import OpenAIEstimationClient
from lifeos.adapters.openfoodfacts_client import HttpxOpenFoodFactsClient
from lifeos.adapters.supabase_auth import SupabaseTokenVerifier
from lifeos.adapters.supabase_daily_log_repository import SupabaseDailyLogRepository
from lifeos.adapters.supabase_ingredient_repository import (
    SupabaseIngredientRepository,
)
from lifeos.adapters.supabase_meal_plan_repository import SupabaseMealPlanRepository
from lifeos.adapters.supabase_pantry_repository import SupabasePantryRepository
from lifeos.adapters.supabase_recipe_repository import SupabaseRecipeRepository
from lifeos.adapters.supabase_shopping_list_repository import (
    SupabaseShoppingListRepository,
)
from lifeos.adapters.supabase_unit_of_work import SupabaseUnitOfWork
from lifeos.config import Settings
from lifeos.services.auth import TokenVerifier
from lifeos.services.cache import InMemoryCache
from lifeos.services.catalog import IngredientCatalog
from lifeos.services.daily_logs import DailyLogService
from lifeos.services.estimation import NutritionEstimationService
from lifeos.services.meal_plans import MealPlanService
from lifeos.services.pantry import PantryService
from lifeos.services.products import ProductLookupService
from lifeos.services.recipes import RecipeService
from lifeos.services.shopping import ShoppingListService
from lifeos.services.stats import StatsService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    token_verifier: TokenVerifier
    catalog: IngredientCatalog
    recipe_service: RecipeService
    meal_plan_service: MealPlanService
    pantry_service: PantryService
    shopping_list_service: ShoppingListService
    daily_log_service: DailyLogService
    stats_service: StatsService
    product_lookup_service: ProductLookupService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    unit_of_work = SupabaseUnitOfWork(supabase_client)
    ingredient_repository = SupabaseIngredientRepository(supabase_client)
    recipe_repository = SupabaseRecipeRepository(supabase_client)
    pantry_repository = SupabasePantryRepository(supabase_client)
    daily_log_repository = SupabaseDailyLogRepository(supabase_client)

    openai_client = None
    estimation_service = None
    if resolved_settings.openai_api_key:
        openai_client = OpenAIEstimationClient.create(resolved_settings.openai_api_key)
        estimation_service = NutritionEstimationService(
            client=openai_client,
            model=resolved_settings.openai_model,
            reasoning_effort=resolved_settings.openai_reasoning_effort,
            store=resolved_settings.openai_store,
        )
    catalog = IngredientCatalog(
        repository=ingredient_repository,
        unit_of_work=unit_of_work,
        estimation_service=estimation_service,
    )
    meal_plan_service = MealPlanService(
        repository=SupabaseMealPlanRepository(supabase_client),
        recipe_repository=recipe_repository,
        unit_of_work=unit_of_work,
    )
    openfoodfacts_client = HttpxOpenFoodFactsClient.create(
        resolved_settings.openfoodfacts_base_url
    )

    async def close_resources() -> None:
        await openfoodfacts_client.close()
        if openai_client is not None:
            await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        token_verifier=SupabaseTokenVerifier(supabase_client),
        catalog=catalog,
        recipe_service=RecipeService(
            repository=recipe_repository,
            catalog=catalog,
            unit_of_work=unit_of_work,
        ),
        meal_plan_service=meal_plan_service,
        pantry_service=PantryService(pantry_repository, unit_of_work),
        shopping_list_service=ShoppingListService(
            repository=SupabaseShoppingListRepository(supabase_client),
            pantry_repository=pantry_repository,
            meal_plan_service=meal_plan_service,
            unit_of_work=unit_of_work,
        ),
        daily_log_service=DailyLogService(
            repository=daily_log_repository,
            recipe_repository=recipe_repository,
            pantry_repository=pantry_repository,
            unit_of_work=unit_of_work,
        ),
        stats_service=StatsService(daily_log_repository),
        product_lookup_service=ProductLookupService(
            client=openfoodfacts_client,
            ingredient_repository=ingredient_repository,
            unit_of_work=unit_of_work,
            cache=InMemoryCache(),
            ttl_seconds=resolved_settings.product_cache_ttl_seconds,
        ),
        close_resources=close_resources,
    )
