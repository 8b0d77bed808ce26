"""Nutrition API endpoints, scoped to the authenticated user."""

from __future__ import annotations

import datetime as dt  # noqa: TC003
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Query, Request, status

from lifeos.api.auth import current_user_id
from lifeos.api.schemas import (  # noqa: TC001
    DailyLogPayload,
    DailyLogUpdatePayload,
    GenerateShoppingListPayload,
    IngredientPayload,
    MealPlanPayload,
    PantryPayload,
    PantryUpdatePayload,
    RecipePayload,
    ShoppingItemPayload,
    ShoppingItemUpdatePayload,
)
from lifeos.domain.nutrition import Ingredient

if TYPE_CHECKING:
    from lifeos.containers import AppContainer

router = APIRouter(prefix="/nutrition", tags=["nutrition"])


def _container(request: Request) -> AppContainer:
    return request.app.state.container


@router.get("/recipes")
async def list_recipes(
    request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Return the user's recipes, newest first."""
    return {"recipes": _container(request).recipe_service.list_recipes(user_id)}


@router.get("/recipes/{recipe_id}")
async def get_recipe(
    recipe_id: UUID, request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    return {"recipe": _container(request).recipe_service.get_recipe(user_id, recipe_id)}


@router.post("/recipes", status_code=status.HTTP_201_CREATED)
async def create_recipe(
    payload: RecipePayload, request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Create a recipe; its lines also feed the ingredient catalog."""
    recipe = _container(request).recipe_service.create_recipe(
        user_id,
        name=payload.name,
        description=payload.description,
        servings=payload.servings,
        lines=payload.line_inputs(),
    )
    return {"recipe": recipe}


@router.put("/recipes/{recipe_id}")
async def update_recipe(
    recipe_id: UUID,
    payload: RecipePayload,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Replace a recipe and all of its lines."""
    recipe = _container(request).recipe_service.update_recipe(
        user_id,
        recipe_id,
        name=payload.name,
        description=payload.description,
        servings=payload.servings,
        lines=payload.line_inputs(),
    )
    return {"recipe": recipe}


@router.post("/recipes/{recipe_id}/duplicate", status_code=status.HTTP_201_CREATED)
async def duplicate_recipe(
    recipe_id: UUID, request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    service = _container(request).recipe_service
    return {"recipe": service.duplicate_recipe(user_id, recipe_id)}


@router.delete("/recipes/{recipe_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_recipe(
    recipe_id: UUID, request: Request, user_id: UUID = Depends(current_user_id)
) -> None:
    _container(request).recipe_service.delete_recipe(user_id, recipe_id)


@router.post("/meal-plans")
async def replace_meal_plan(
    payload: MealPlanPayload,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Replace every slot of a week's plan."""
    plan = _container(request).meal_plan_service.replace_plan(
        user_id, payload.week_start, [slot.to_input() for slot in payload.slots]
    )
    return {"meal_plan": plan}


@router.get("/meal-plans")
async def get_meal_plan(
    request: Request,
    week_start: dt.date = Query(...),
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Return the week's plan, or null when none was saved."""
    plan = _container(request).meal_plan_service.get_plan(user_id, week_start)
    return {"meal_plan": plan}


@router.post("/shopping-list/generate")
async def generate_shopping_list(
    payload: GenerateShoppingListPayload,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Regenerate the automatic entries for a week and return the whole list."""
    service = _container(request).shopping_list_service
    service.generate(user_id, payload.week_start)
    return {"items": service.list_items(user_id)}


@router.get("/shopping-list")
async def list_shopping_list(
    request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    return {"items": _container(request).shopping_list_service.list_items(user_id)}


@router.post("/shopping-list", status_code=status.HTTP_201_CREATED)
async def add_shopping_item(
    payload: ShoppingItemPayload,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    item = _container(request).shopping_list_service.add_item(
        user_id, payload.name, payload.quantity, payload.unit
    )
    return {"item": item}


@router.patch("/shopping-list/{item_id}")
async def update_shopping_item(
    item_id: UUID,
    payload: ShoppingItemUpdatePayload,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Edit an entry; checking it adds its quantity to the pantry."""
    item = _container(request).shopping_list_service.update_item(
        user_id, item_id, payload.model_dump(exclude_unset=True)
    )
    return {"item": item}


@router.delete("/shopping-list/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_shopping_item(
    item_id: UUID, request: Request, user_id: UUID = Depends(current_user_id)
) -> None:
    _container(request).shopping_list_service.delete_item(user_id, item_id)


@router.get("/pantry")
async def list_pantry(
    request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    return {"items": _container(request).pantry_service.list_items(user_id)}


@router.post("/pantry", status_code=status.HTTP_201_CREATED)
async def set_pantry_stock(
    payload: PantryPayload,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Set the stock for an ingredient, creating the row if needed."""
    item = _container(request).pantry_service.set_stock(
        user_id, payload.name, payload.quantity, payload.unit
    )
    return {"item": item}


@router.patch("/pantry/{item_id}")
async def update_pantry_item(
    item_id: UUID,
    payload: PantryUpdatePayload,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    item = _container(request).pantry_service.update_item(
        user_id, item_id, payload.model_dump(exclude_unset=True)
    )
    return {"item": item}


@router.delete("/pantry/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_pantry_item(
    item_id: UUID, request: Request, user_id: UUID = Depends(current_user_id)
) -> None:
    _container(request).pantry_service.delete_item(user_id, item_id)


@router.post("/daily-log", status_code=status.HTTP_201_CREATED)
async def create_daily_log(
    payload: DailyLogPayload,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Log a meal; recipe-linked logs consume pantry stock."""
    log = _container(request).daily_log_service.create_log(
        user_id, payload.model_dump()
    )
    return {"log": log}


@router.get("/daily-log")
async def list_daily_logs(
    request: Request,
    start: dt.date | None = None,
    end: dt.date | None = None,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    logs = _container(request).daily_log_service.list_logs(user_id, start, end)
    return {"logs": logs}


@router.patch("/daily-log/{log_id}")
async def update_daily_log(
    log_id: UUID,
    payload: DailyLogUpdatePayload,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Edit a log, moving its pantry consumption to the new values."""
    log = _container(request).daily_log_service.update_log(
        user_id, log_id, payload.model_dump(exclude_unset=True)
    )
    return {"log": log}


@router.delete("/daily-log/{log_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_daily_log(
    log_id: UUID, request: Request, user_id: UUID = Depends(current_user_id)
) -> None:
    _container(request).daily_log_service.delete_log(user_id, log_id)


@router.get("/analytics/week")
async def week_analytics(
    request: Request,
    week_start: dt.date = Query(...),
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Return per-day totals for the week and averages over logged days."""
    return {"week": _container(request).stats_service.get_week(user_id, week_start)}


@router.get("/ingredients", dependencies=[Depends(current_user_id)])
async def search_ingredients(
    request: Request,
    search: str | None = None,
    limit: int = Query(default=50, ge=1, le=200),
) -> dict[str, object]:
    return {"ingredients": _container(request).catalog.search(search, limit)}


@router.post(
    "/ingredients",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(current_user_id)],
)
async def create_ingredient(
    payload: IngredientPayload, request: Request
) -> dict[str, object]:
    """Add a catalog ingredient; empty macros are estimated when possible."""
    ingredient = await _container(request).catalog.create_ingredient(
        payload.model_dump()
    )
    return {"ingredient": ingredient}


@router.get("/ingredients/barcode/{code}", dependencies=[Depends(current_user_id)])
async def lookup_barcode(code: str, request: Request) -> dict[str, object]:
    """Return the catalog ingredient for a barcode, else the OpenFoodFacts product."""
    result = await _container(request).product_lookup_service.lookup(code)
    if isinstance(result, Ingredient):
        return {"ingredient": result, "product": None}
    return {"ingredient": None, "product": result}


@router.post(
    "/ingredients/barcode/{code}",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(current_user_id)],
)
async def import_barcode(code: str, request: Request) -> dict[str, object]:
    """Import an OpenFoodFacts product into the catalog."""
    ingredient = await _container(request).product_lookup_service.import_product(code)
    return {"ingredient": ingredient}
