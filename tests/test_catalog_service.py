"""Tests for the ingredient catalog."""

import asyncio

import pytest

from lifeos.domain.errors import InvalidInputError
from lifeos.domain.nutrition import RecipeLineInput


def _line(name: str, quantity: float, calories: float, unit: str | None = "g"):
    return RecipeLineInput(
        name=name,
        quantity=quantity,
        unit=unit,
        calories=calories,
        protein=0.0,
        carbs=0.0,
        fat=0.0,
    )


def test_per_unit_facts_are_derived_from_absolute_macros(services) -> None:
    rice = services.catalog.upsert_from_recipe_line(_line("Rice", 200, 260))
    assert rice.calories == 1.3
    assert rice.source == "recipe"

    again = services.catalog.upsert_from_recipe_line(_line(" rice ", 100, 130))

    assert again.id == rice.id
    assert again.calories == 1.3
    assert len(services.db.ingredients) == 1


def test_zero_quantity_keeps_existing_values(services) -> None:
    services.catalog.upsert_from_recipe_line(_line("Oil", 10, 90))

    updated = services.catalog.upsert_from_recipe_line(_line("Oil", 0, 50))

    assert updated.calories == 9.0


def test_zero_quantity_on_new_ingredient_defaults_to_zero(services) -> None:
    created = services.catalog.upsert_from_recipe_line(_line("Salt", 0, 5))

    assert created.calories == 0.0


def test_unit_only_changes_when_provided(services) -> None:
    services.catalog.upsert_from_recipe_line(_line("Milk", 200, 100, unit="ml"))

    updated = services.catalog.upsert_from_recipe_line(_line("Milk", 100, 50, None))

    assert updated.unit == "ml"


def test_create_ingredient_estimates_missing_macros(services) -> None:
    ingredient = asyncio.run(services.catalog.create_ingredient({"name": "Quinoa"}))

    assert ingredient.source == "estimate"
    assert ingredient.unit == "g"
    assert ingredient.calories == pytest.approx(1.3)
    assert services.estimation_client.prompts


def test_create_ingredient_keeps_given_macros(services) -> None:
    ingredient = asyncio.run(
        services.catalog.create_ingredient(
            {"name": "Egg", "unit": "pcs", "calories": 70, "protein": 6}
        )
    )

    assert ingredient.source == "manual"
    assert ingredient.calories == 70
    assert not services.estimation_client.prompts


def test_create_ingredient_rejects_duplicates(services) -> None:
    asyncio.run(services.catalog.create_ingredient({"name": "Egg", "calories": 70}))

    with pytest.raises(InvalidInputError):
        asyncio.run(services.catalog.create_ingredient({"name": " EGG "}))


def test_search_is_case_insensitive(services) -> None:
    services.catalog.upsert_from_recipe_line(_line("Brown Rice", 100, 110))
    services.catalog.upsert_from_recipe_line(_line("Oats", 100, 380))

    results = services.catalog.search("rice")

    assert [ingredient.name for ingredient in results] == ["Brown Rice"]


def test_estimate_keeps_given_unit(services) -> None:
    ingredient = asyncio.run(
        services.catalog.create_ingredient({"name": "Lentils", "unit": "cup"})
    )

    assert ingredient.source == "estimate"
    assert ingredient.unit == "cup"
