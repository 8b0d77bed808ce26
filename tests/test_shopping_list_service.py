"""Tests for shopping list reconciliation."""

import logging
from datetime import date
from uuid import uuid4

import pytest

from lifeos.domain.errors import NotFoundError
from lifeos.domain.nutrition import RecipeLineInput
from lifeos.domain.pantry import PantryItem
from lifeos.domain.planning import MealSlotInput, MealType, Requirement
from lifeos.domain.shopping import ShoppingListSource
from lifeos.services.shopping import subtract_pantry
from lifeos.services.unit_of_work import SaveShoppingItem
from tests.conftest import OTHER_USER_ID, USER_ID, pantry_quantity, seed_pantry

WEEK = date(2024, 1, 1)


def _plan(services, lines: list[RecipeLineInput]) -> None:
    recipe = services.recipes.create_recipe(USER_ID, "Plan recipe", None, 1, lines)
    services.meal_plans.replace_plan(
        USER_ID, WEEK, [MealSlotInput(date(2024, 1, 2), MealType.LUNCH, recipe.id)]
    )


def _auto_items(services) -> list[tuple[str, float, str | None]]:
    return sorted(
        (item.name, item.quantity, item.unit)
        for item in services.shopping.list_items(USER_ID)
        if item.source == ShoppingListSource.AUTO
    )


def _pantry(name: str, quantity: float, unit: str | None) -> PantryItem:
    return PantryItem(uuid4(), USER_ID, name, quantity, unit)


def test_subtract_pantry_spends_each_row_once() -> None:
    required = {
        ("rice", "g"): Requirement("Rice", "g", 300),
        ("rice", None): Requirement("Rice", None, 100),
    }

    remaining = subtract_pantry(required, [_pantry("rice", 350, "g")])

    assert list(remaining) == [("rice", None)]
    assert remaining[("rice", None)].quantity == 50


def test_generate_subtracts_pantry_stock(services) -> None:
    _plan(
        services,
        [
            RecipeLineInput("Rice", 300, "g", 390, 8, 84, 1),
            RecipeLineInput("Egg", 2, "pcs", 140, 12, 1, 10),
        ],
    )
    seed_pantry(services, "rice", 120, "G")

    services.shopping.generate(USER_ID, WEEK)

    assert _auto_items(services) == [("Egg", 2, "pcs"), ("Rice", 180, "g")]


def test_generate_is_idempotent_and_keeps_manual_items(services) -> None:
    _plan(services, [RecipeLineInput("Oats", 80, "g", 300, 10, 54, 5)])
    manual = services.shopping.add_item(USER_ID, "Coffee", 1, None)

    services.shopping.generate(USER_ID, WEEK)
    first = _auto_items(services)
    services.shopping.generate(USER_ID, WEEK)
    second = _auto_items(services)

    assert first == second == [("Oats", 80, "g")]
    manual_items = [
        item
        for item in services.shopping.list_items(USER_ID)
        if item.source == ShoppingListSource.MANUAL
    ]
    assert manual_items == [manual]


def test_generate_drops_items_no_longer_planned(services) -> None:
    _plan(services, [RecipeLineInput("Oats", 80, "g", 300, 10, 54, 5)])
    services.shopping.generate(USER_ID, WEEK)
    _plan(services, [RecipeLineInput("Leek", 1, "pcs", 50, 1, 10, 0)])

    services.shopping.generate(USER_ID, WEEK)

    assert _auto_items(services) == [("Leek", 1, "pcs")]


def test_unit_mismatch_skips_subtraction(services, caplog, monkeypatch) -> None:
    monkeypatch.setattr(logging.getLogger("lifeos"), "propagate", True)
    _plan(services, [RecipeLineInput("Milk", 500, "ml", 250, 17, 24, 8)])
    seed_pantry(services, "Milk", 200, "g")

    with caplog.at_level("WARNING", logger="lifeos"):
        services.shopping.generate(USER_ID, WEEK)

    assert _auto_items(services) == [("Milk", 500, "ml")]
    assert "Not subtracting pantry Milk" in caplog.text


def test_quantities_are_rounded_to_hundredths(services) -> None:
    _plan(services, [RecipeLineInput("Flour", 100.005, "g", 364, 10, 76, 1)])

    services.shopping.generate(USER_ID, WEEK)

    assert _auto_items(services) == [("Flour", 100.01, "g")]


def test_checking_item_moves_quantity_into_pantry(services) -> None:
    seed_pantry(services, "Coffee", 100, "g")
    item = services.shopping.add_item(USER_ID, "coffee", 250, "g")

    checked = services.shopping.toggle_checked(USER_ID, item.id)
    services.shopping.toggle_checked(USER_ID, item.id)

    assert checked.checked is True
    assert pantry_quantity(services, "Coffee") == 350


def test_unchecking_does_not_reverse_pantry(services) -> None:
    item = services.shopping.add_item(USER_ID, "Tea", 20, "bags")
    services.shopping.toggle_checked(USER_ID, item.id)

    services.shopping.toggle_checked(USER_ID, item.id, checked=False)

    assert pantry_quantity(services, "Tea") == 20


def test_update_and_delete_items(services) -> None:
    item = services.shopping.add_item(USER_ID, "Tea", 20, "bags")

    updated = services.shopping.update_item(USER_ID, item.id, {"quantity": 40})
    services.shopping.delete_item(USER_ID, item.id)

    assert updated.quantity == 40
    assert services.shopping.list_items(USER_ID) == []


def test_items_are_scoped_to_owner(services) -> None:
    item = services.shopping.add_item(USER_ID, "Tea", 20, "bags")

    with pytest.raises(NotFoundError):
        services.shopping.toggle_checked(OTHER_USER_ID, item.id)


def test_update_item_trims_or_clears_unit(services) -> None:
    item = services.shopping.add_item(USER_ID, "Tea", 20, "bags")

    padded = services.shopping.update_item(USER_ID, item.id, {"unit": "  boxes "})
    blank = services.shopping.update_item(USER_ID, item.id, {"unit": "   "})

    assert padded.unit == "boxes"
    assert blank.unit is None


def test_failed_regeneration_keeps_previous_items(services) -> None:
    _plan(services, [RecipeLineInput("Oats", 80, "g", 300, 10, 54, 5)])
    services.shopping.generate(USER_ID, WEEK)
    _plan(services, [RecipeLineInput("Leek", 1, "pcs", 50, 1, 10, 0)])
    services.unit_of_work.fail_on = SaveShoppingItem

    with pytest.raises(RuntimeError):
        services.shopping.generate(USER_ID, WEEK)

    assert _auto_items(services) == [("Oats", 80, "g")]
