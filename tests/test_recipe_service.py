"""Tests for recipe totals, line replacement and duplication."""

import pytest

from lifeos.domain.errors import InvalidInputError, NotFoundError
from lifeos.domain.nutrition import RecipeLineInput
from lifeos.services.unit_of_work import ReplaceRecipeLines
from tests.conftest import OTHER_USER_ID, USER_ID


def _lines() -> list[RecipeLineInput]:
    return [
        RecipeLineInput("Rice", 200, "g", 260.1, 5.3, 56.7, 0.6),
        RecipeLineInput("Chicken", 150, "g", 247.35, 46.2, 0.0, 5.4),
        RecipeLineInput("Oil", 10, None, 88.4, 0.0, 0.0, 10.0),
    ]


def test_totals_equal_sum_of_lines(services) -> None:
    recipe = services.recipes.create_recipe(
        USER_ID, "Chicken rice", None, 2, _lines()
    )

    stored = services.recipes.get_recipe(USER_ID, recipe.id)

    assert stored.total_calories == sum(line.calories for line in stored.lines)
    assert stored.total_protein == sum(line.protein for line in stored.lines)
    assert stored.total_carbs == sum(line.carbs for line in stored.lines)
    assert stored.total_fat == sum(line.fat for line in stored.lines)
    assert [line.ordering for line in stored.lines] == [0, 1, 2]
    assert [line.ingredient_name for line in stored.lines] == [
        "Rice",
        "Chicken",
        "Oil",
    ]


def test_line_unit_defaults_to_ingredient_unit(services) -> None:
    services.catalog.upsert_from_recipe_line(
        RecipeLineInput("Oil", 10, "ml", 88, 0, 0, 10)
    )

    recipe = services.recipes.create_recipe(USER_ID, "Salad", None, 1, _lines())

    assert recipe.lines[2].unit == "ml"


def test_replace_lines_recomputes_totals(services) -> None:
    recipe = services.recipes.create_recipe(USER_ID, "Bowl", None, 1, _lines())

    updated = services.recipes.replace_lines(
        USER_ID, recipe.id, [RecipeLineInput("Rice", 100, "g", 130, 2.7, 28, 0.3)]
    )

    stored = services.recipes.get_recipe(USER_ID, recipe.id)
    assert updated.total_calories == 130
    assert stored.total_calories == 130
    assert len(stored.lines) == 1


def test_failed_line_replacement_leaves_recipe_untouched(services) -> None:
    recipe = services.recipes.create_recipe(USER_ID, "Bowl", None, 1, _lines())
    services.unit_of_work.fail_on = ReplaceRecipeLines

    with pytest.raises(RuntimeError):
        services.recipes.replace_lines(
            USER_ID, recipe.id, [RecipeLineInput("Rice", 100, "g", 130, 0, 0, 0)]
        )

    stored = services.recipes.get_recipe(USER_ID, recipe.id)
    assert stored.total_calories == recipe.total_calories
    assert len(stored.lines) == 3


def test_update_recipe_replaces_fields_and_lines(services) -> None:
    recipe = services.recipes.create_recipe(USER_ID, "Bowl", None, 1, _lines())

    updated = services.recipes.update_recipe(
        USER_ID,
        recipe.id,
        "Big bowl",
        "Post workout",
        4,
        [RecipeLineInput("Oats", 80, "g", 300, 10, 54, 5)],
    )

    stored = services.recipes.get_recipe(USER_ID, recipe.id)
    assert updated.name == "Big bowl"
    assert stored.servings == 4
    assert stored.description == "Post workout"
    assert stored.total_calories == 300


def test_duplicate_copies_lines_and_totals(services) -> None:
    recipe = services.recipes.create_recipe(USER_ID, "Bowl", None, 2, _lines())

    copy = services.recipes.duplicate_recipe(USER_ID, recipe.id)

    stored = services.recipes.get_recipe(USER_ID, copy.id)
    assert stored.name == "Bowl (copy)"
    assert stored.totals == recipe.totals
    assert [
        (line.ingredient_id, line.quantity, line.calories, line.ordering)
        for line in stored.lines
    ] == [
        (line.ingredient_id, line.quantity, line.calories, line.ordering)
        for line in recipe.lines
    ]
    assert {line.id for line in stored.lines}.isdisjoint(
        {line.id for line in recipe.lines}
    )


def test_recipes_are_scoped_to_owner(services) -> None:
    recipe = services.recipes.create_recipe(USER_ID, "Bowl", None, 1, _lines())

    with pytest.raises(NotFoundError):
        services.recipes.get_recipe(OTHER_USER_ID, recipe.id)
    with pytest.raises(NotFoundError):
        services.recipes.delete_recipe(OTHER_USER_ID, recipe.id)


def test_delete_recipe(services) -> None:
    recipe = services.recipes.create_recipe(USER_ID, "Bowl", None, 1, _lines())

    services.recipes.delete_recipe(USER_ID, recipe.id)

    assert services.recipes.list_recipes(USER_ID) == []


@pytest.mark.parametrize(
    ("servings", "lines", "field_name"),
    [
        (0, _lines(), "servings"),
        (1, [], "ingredients"),
        (1, [RecipeLineInput("Rice", 0, "g", 1, 0, 0, 0)], "ingredients.0.quantity"),
        (1, [RecipeLineInput("Rice", 1, "g", -1, 0, 0, 0)], "ingredients.0.calories"),
    ],
)
def test_invalid_recipes_are_rejected_before_writing(
    services, servings, lines, field_name
) -> None:
    with pytest.raises(InvalidInputError) as excinfo:
        services.recipes.create_recipe(USER_ID, "Bad", None, servings, lines)

    assert field_name in excinfo.value.errors
    assert services.unit_of_work.commits == []
