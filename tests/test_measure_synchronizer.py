"""
Tests for keeping US and metric measures in step.

Covers:
- Conversion call shape and overwrite of the other system's amount
- No conversion without a base food
- Error ordering: missing unit system, missing ingredient, missing measure
- Rollback of both measures when the conversion service fails
- Ordinal edits and batch edits
"""

import pytest
from sqlalchemy.orm import Session

from test_fixtures import (
    database,
    db_session,
    make_user,
    make_recipe_payload,
    make_ingredient,
    FakeConverter,
)
from app.exceptions import NotFoundError, ServiceValidationError, UpstreamError
from domain.models import IngredientMeasure
from domain.schemas import FieldEdit, IngredientEditItem, MeasureEdit
from services import MeasureSynchronizer, RecipeAggregate


def _recipe_with(db: Session, *ingredients):
    user = make_user(db)
    return RecipeAggregate(db).create(
        user.username, make_recipe_payload(ingredients=list(ingredients))
    )


def _measure(db: Session, ingredient_id: int, system: str) -> IngredientMeasure:
    db.expire_all()
    return db.get(IngredientMeasure, (ingredient_id, system))


def test_chicken_us_edit_converts_metric(db_session: Session):
    """
    Verifies:
    - A fresh ingredient is stored at ordinal 1
    - Editing the US amount calls the converter with (chicken, 2, lb, g)
    - The metric amount is overwritten, its unit kept
    """
    recipe = _recipe_with(
        db_session,
        make_ingredient(label="chicken", base_food="chicken", us=(1.5, "lb"), metric=(680.389, "g")),
    )
    ingredient = recipe.ingredients[0]
    assert ingredient.ordinal == 1

    converter = FakeConverter(result=907.185)
    sync = MeasureSynchronizer(db_session, converter)
    updated = sync.update(
        ingredient.id, MeasureEdit(measure={"unit_system": "us", "amount": 2})
    )

    assert converter.calls == [("chicken", 2, "lb", "g")]
    assert updated.measure_for("us").amount == 2
    assert updated.measure_for("metric").amount == pytest.approx(907.185)
    assert updated.measure_for("metric").unit == "g"


def test_honey_metric_edit_converts_us(db_session: Session):
    recipe = _recipe_with(
        db_session,
        make_ingredient(label="1/3 cup honey", base_food="honey", us=(0.333, "cup"), metric=(113, "g")),
    )
    ingredient = recipe.ingredients[0]
    converter = FakeConverter(result=0.5)

    MeasureSynchronizer(db_session, converter).update(
        ingredient.id, MeasureEdit(measure={"unit_system": "metric", "amount": 170, "unit": "g"})
    )

    assert converter.calls == [("honey", 170, "g", "cup")]
    us = _measure(db_session, ingredient.id, "us")
    assert us.amount == pytest.approx(0.5)
    assert us.unit == "cup"


def test_no_base_food_leaves_other_measure_unchanged(db_session: Session):
    recipe = _recipe_with(
        db_session,
        make_ingredient(label="a pinch of love", base_food=None, us=(1, "tsp"), metric=(5, "ml")),
    )
    ingredient = recipe.ingredients[0]
    converter = FakeConverter()

    MeasureSynchronizer(db_session, converter).update(
        ingredient.id, MeasureEdit(measure={"unit_system": "us", "amount": 2})
    )

    assert converter.calls == []
    assert _measure(db_session, ingredient.id, "us").amount == 2
    metric = _measure(db_session, ingredient.id, "metric")
    assert (metric.amount, metric.unit) == (5, "ml")


def test_conversion_failure_rolls_back_both_measures(db_session: Session):
    """
    Verifies:
    - UpstreamError propagates to the caller
    - Neither the edited nor the converted measure is persisted
    """
    recipe = _recipe_with(db_session, make_ingredient())
    ingredient = recipe.ingredients[0]
    converter = FakeConverter(error=UpstreamError("Spoonacular is unreachable"))

    with pytest.raises(UpstreamError):
        MeasureSynchronizer(db_session, converter).update(
            ingredient.id, MeasureEdit(measure={"unit_system": "us", "amount": 5})
        )

    assert _measure(db_session, ingredient.id, "us").amount == 2
    assert _measure(db_session, ingredient.id, "metric").amount == pytest.approx(907.18)


def test_measure_edit_without_unit_system_is_bad_request(db_session: Session):
    recipe = _recipe_with(db_session, make_ingredient())
    sync = MeasureSynchronizer(db_session, FakeConverter())

    with pytest.raises(ServiceValidationError):
        sync.update(recipe.ingredients[0].id, MeasureEdit(measure={"amount": 3}))


def test_unknown_ingredient_is_not_found(db_session: Session):
    sync = MeasureSynchronizer(db_session, FakeConverter())
    with pytest.raises(NotFoundError):
        sync.update(5555, FieldEdit(label="ghost"))


def test_missing_measure_row_is_not_found(db_session: Session):
    recipe = _recipe_with(db_session, make_ingredient(metric=None))
    sync = MeasureSynchronizer(db_session, FakeConverter())

    with pytest.raises(NotFoundError):
        sync.update(
            recipe.ingredients[0].id,
            MeasureEdit(measure={"unit_system": "metric", "amount": 3}),
        )


def test_field_edit_updates_label_and_base_food(db_session: Session):
    recipe = _recipe_with(db_session, make_ingredient())
    ingredient = recipe.ingredients[0]

    updated = MeasureSynchronizer(db_session, FakeConverter()).update(
        ingredient.id, FieldEdit(label="2 lb chicken breast", base_food="chicken breast")
    )

    assert updated.label == "2 lb chicken breast"
    assert updated.base_food == "chicken breast"


def test_ordinal_edit_moves_ingredient(db_session: Session):
    recipe = _recipe_with(
        db_session,
        make_ingredient(label="first"),
        make_ingredient(label="second"),
        make_ingredient(label="third"),
    )
    third = recipe.ingredients[2]

    MeasureSynchronizer(db_session, FakeConverter()).update(third.id, FieldEdit(ordinal=1))

    db_session.expire_all()
    labels = [i.label for i in RecipeAggregate(db_session).get_ingredients(recipe.username, recipe.id)]
    assert labels == ["third", "first", "second"]


def test_update_many_applies_edits_in_order(db_session: Session):
    recipe = _recipe_with(db_session, make_ingredient(label="one"), make_ingredient(label="two"))
    first, second = recipe.ingredients
    converter = FakeConverter(result=1000)

    items = [
        IngredientEditItem.model_validate({"id": first.id, "data": {"label": "uno"}}),
        IngredientEditItem.model_validate(
            {"id": second.id, "data": {"measure": {"unit_system": "us", "amount": 3}}}
        ),
    ]
    updated = MeasureSynchronizer(db_session, converter).update_many(items)

    assert [i.label for i in updated] == ["uno", "two"]
    assert converter.calls == [("chicken", 3, "lb", "g")]
    assert isinstance(items[0].data, FieldEdit) and items[0].data.kind == "fields"
    assert isinstance(items[1].data, MeasureEdit)
