"""Baker's percentage arithmetic over validated recipes.

Every ingredient is expressed relative to the flour base weight, the summed
weight of all ``flour`` ingredients. These helpers are pure; they never touch
storage and never mutate the recipe they are given.
"""

from typing import Optional

from baker_recipes.app.schemas.recipe import Recipe
from baker_recipes.app.services.tolerance import DEFAULT_POLICY, TolerancePolicy


class InvalidRecipe(ValueError):
    pass


class FlourBaseZeroError(ZeroDivisionError):
    def __init__(self, message: str = "no flour ingredients to normalize against"):
        super().__init__(message)


def flour_base_weight(recipe: Recipe) -> float:
    flour = [ingredient for ingredient in recipe.ingredients if ingredient.is_flour]
    if not flour:
        raise InvalidRecipe("Recipe has no flour ingredient")
    return sum(ingredient.weight for ingredient in flour)


def weight_from_percentage(percentage: float, flour_base_weight: float) -> float:
    return percentage / 100 * flour_base_weight


def percentage_from_weight(weight: float, flour_base_weight: float) -> float:
    if flour_base_weight == 0:
        raise FlourBaseZeroError()
    return weight / flour_base_weight * 100


def total_ingredient_weight(recipe: Recipe) -> float:
    return sum(ingredient.weight for ingredient in recipe.ingredients)


def scale_recipe(
    recipe: Recipe,
    quantity: Optional[float] = None,
    weight_per_unit: Optional[float] = None,
    policy: TolerancePolicy = DEFAULT_POLICY,
) -> Recipe:
    """Rebuild ``recipe`` for a new batch size, keeping every percentage.

    The new flour base is the new total weight divided by the summed
    percentages, so the scaled ingredient weights still add up to the total.
    """
    quantity = recipe.quantity if quantity is None else quantity
    weight_per_unit = recipe.weight_per_unit if weight_per_unit is None else weight_per_unit
    total_weight = policy.round(quantity * weight_per_unit)

    total_percentage = sum(ingredient.percentage for ingredient in recipe.ingredients)
    if total_percentage == 0:
        raise FlourBaseZeroError()
    base = total_weight * 100 / total_percentage

    ingredients = tuple(
        ingredient.model_copy(update={"weight": policy.round(weight_from_percentage(ingredient.percentage, base))})
        for ingredient in recipe.ingredients
    )
    return recipe.model_copy(
        update={
            "quantity": quantity,
            "weight_per_unit": weight_per_unit,
            "total_weight": total_weight,
            "ingredients": ingredients,
        }
    )
