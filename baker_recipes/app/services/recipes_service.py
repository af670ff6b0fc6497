import logging
from typing import Any, Iterable, List, Optional

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from baker_recipes.app.core.config import Settings, get_settings
from baker_recipes.app.db import models
from baker_recipes.app.schemas.recipe import Ingredient, Recipe, RecipeRead, ValidationIssue, ValidationResult
from baker_recipes.app.services import recipe_math, recipe_validator
from baker_recipes.app.services.tolerance import TolerancePolicy

logger = logging.getLogger(__name__)


class RecipeValidationError(Exception):
    def __init__(self, issues: List[ValidationIssue]):
        super().__init__(f"{len(issues)} validation issue(s)")
        self.issues = issues


def validate_candidate(candidate: Any, settings: Optional[Settings] = None) -> ValidationResult:
    settings = settings or get_settings()
    return recipe_validator.validate(
        candidate,
        policy=TolerancePolicy.from_settings(settings),
        case_insensitive_names=settings.recipe_case_insensitive_names,
    )


def _validated(candidate: Any, settings: Optional[Settings]) -> Recipe:
    result = validate_candidate(candidate, settings)
    if not result.ok:
        logger.info("Rejected recipe candidate with %d issue(s)", len(result.errors))
        raise RecipeValidationError(result.errors)
    return result.recipe


def _replace_ingredients(recipe: models.Recipe, ingredients: Iterable[Ingredient]) -> None:
    recipe.ingredients.clear()
    for position, ingredient in enumerate(ingredients):
        recipe.ingredients.append(
            models.Ingredient(
                position=position,
                name=ingredient.name,
                type=ingredient.type,
                percentage=ingredient.percentage,
                weight=ingredient.weight,
            )
        )


def _apply(db_recipe: models.Recipe, recipe: Recipe) -> None:
    db_recipe.name = recipe.name
    db_recipe.quantity = recipe.quantity
    db_recipe.weight_per_unit = recipe.weight_per_unit
    db_recipe.total_weight = recipe.total_weight
    db_recipe.instructions = recipe.instructions
    _replace_ingredients(db_recipe, recipe.ingredients)


def to_schema(db_recipe: models.Recipe) -> RecipeRead:
    return RecipeRead(
        id=db_recipe.id,
        name=db_recipe.name,
        quantity=db_recipe.quantity,
        weight_per_unit=db_recipe.weight_per_unit,
        total_weight=db_recipe.total_weight,
        instructions=db_recipe.instructions or "",
        ingredients=tuple(
            Ingredient(
                name=ingredient.name,
                type=ingredient.type,
                percentage=ingredient.percentage,
                weight=ingredient.weight,
            )
            for ingredient in db_recipe.ingredients
        ),
        created_at=db_recipe.created_at,
        updated_at=db_recipe.updated_at,
    )


def create_recipe(db: Session, candidate: Any, settings: Optional[Settings] = None) -> models.Recipe:
    recipe = _validated(candidate, settings)
    db_recipe = models.Recipe()
    _apply(db_recipe, recipe)
    db.add(db_recipe)
    db.commit()
    db.refresh(db_recipe)
    logger.info("Created recipe %s (%s)", db_recipe.id, db_recipe.name)
    return db_recipe


def list_recipes(db: Session) -> List[models.Recipe]:
    stmt = select(models.Recipe).order_by(models.Recipe.id.asc())
    return list(db.scalars(stmt).all())


def get_recipe(db: Session, recipe_id: int) -> models.Recipe:
    recipe = db.get(models.Recipe, recipe_id)
    if not recipe:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Recipe not found")
    return recipe


def update_recipe(db: Session, recipe_id: int, candidate: Any, settings: Optional[Settings] = None) -> models.Recipe:
    """Replace the stored recipe with a freshly validated value."""
    db_recipe = get_recipe(db, recipe_id)
    recipe = _validated(candidate, settings)
    _apply(db_recipe, recipe)
    db.commit()
    db.refresh(db_recipe)
    logger.info("Replaced recipe %s", recipe_id)
    return db_recipe


def delete_recipe(db: Session, recipe_id: int) -> None:
    recipe = get_recipe(db, recipe_id)
    db.delete(recipe)
    db.commit()
    logger.info("Deleted recipe %s", recipe_id)


def scale_recipe(
    db: Session,
    recipe_id: int,
    quantity: Optional[float] = None,
    weight_per_unit: Optional[float] = None,
    settings: Optional[Settings] = None,
) -> Recipe:
    """Preview ``recipe_id`` at a new batch size. Nothing is persisted."""
    settings = settings or get_settings()
    stored = to_schema(get_recipe(db, recipe_id))
    try:
        scaled = recipe_math.scale_recipe(
            stored,
            quantity=quantity,
            weight_per_unit=weight_per_unit,
            policy=TolerancePolicy.from_settings(settings),
        )
    except ZeroDivisionError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    # RecipeRead extras (id, timestamps) are dropped by the candidate model
    return _validated(scaled, settings)
