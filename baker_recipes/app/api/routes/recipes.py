import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.orm import Session

from baker_recipes.app.api.deps import get_app_settings, get_db_session
from baker_recipes.app.core.config import Settings
from baker_recipes.app.schemas.recipe import Recipe, RecipeRead, ScaleRequest, ValidationResult
from baker_recipes.app.services import recipes_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/recipes", tags=["recipes"])


@router.get("", response_model=list[RecipeRead])
def list_recipes(db: Session = Depends(get_db_session)):
    return [recipes_service.to_schema(recipe) for recipe in recipes_service.list_recipes(db)]


@router.get("/{recipe_id}", response_model=RecipeRead)
def get_recipe(recipe_id: int, db: Session = Depends(get_db_session)):
    return recipes_service.to_schema(recipes_service.get_recipe(db, recipe_id))


@router.post("", response_model=RecipeRead, status_code=status.HTTP_201_CREATED)
def create_recipe(
    payload: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db_session),
    settings: Settings = Depends(get_app_settings),
):
    recipe = recipes_service.create_recipe(db, payload, settings)
    return recipes_service.to_schema(recipe)


@router.post("/validate", response_model=ValidationResult)
def validate_recipe(
    payload: Dict[str, Any] = Body(...),
    settings: Settings = Depends(get_app_settings),
):
    return recipes_service.validate_candidate(payload, settings)


@router.put("/{recipe_id}", response_model=RecipeRead)
def update_recipe(
    recipe_id: int,
    payload: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db_session),
    settings: Settings = Depends(get_app_settings),
):
    recipe = recipes_service.update_recipe(db, recipe_id, payload, settings)
    return recipes_service.to_schema(recipe)


@router.delete("/{recipe_id}")
def delete_recipe(recipe_id: int, db: Session = Depends(get_db_session)):
    recipes_service.delete_recipe(db, recipe_id)
    return {"message": "Recipe deleted"}


@router.post("/{recipe_id}/scale", response_model=Recipe)
def scale_recipe(
    recipe_id: int,
    payload: ScaleRequest,
    db: Session = Depends(get_db_session),
    settings: Settings = Depends(get_app_settings),
):
    logger.debug("Scaling recipe %s: quantity=%s weight_per_unit=%s", recipe_id, payload.quantity, payload.weight_per_unit)
    return recipes_service.scale_recipe(
        db,
        recipe_id,
        quantity=payload.quantity,
        weight_per_unit=payload.weight_per_unit,
        settings=settings,
    )
