from datetime import datetime

from sqlalchemy import Column, DateTime, Enum, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from baker_recipes.app.db.base import Base
from baker_recipes.app.schemas.recipe import IngredientType


class Recipe(Base):
    __tablename__ = "recipes"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    quantity = Column(Float, nullable=False)
    weight_per_unit = Column(Float, nullable=False)
    total_weight = Column(Float, nullable=False)
    instructions = Column(Text, nullable=False, default="")
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    ingredients = relationship(
        "Ingredient",
        back_populates="recipe",
        cascade="all, delete-orphan",
        order_by="Ingredient.position",
    )


class Ingredient(Base):
    __tablename__ = "ingredients"

    id = Column(Integer, primary_key=True)
    recipe_id = Column(Integer, ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    name = Column(String, nullable=False)
    type = Column(Enum(IngredientType, native_enum=False, values_callable=lambda e: [m.value for m in e]), nullable=False)
    percentage = Column(Float, nullable=False)
    weight = Column(Float, nullable=False)

    recipe = relationship("Recipe", back_populates="ingredients")
