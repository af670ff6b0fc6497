import enum
from datetime import datetime
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator
from pydantic.alias_generators import to_camel

# Upper bounds keep every product and sum the validator forms finite
MAX_WEIGHT = 1e9
MAX_QUANTITY = 1e6
MAX_PERCENTAGE = 1e4


class IngredientType(str, enum.Enum):
    FLOUR = "flour"
    LIQUID = "liquid"
    SALT = "salt"
    YEAST = "yeast"
    SWEETENER = "sweetener"
    FAT = "fat"
    SPICE = "spice"
    GRAIN = "grain"
    STARTER = "starter"
    ADD_IN = "add-in"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Ingredient(CamelModel):
    name: str = Field(min_length=1)
    type: IngredientType
    percentage: float = Field(ge=0, le=MAX_PERCENTAGE, allow_inf_nan=False)
    weight: float = Field(ge=0, le=MAX_WEIGHT, allow_inf_nan=False)

    model_config = ConfigDict(frozen=True)

    @property
    def is_flour(self) -> bool:
        return self.type is IngredientType.FLOUR


class Recipe(CamelModel):
    """A validated recipe. Immutable; updates build a new value."""

    name: str = Field(min_length=1)
    quantity: float = Field(gt=0, le=MAX_QUANTITY, allow_inf_nan=False)
    weight_per_unit: float = Field(gt=0, le=MAX_WEIGHT, allow_inf_nan=False)
    total_weight: float = Field(gt=0, le=MAX_WEIGHT, allow_inf_nan=False)
    ingredients: Tuple[Ingredient, ...] = Field(min_length=1)
    instructions: str = ""

    model_config = ConfigDict(frozen=True)


class RecipeRead(Recipe):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class IngredientCandidate(CamelModel):
    """Untrusted ingredient input. Either side of percentage/weight may be missing."""

    name: str = Field(min_length=1)
    type: IngredientType
    percentage: Optional[float] = Field(None, ge=0, le=MAX_PERCENTAGE, allow_inf_nan=False)
    weight: Optional[float] = Field(None, ge=0, le=MAX_WEIGHT, allow_inf_nan=False)

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    @property
    def is_flour(self) -> bool:
        return self.type is IngredientType.FLOUR


class RecipeCandidate(CamelModel):
    """Untrusted recipe input as received from a client, before derivation."""

    name: str = Field(min_length=1)
    quantity: Optional[float] = Field(None, gt=0, le=MAX_QUANTITY, allow_inf_nan=False)
    weight_per_unit: Optional[float] = Field(None, gt=0, le=MAX_WEIGHT, allow_inf_nan=False)
    total_weight: Optional[float] = Field(None, gt=0, le=MAX_WEIGHT, allow_inf_nan=False)
    ingredients: List[IngredientCandidate] = Field(min_length=1)
    instructions: str = ""

    model_config = ConfigDict(extra="ignore")

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value


class IssueKind(str, enum.Enum):
    STRUCTURAL = "structural"
    INVARIANT = "invariant"


class ValidationIssue(BaseModel):
    kind: IssueKind
    code: str
    field: Optional[str] = None
    message: str
    expected: Optional[float] = None
    actual: Optional[float] = None


class ValidationResult(BaseModel):
    recipe: Optional[Recipe] = None
    errors: List[ValidationIssue] = Field(default_factory=list)

    @computed_field
    @property
    def ok(self) -> bool:
        return self.recipe is not None and not self.errors


class ScaleRequest(CamelModel):
    quantity: Optional[float] = Field(None, gt=0, le=MAX_QUANTITY, allow_inf_nan=False)
    weight_per_unit: Optional[float] = Field(None, gt=0, le=MAX_WEIGHT, allow_inf_nan=False)

    @model_validator(mode="after")
    def require_one_field(self) -> "ScaleRequest":
        if self.quantity is None and self.weight_per_unit is None:
            raise ValueError("quantity or weightPerUnit is required")
        return self
