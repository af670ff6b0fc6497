"""Gatekeeper for every recipe entering storage.

``validate`` runs three independent stages over an untrusted candidate:

1. structural parse into :class:`RecipeCandidate` (pydantic),
2. derivation of missing percentages, weights and batch fields,
3. invariant checks, all of which are reported together.

Bad input never raises; it comes back as a list of :class:`ValidationIssue`.
"""

import enum
import logging
from collections.abc import Mapping, Sequence
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from baker_recipes.app.schemas.recipe import (
    IngredientCandidate,
    IssueKind,
    Recipe,
    RecipeCandidate,
    ValidationIssue,
    ValidationResult,
)
from baker_recipes.app.services.recipe_math import percentage_from_weight, weight_from_percentage
from baker_recipes.app.services.tolerance import DEFAULT_POLICY, TolerancePolicy

logger = logging.getLogger(__name__)

NO_FLOUR_MESSAGE = "no flour ingredients to normalize against"


class IssueCode(str, enum.Enum):
    MISSING_FLOUR = "missing_flour"
    FLOUR_BASE_ZERO = "flour_base_zero"
    FLOUR_PERCENTAGE_SUM = "flour_percentage_sum"
    INGREDIENT_WEIGHT_MISMATCH = "ingredient_weight_mismatch"
    TOTAL_WEIGHT_MISMATCH = "total_weight_mismatch"
    INGREDIENT_SUM_MISMATCH = "ingredient_sum_mismatch"
    DUPLICATE_INGREDIENT_NAME = "duplicate_ingredient_name"
    MISSING_VALUE = "missing_value"


def _invariant(code: IssueCode, field: Optional[str], message: str, **numbers) -> ValidationIssue:
    return ValidationIssue(kind=IssueKind.INVARIANT, code=code.value, field=field, message=message, **numbers)


def _structural(code: str, field: Optional[str], message: str) -> ValidationIssue:
    return ValidationIssue(kind=IssueKind.STRUCTURAL, code=code, field=field, message=message)


def _issues_from_pydantic(exc: PydanticValidationError) -> List[ValidationIssue]:
    issues = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()) if part is not None)
        issues.append(_structural(err.get("type", "invalid"), loc or None, err.get("msg", "Invalid value")))
    return issues


def _as_mapping(candidate: Any) -> Any:
    if isinstance(candidate, BaseModel):
        return candidate.model_dump(by_alias=True)
    return candidate


# -- stage 1: structure ---------------------------------------------------


def parse_candidate(raw: Any) -> Tuple[Optional[RecipeCandidate], List[ValidationIssue]]:
    raw = _as_mapping(raw)
    if not isinstance(raw, Mapping):
        return None, [_structural("model_type", None, "Recipe must be an object")]
    try:
        return RecipeCandidate.model_validate(raw), []
    except PydanticValidationError as exc:
        return None, _issues_from_pydantic(exc)


def _duplicate_name_issues(names: Sequence[Any], case_insensitive: bool) -> List[ValidationIssue]:
    issues = []
    seen: Dict[str, int] = {}
    for index, name in enumerate(names):
        if not isinstance(name, str) or not name.strip():
            continue
        display = name.strip()
        key = display.casefold() if case_insensitive else display
        if key in seen:
            issues.append(
                _invariant(
                    IssueCode.DUPLICATE_INGREDIENT_NAME,
                    f"ingredients.{index}.name",
                    f"Ingredient name '{display}' is already used by ingredients.{seen[key]}",
                )
            )
        else:
            seen[key] = index
    return issues


def find_duplicate_names(raw: Any, case_insensitive: bool = True) -> List[ValidationIssue]:
    """Report repeated ingredient names, whatever else is wrong with ``raw``."""
    raw = _as_mapping(raw)
    ingredients = raw.get("ingredients") if isinstance(raw, Mapping) else None
    if not isinstance(ingredients, Sequence) or isinstance(ingredients, (str, bytes)):
        return []
    names = [item.get("name") if isinstance(item, Mapping) else None for item in ingredients]
    return _duplicate_name_issues(names, case_insensitive)


# -- stage 2: derivation --------------------------------------------------


def _fill_batch(
    quantity: Optional[float],
    weight_per_unit: Optional[float],
    total_weight: Optional[float],
    policy: TolerancePolicy,
) -> Tuple[Optional[float], Optional[float], Optional[float]]:
    if total_weight is None and quantity is not None and weight_per_unit is not None:
        total_weight = policy.round(quantity * weight_per_unit)
    elif weight_per_unit is None and quantity is not None and total_weight is not None:
        weight_per_unit = policy.round(total_weight / quantity)
    elif quantity is None and weight_per_unit is not None and total_weight is not None:
        quantity = policy.round(total_weight / weight_per_unit)
    return quantity, weight_per_unit, total_weight


def _resolve_flour_base(ingredients: Sequence[IngredientCandidate], total_weight: Optional[float]) -> Optional[float]:
    flour = [ingredient for ingredient in ingredients if ingredient.is_flour]
    if all(ingredient.weight is not None for ingredient in flour):
        return sum(ingredient.weight for ingredient in flour)

    if total_weight is not None and all(ingredient.percentage is not None for ingredient in ingredients):
        total_percentage = sum(ingredient.percentage for ingredient in ingredients)
        if total_percentage > 0:
            return total_weight * 100 / total_percentage

    for ingredient in ingredients:
        if ingredient.percentage and ingredient.weight:
            return ingredient.weight * 100 / ingredient.percentage
    return None


def _fill_ingredient(ingredient: IngredientCandidate, base: float, policy: TolerancePolicy) -> IngredientCandidate:
    if ingredient.weight is None and ingredient.percentage is not None:
        weight = policy.round(weight_from_percentage(ingredient.percentage, base))
        return ingredient.model_copy(update={"weight": weight})
    if ingredient.percentage is None and ingredient.weight is not None:
        percentage = policy.round(percentage_from_weight(ingredient.weight, base))
        return ingredient.model_copy(update={"percentage": percentage})
    return ingredient


def _missing_value_issues(candidate: RecipeCandidate) -> List[ValidationIssue]:
    issues = []
    for field, value in (
        ("quantity", candidate.quantity),
        ("weightPerUnit", candidate.weight_per_unit),
        ("totalWeight", candidate.total_weight),
    ):
        if value is None:
            issues.append(_structural(IssueCode.MISSING_VALUE.value, field, f"{field} is missing and cannot be derived"))
    for index, ingredient in enumerate(candidate.ingredients):
        for field in ("percentage", "weight"):
            if getattr(ingredient, field) is None:
                issues.append(
                    _structural(
                        IssueCode.MISSING_VALUE.value,
                        f"ingredients.{index}.{field}",
                        f"{field} of '{ingredient.name}' is missing and cannot be derived",
                    )
                )
    return issues


def derive_missing(
    candidate: RecipeCandidate, policy: TolerancePolicy = DEFAULT_POLICY
) -> Tuple[RecipeCandidate, List[ValidationIssue]]:
    """Fill derivable gaps in ``candidate``.

    Returns the completed candidate and the issues that prevented a full
    derivation. A candidate that is already complete is returned as is.
    """
    issues: List[ValidationIssue] = []
    quantity, weight_per_unit, total_weight = _fill_batch(
        candidate.quantity, candidate.weight_per_unit, candidate.total_weight, policy
    )
    ingredients = list(candidate.ingredients)

    if any(ingredient.percentage is None or ingredient.weight is None for ingredient in ingredients):
        if not any(ingredient.is_flour for ingredient in ingredients):
            issues.append(_invariant(IssueCode.MISSING_FLOUR, "ingredients", NO_FLOUR_MESSAGE))
        else:
            base = _resolve_flour_base(ingredients, total_weight)
            if base == 0:
                issues.append(
                    _invariant(IssueCode.FLOUR_BASE_ZERO, "ingredients", NO_FLOUR_MESSAGE, expected=None, actual=0.0)
                )
            elif base is not None:
                ingredients = [_fill_ingredient(ingredient, base, policy) for ingredient in ingredients]
                logger.debug("Derived ingredient values against flour base %.4f", base)

    if total_weight is None and all(ingredient.weight is not None for ingredient in ingredients):
        total_weight = policy.round(sum(ingredient.weight for ingredient in ingredients))
        quantity, weight_per_unit, total_weight = _fill_batch(quantity, weight_per_unit, total_weight, policy)

    derived = candidate.model_copy(
        update={
            "quantity": quantity,
            "weight_per_unit": weight_per_unit,
            "total_weight": total_weight,
            "ingredients": ingredients,
        }
    )
    issues.extend(_missing_value_issues(derived))
    return derived, issues


# -- stage 3: invariants --------------------------------------------------


def _weight_consistent(percentage: float, weight: float, base: float, policy: TolerancePolicy) -> bool:
    # A percentage rounded to decimal_places may move the implied weight by this much
    slack = policy.percentage_rounding_slack(base)
    return policy.close(weight, weight_from_percentage(percentage, base), slack)


def _total_weight_issues(candidate: RecipeCandidate, policy: TolerancePolicy) -> List[ValidationIssue]:
    expected_total = candidate.quantity * candidate.weight_per_unit
    if policy.close(candidate.total_weight, expected_total):
        return []
    return [
        _invariant(
            IssueCode.TOTAL_WEIGHT_MISMATCH,
            "totalWeight",
            f"totalWeight {candidate.total_weight:g} does not equal quantity x weightPerUnit ({expected_total:g})",
            expected=expected_total,
            actual=candidate.total_weight,
        )
    ]


def check_invariants(
    candidate: RecipeCandidate,
    policy: TolerancePolicy = DEFAULT_POLICY,
    case_insensitive_names: bool = True,
) -> List[ValidationIssue]:
    """Check a complete candidate (no missing numbers) against every invariant."""
    issues: List[ValidationIssue] = []
    ingredients = candidate.ingredients
    flour = [ingredient for ingredient in ingredients if ingredient.is_flour]

    if not flour:
        issues.append(_invariant(IssueCode.MISSING_FLOUR, "ingredients", NO_FLOUR_MESSAGE))
    else:
        flour_percentage = sum(ingredient.percentage for ingredient in flour)
        percentage_ok = policy.close(flour_percentage, 100.0)
        if not percentage_ok:
            issues.append(
                _invariant(
                    IssueCode.FLOUR_PERCENTAGE_SUM,
                    "ingredients",
                    f"Flour percentages sum to {flour_percentage:g}, expected 100",
                    expected=100.0,
                    actual=flour_percentage,
                )
            )
        base = sum(ingredient.weight for ingredient in flour)
        if base == 0:
            issues.append(_invariant(IssueCode.FLOUR_BASE_ZERO, "ingredients", NO_FLOUR_MESSAGE, actual=0.0))
        elif percentage_ok:
            for index, ingredient in enumerate(ingredients):
                if _weight_consistent(ingredient.percentage, ingredient.weight, base, policy):
                    continue
                expected = weight_from_percentage(ingredient.percentage, base)
                issues.append(
                    _invariant(
                        IssueCode.INGREDIENT_WEIGHT_MISMATCH,
                        f"ingredients.{index}.weight",
                        f"'{ingredient.name}' weighs {ingredient.weight:g} but {ingredient.percentage:g}% "
                        f"of a {base:g} flour base is {expected:g}",
                        expected=expected,
                        actual=ingredient.weight,
                    )
                )

    issues.extend(_total_weight_issues(candidate, policy))

    ingredient_total = sum(ingredient.weight for ingredient in ingredients)
    if not policy.close(ingredient_total, candidate.total_weight):
        issues.append(
            _invariant(
                IssueCode.INGREDIENT_SUM_MISMATCH,
                "ingredients",
                f"Ingredient weights sum to {ingredient_total:g}, expected totalWeight {candidate.total_weight:g}",
                expected=candidate.total_weight,
                actual=ingredient_total,
            )
        )

    issues.extend(_duplicate_name_issues([ingredient.name for ingredient in ingredients], case_insensitive_names))
    return issues


def validate(
    candidate: Any,
    policy: Optional[TolerancePolicy] = None,
    case_insensitive_names: bool = True,
) -> ValidationResult:
    policy = policy or DEFAULT_POLICY
    data = _as_mapping(candidate)

    parsed, issues = parse_candidate(data)
    if parsed is None:
        return ValidationResult(errors=issues + find_duplicate_names(data, case_insensitive_names))

    derived, issues = derive_missing(parsed, policy)
    if issues:
        names = [ingredient.name for ingredient in parsed.ingredients]
        if None not in (derived.quantity, derived.weight_per_unit, derived.total_weight):
            issues = issues + _total_weight_issues(derived, policy)
        return ValidationResult(errors=issues + _duplicate_name_issues(names, case_insensitive_names))

    issues = check_invariants(derived, policy, case_insensitive_names)
    if issues:
        return ValidationResult(errors=issues)

    try:
        recipe = Recipe.model_validate(derived.model_dump())
    except PydanticValidationError as exc:
        return ValidationResult(errors=_issues_from_pydantic(exc))
    return ValidationResult(recipe=recipe)
