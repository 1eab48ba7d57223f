"""Category rule engine: required fields, field predicates and required credits."""

from collections.abc import Callable
from typing import Any

from attrs import frozen

from ..errors import ConfigurationError
from ..models.categories import Category
from ..models.nominee import NomineeEntity
from ..models.validation import CategoryValidation
from ..parsing import fold_name

MIN_FEATURE_RUNTIME = 40


@frozen
class FieldRule:
    """``predicate`` receives the field value, which may be ``None``."""

    field: str
    predicate: Callable[[Any], bool]
    message: str


@frozen
class CategoryRequirements:
    required_fields: tuple[str, ...] = ()
    rules: tuple[FieldRule, ...] = ()
    required_credit_roles: tuple[str, ...] = ()


FEATURE_RUNTIME = FieldRule(
    field="runtime",
    predicate=lambda runtime: runtime is not None and runtime > MIN_FEATURE_RUNTIME,
    message=f"Film must be over {MIN_FEATURE_RUNTIME} minutes in length",
)

FEATURE = CategoryRequirements(
    required_fields=("title", "release_date"),
    rules=(FEATURE_RUNTIME,),
)


def _craft(*roles: str) -> CategoryRequirements:
    return CategoryRequirements(required_fields=("title",), required_credit_roles=roles)


CATEGORY_REQUIREMENTS: dict[Category, CategoryRequirements] = {
    Category.PICTURE: CategoryRequirements(
        required_fields=("title", "release_date"),
        rules=(FEATURE_RUNTIME,),
        required_credit_roles=("Producer",),
    ),
    Category.ACTOR: _craft(),
    Category.SUPPORTING_ACTOR: _craft(),
    Category.ACTRESS: _craft(),
    Category.SUPPORTING_ACTRESS: _craft(),
    Category.DIRECTING: _craft("Director"),
    Category.ANIMATED_FEATURE: FEATURE,
    Category.DOCUMENTARY_FEATURE: FEATURE,
    Category.INTERNATIONAL_FEATURE: FEATURE,
    Category.DOCUMENTARY_SHORT: _craft(),
    Category.ANIMATED_SHORT: _craft(),
    Category.LIVE_ACTION_SHORT: _craft(),
    Category.CINEMATOGRAPHY: _craft("Director of Photography", "Cinematographer", "Cinematography"),
    Category.COSTUME_DESIGN: _craft("Costume Design"),
    Category.FILM_EDITING: _craft("Editor"),
    Category.MAKEUP: _craft("Makeup", "Hairstylist", "Hair Designer"),
    Category.ORIGINAL_SCORE: _craft("Original Music Composer", "Music"),
    Category.ORIGINAL_SONG: _craft("Songs", "Music", "Lyricist"),
    Category.PRODUCTION_DESIGN: _craft("Production Design", "Set Decoration"),
    Category.SOUND: _craft("Sound"),
    Category.VISUAL_EFFECTS: _craft("Visual Effects Supervisor"),
    Category.ADAPTED_SCREENPLAY: _craft("Screenplay", "Writer"),
    Category.ORIGINAL_SCREENPLAY: _craft("Screenplay", "Writer"),
}

if set(CATEGORY_REQUIREMENTS) != set(Category):
    raise ConfigurationError(
        "missing requirements for: "
        + ", ".join(c.value for c in set(Category) - set(CATEGORY_REQUIREMENTS))
    )


def requirements_for(category: Category) -> CategoryRequirements:
    try:
        return CATEGORY_REQUIREMENTS[category]
    except KeyError:
        raise ConfigurationError(f"Unknown category: {category!r}") from None


def _get_nested(obj: Any, path: str) -> Any:
    for part in path.split("."):
        if obj is None:
            return None
        obj = obj.get(part) if isinstance(obj, dict) else getattr(obj, part, None)
    return obj


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or (hasattr(value, "__len__") and len(value) == 0)


def validate_category(entity: NomineeEntity, category: Category | None = None) -> CategoryValidation:
    """Evaluate every rule for the category and collect all failures.

    Validation failures are returned, never raised. An unknown category is a
    configuration error and raises.
    """
    category = category or entity.category
    requirements = requirements_for(category)
    errors: list[str] = []

    for name in requirements.required_fields:
        if _is_empty(_get_nested(entity, name)):
            errors.append(f"Missing required field: {name}")

    for rule in requirements.rules:
        if not rule.predicate(_get_nested(entity, rule.field)):
            errors.append(rule.message)

    credits = entity.extended_credits
    if requirements.required_credit_roles:
        wanted = [role.casefold() for role in requirements.required_credit_roles]
        credited = any(
            role in person.role.casefold()
            for person in (*credits.crew, *credits.cast)
            for role in wanted
        )
        if not credited:
            errors.append(
                "Missing required credits: " + ", ".join(requirements.required_credit_roles)
            )

    if category.is_individual:
        credited_names = {fold_name(p.name) for p in (*credits.cast, *credits.crew)}
        names = entity.person_names or (entity.name,)
        for name in names:
            if fold_name(name) not in credited_names:
                errors.append(f"{name} not found in the film's cast or crew")

    return CategoryValidation(valid=not errors, errors=errors)
