"""Award categories and the shapes their nominee strings come in."""

import enum

from ..errors import ConfigurationError


class CategoryKind(enum.Enum):
    PICTURE = "picture"
    ACTING = "acting"
    DIRECTING = "directing"
    WRITING = "writing"
    CRAFT = "craft"
    SONG = "song"
    ANIMATED = "animated"
    INTERNATIONAL = "international"
    DOCUMENTARY = "documentary"
    SHORT = "short"


class NomineeShape(enum.Enum):
    """How a nominee string is laid out for a category."""

    TITLE = "title"
    PERSON_WITH_TITLE = "person_with_title"  # "Bradley Cooper (Maestro)"
    ITEM_WITH_TITLE = "item_with_title"  # "What Was I Made For? (Barbie)"
    TITLE_WITH_COUNTRY = "title_with_country"  # "Io Capitano (Italy)"


class Category(str, enum.Enum):
    """Competitive categories ingested from the awards database."""

    PICTURE = "Best Picture"
    ACTOR = "Actor in a Leading Role"
    SUPPORTING_ACTOR = "Actor in a Supporting Role"
    ACTRESS = "Actress in a Leading Role"
    SUPPORTING_ACTRESS = "Actress in a Supporting Role"
    ANIMATED_FEATURE = "Animated Feature Film"
    CINEMATOGRAPHY = "Cinematography"
    COSTUME_DESIGN = "Costume Design"
    DIRECTING = "Directing"
    DOCUMENTARY_FEATURE = "Documentary Feature Film"
    DOCUMENTARY_SHORT = "Documentary Short Film"
    FILM_EDITING = "Film Editing"
    INTERNATIONAL_FEATURE = "International Feature Film"
    MAKEUP = "Makeup and Hairstyling"
    ORIGINAL_SCORE = "Music (Original Score)"
    ORIGINAL_SONG = "Music (Original Song)"
    PRODUCTION_DESIGN = "Production Design"
    ANIMATED_SHORT = "Animated Short Film"
    LIVE_ACTION_SHORT = "Live Action Short Film"
    SOUND = "Sound"
    VISUAL_EFFECTS = "Visual Effects"
    ADAPTED_SCREENPLAY = "Writing (Adapted Screenplay)"
    ORIGINAL_SCREENPLAY = "Writing (Original Screenplay)"

    @classmethod
    def parse(cls, text: str) -> "Category":
        """Resolve a category name or alias; unknown names are a configuration error."""
        key = " ".join(text.split()).casefold()
        for category in cls:
            if category.value.casefold() == key:
                return category
        try:
            return cls(_ALIASES[key])
        except KeyError:
            raise ConfigurationError(f"Unknown category: {text!r}") from None

    @property
    def kind(self) -> CategoryKind:
        return _KINDS[self]

    @property
    def shape(self) -> NomineeShape:
        kind = self.kind
        if kind in (CategoryKind.ACTING, CategoryKind.DIRECTING):
            return NomineeShape.PERSON_WITH_TITLE
        if kind is CategoryKind.SONG:
            return NomineeShape.ITEM_WITH_TITLE
        if kind is CategoryKind.INTERNATIONAL:
            return NomineeShape.TITLE_WITH_COUNTRY
        return NomineeShape.TITLE

    @property
    def is_feature(self) -> bool:
        """Best-Picture-equivalent: the nominee itself is a feature-length film."""
        return self.kind in (
            CategoryKind.PICTURE,
            CategoryKind.ANIMATED,
            CategoryKind.INTERNATIONAL,
        ) or self is Category.DOCUMENTARY_FEATURE

    @property
    def is_individual(self) -> bool:
        """Acting and directing nominations name a person credited on the film."""
        return self.kind in (CategoryKind.ACTING, CategoryKind.DIRECTING)


_KINDS = {
    Category.PICTURE: CategoryKind.PICTURE,
    Category.ACTOR: CategoryKind.ACTING,
    Category.SUPPORTING_ACTOR: CategoryKind.ACTING,
    Category.ACTRESS: CategoryKind.ACTING,
    Category.SUPPORTING_ACTRESS: CategoryKind.ACTING,
    Category.ANIMATED_FEATURE: CategoryKind.ANIMATED,
    Category.CINEMATOGRAPHY: CategoryKind.CRAFT,
    Category.COSTUME_DESIGN: CategoryKind.CRAFT,
    Category.DIRECTING: CategoryKind.DIRECTING,
    Category.DOCUMENTARY_FEATURE: CategoryKind.DOCUMENTARY,
    Category.DOCUMENTARY_SHORT: CategoryKind.DOCUMENTARY,
    Category.FILM_EDITING: CategoryKind.CRAFT,
    Category.INTERNATIONAL_FEATURE: CategoryKind.INTERNATIONAL,
    Category.MAKEUP: CategoryKind.CRAFT,
    Category.ORIGINAL_SCORE: CategoryKind.CRAFT,
    Category.ORIGINAL_SONG: CategoryKind.SONG,
    Category.PRODUCTION_DESIGN: CategoryKind.CRAFT,
    Category.ANIMATED_SHORT: CategoryKind.SHORT,
    Category.LIVE_ACTION_SHORT: CategoryKind.SHORT,
    Category.SOUND: CategoryKind.CRAFT,
    Category.VISUAL_EFFECTS: CategoryKind.CRAFT,
    Category.ADAPTED_SCREENPLAY: CategoryKind.WRITING,
    Category.ORIGINAL_SCREENPLAY: CategoryKind.WRITING,
}

_ALIASES = {
    "picture": "Best Picture",
    "best actor": "Actor in a Leading Role",
    "actor": "Actor in a Leading Role",
    "actor in a leading role": "Actor in a Leading Role",
    "best supporting actor": "Actor in a Supporting Role",
    "supporting actor": "Actor in a Supporting Role",
    "best actress": "Actress in a Leading Role",
    "actress": "Actress in a Leading Role",
    "best supporting actress": "Actress in a Supporting Role",
    "supporting actress": "Actress in a Supporting Role",
    "best director": "Directing",
    "director": "Directing",
    "best animated feature": "Animated Feature Film",
    "animated feature": "Animated Feature Film",
    "best cinematography": "Cinematography",
    "best documentary feature": "Documentary Feature Film",
    "documentary feature": "Documentary Feature Film",
    "documentary short subject": "Documentary Short Film",
    "best film editing": "Film Editing",
    "best international feature": "International Feature Film",
    "international feature": "International Feature Film",
    "foreign language film": "International Feature Film",
    "best original score": "Music (Original Score)",
    "original score": "Music (Original Score)",
    "best original song": "Music (Original Song)",
    "original song": "Music (Original Song)",
    "short film (animated)": "Animated Short Film",
    "short film (live action)": "Live Action Short Film",
    "best visual effects": "Visual Effects",
    "adapted screenplay": "Writing (Adapted Screenplay)",
    "original screenplay": "Writing (Original Screenplay)",
}

if set(_KINDS) != set(Category):
    raise ConfigurationError("every category needs a kind")
