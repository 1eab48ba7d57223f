"""Nominee string parsing and query normalization."""

import re
import unicodedata

from attrs import field, frozen

from .models.categories import Category, NomineeShape


TRAILING_PARENTHETICAL = re.compile(r"^(?P<lead>.*?)\s*\((?P<inner>[^()]*)\)\s*$")
NAME_SEPARATORS = re.compile(r"\s*(?:,|;|&|\band\b)\s*")
NON_WORD = re.compile(r"[^\w]+")

# Submitting country -> TMDb search locale, for international feature entries.
COUNTRY_LOCALES = {
    "argentina": "es-AR",
    "austria": "de-AT",
    "belgium": "fr-BE",
    "brazil": "pt-BR",
    "denmark": "da-DK",
    "france": "fr-FR",
    "germany": "de-DE",
    "iran": "fa-IR",
    "italy": "it-IT",
    "japan": "ja-JP",
    "mexico": "es-MX",
    "norway": "no-NO",
    "poland": "pl-PL",
    "south korea": "ko-KR",
    "spain": "es-ES",
    "sweden": "sv-SE",
    "tunisia": "ar-TN",
    "united kingdom": "en-GB",
}

# Titles the metadata service lists under a different primary name.
KNOWN_ALTERNATIVE_TITLES = {
    "io capitano": "Me Captain",
    "the teachers lounge": "Das Lehrerzimmer",
    "society of the snow": "La sociedad de la nieve",
    "the boy and the heron": "How Do You Live?",
    "anatomy of a fall": "Anatomie d'une chute",
}


@frozen
class ParsedNominee:
    """Search title and credited people extracted from a nominee string."""

    title: str
    person_names: tuple[str, ...] = field(factory=tuple, converter=tuple)
    country: str | None = None

    @property
    def locale(self) -> str | None:
        if not self.country:
            return None
        return COUNTRY_LOCALES.get(self.country.casefold())


def parse_nominee_text(text: str, category: Category) -> ParsedNominee:
    """Split a nominee string into the film title to search for and any named people.

    >>> parse_nominee_text("Bradley Cooper (Maestro)", Category.ACTOR)
    ParsedNominee(title='Maestro', person_names=('Bradley Cooper',), country=None)
    """
    text = " ".join(text.split())
    match = TRAILING_PARENTHETICAL.match(text)
    shape = category.shape

    if match is None or not match.group("lead"):
        return ParsedNominee(title=text)

    lead = match.group("lead").strip()
    inner = match.group("inner").strip()

    if shape is NomineeShape.PERSON_WITH_TITLE:
        names = tuple(n for n in NAME_SEPARATORS.split(lead) if n)
        return ParsedNominee(title=inner or lead, person_names=names)
    if shape is NomineeShape.ITEM_WITH_TITLE:
        return ParsedNominee(title=inner or lead)
    if shape is NomineeShape.TITLE_WITH_COUNTRY:
        return ParsedNominee(title=lead, country=inner or None)
    return ParsedNominee(title=text)


def normalize_query(text: str) -> str:
    """Cache-key form of a query: NFKC, case-folded, punctuation collapsed."""
    text = unicodedata.normalize("NFKC", text).casefold()
    return " ".join(NON_WORD.sub(" ", text).split())


def fold_name(name: str) -> str:
    """Accent- and case-insensitive form of a person's name for credit matching."""
    decomposed = unicodedata.normalize("NFKD", name)
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    return normalize_query(stripped)


def alternative_title_for(title: str) -> str | None:
    return KNOWN_ALTERNATIVE_TITLES.get(normalize_query(title))
