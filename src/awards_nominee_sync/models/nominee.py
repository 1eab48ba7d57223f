"""Nomination input and the persisted nominee entity."""

import enum
from datetime import date, datetime

from attrs import field, frozen

from ..errors import ConfigurationError
from .categories import Category
from .tmdb import Company, Credits


class ValidationStatus(str, enum.Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


@frozen
class Nomination:
    """A single nomination as delivered by the awards data source."""

    ceremony_year: int
    eligibility_year: int
    category: Category
    nominee_text: str
    is_winner: bool = False
    alternative_title: str | None = None

    @classmethod
    def from_record(cls, record: dict) -> "Nomination":
        """Build from a raw record (camelCase or snake_case keys).

        ``eligibilityYear`` defaults to the calendar year before the ceremony.
        """
        try:
            ceremony_year = int(record.get("ceremonyYear", record.get("ceremony_year")))
            text = record.get("nomineeText", record.get("nominee_text"))
            category = record["category"]
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigurationError(f"Incomplete nomination record: {record!r}") from e
        if not text:
            raise ConfigurationError(f"Nomination has no nominee text: {record!r}")

        eligibility_year = record.get("eligibilityYear", record.get("eligibility_year"))
        return cls(
            ceremony_year=ceremony_year,
            eligibility_year=int(eligibility_year) if eligibility_year else ceremony_year - 1,
            category=category if isinstance(category, Category) else Category.parse(category),
            nominee_text=text.strip(),
            is_winner=bool(record.get("isWinner", record.get("is_winner", False))),
            alternative_title=record.get("alternativeTitle", record.get("alternative_title")),
        )

    @property
    def natural_key(self) -> tuple[str, str, int]:
        return (self.nominee_text, self.category.value, self.ceremony_year)


@frozen
class NomineeEntity:
    """Denormalized nominee record: nomination, matched metadata and validation state.

    Updates go through ``attrs.evolve`` so a retried sync never observes a
    half-written record.
    """

    name: str
    category: Category
    ceremony_year: int
    eligibility_year: int
    is_winner: bool = False
    id: int | None = None
    film_title: str = ""
    person_names: tuple[str, ...] = field(factory=tuple, converter=tuple)
    biography: str = ""
    profile_path: str | None = None
    tmdb_id: int | None = None
    title: str | None = None
    overview: str = ""
    poster_path: str | None = None
    backdrop_path: str | None = None
    runtime: int | None = None
    release_date: date | None = None
    vote_average: float | None = None
    genres: tuple[str, ...] = field(factory=tuple, converter=tuple)
    production_companies: tuple[Company, ...] = field(factory=tuple, converter=tuple)
    extended_credits: Credits = field(factory=Credits)
    videos: tuple = field(factory=tuple, converter=tuple)
    trailer_url: str | None = None
    match_confidence: int = 0
    data_complete: bool = False
    validation_status: ValidationStatus = ValidationStatus.PENDING
    validation_errors: tuple[str, ...] = field(factory=tuple, converter=tuple)
    validation_report: "ValidationReport | None" = None
    last_synced: datetime | None = None

    @property
    def natural_key(self) -> tuple[str, str, int]:
        return (self.name, self.category.value, self.ceremony_year)

    def __attrs_post_init__(self) -> None:
        if self.validation_status is ValidationStatus.SUCCESS and (
            not self.data_complete or self.validation_errors
        ):
            raise ValueError(
                "a successfully validated nominee must be data-complete with no errors"
            )


@frozen
class ValidationReport:
    """Latest validation outcome for a nominee. Each run replaces the previous one."""

    subject_id: int
    timestamp: datetime
    media_score: int = 0
    data_completeness: int = 0
    issues: tuple[str, ...] = field(factory=tuple, converter=tuple)
    recommendations: tuple[str, ...] = field(factory=tuple, converter=tuple)
    category_valid: bool = False
