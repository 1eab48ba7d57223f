"""Results produced by the enrichment and validation stages."""

import enum

from attrs import field, frozen

from .categories import Category
from .nominee import NomineeEntity, ValidationReport
from .tmdb import CandidateMetadata, Credits, PersonProfile, VideoRef


@frozen
class EnrichedData:
    """Detail-fetched candidate plus the trimmed credits kept on the entity.

    ``people`` holds profiles of the persons an acting or directing nomination names.
    """

    candidate: CandidateMetadata
    credits: Credits
    completeness: int
    trailer: VideoRef | None = None
    people: tuple[PersonProfile, ...] = field(factory=tuple, converter=tuple)


@frozen
class CategoryValidation:
    valid: bool
    errors: tuple[str, ...] = field(factory=tuple, converter=tuple)


@frozen
class SeasonEligibility:
    eligible: bool
    reason: str | None = None


@frozen
class MediaValidation:
    """Asset checks for one movie. ``score`` starts at 100 and loses points per missing asset."""

    poster: bool
    backdrop: bool
    best_trailer: bool
    score: int
    trailer: VideoRef | None = None
    issues: tuple[str, ...] = field(factory=tuple, converter=tuple)


@frozen
class ValidationResult:
    """Combined outcome of category rules, season eligibility and media checks."""

    entity: NomineeEntity
    category: CategoryValidation
    season: SeasonEligibility
    media: MediaValidation
    report: ValidationReport | None = None

    @property
    def valid(self) -> bool:
        return self.category.valid and self.season.eligible

    @property
    def errors(self) -> tuple[str, ...]:
        return self.entity.validation_errors


@frozen
class ItemFailure:
    name: str
    category: str
    reason: str


@frozen
class BatchSummary:
    """Outcome of a batch run. Partial completion is the normal case."""

    processed: int
    total: int
    succeeded: int
    failed: int
    failures: tuple[ItemFailure, ...] = field(factory=tuple, converter=tuple)


@frozen
class ValidationSweep:
    """Outcome of re-validating every stored nominee."""

    total_validated: int
    valid: int
    invalid: int
    results: tuple[ValidationResult, ...] = field(factory=tuple, converter=tuple)


class RosterIssueKind(str, enum.Enum):
    MISSING = "missing"
    INCORRECT = "incorrect"
    INCOMPLETE = "incomplete"


@frozen
class RosterIssue:
    kind: RosterIssueKind
    category: Category
    details: str
    severity: str
    recommendation: str


@frozen
class RosterReport:
    """Stored nominees for one ceremony compared against the official list."""

    ceremony_year: int
    total_nominees: int
    issues: tuple[RosterIssue, ...] = field(factory=tuple, converter=tuple)
    category_counts: dict[str, int] = field(factory=dict)

    @property
    def error_count(self) -> int:
        return len(self.issues)
