"""Data models for the nominee sync pipeline."""

from .categories import Category, CategoryKind, NomineeShape
from .nominee import Nomination, NomineeEntity, ValidationReport, ValidationStatus
from .tmdb import (
    NOT_FOUND,
    CandidateMetadata,
    Company,
    Credits,
    NotFoundMarker,
    Person,
    PersonProfile,
    VideoRef,
)
from .validation import (
    BatchSummary,
    CategoryValidation,
    EnrichedData,
    ItemFailure,
    MediaValidation,
    RosterIssue,
    RosterIssueKind,
    RosterReport,
    SeasonEligibility,
    ValidationResult,
    ValidationSweep,
)

__all__ = [
    "BatchSummary",
    "CandidateMetadata",
    "Category",
    "CategoryKind",
    "CategoryValidation",
    "Company",
    "Credits",
    "EnrichedData",
    "ItemFailure",
    "MediaValidation",
    "NOT_FOUND",
    "Nomination",
    "NomineeEntity",
    "NomineeShape",
    "NotFoundMarker",
    "Person",
    "PersonProfile",
    "RosterIssue",
    "RosterIssueKind",
    "RosterReport",
    "SeasonEligibility",
    "ValidationReport",
    "ValidationResult",
    "ValidationStatus",
    "ValidationSweep",
    "VideoRef",
]
