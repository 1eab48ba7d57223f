"""Compare the stored nominees of a ceremony against its official nominee list."""

import logging
from collections.abc import Iterable, Mapping, Sequence

from ..models.categories import Category
from ..models.nominee import NomineeEntity
from ..models.validation import RosterIssue, RosterIssueKind, RosterReport
from ..parsing import fold_name

logger = logging.getLogger(__name__)

PLACEHOLDER_POSTER = "/placeholder-poster.jpg"


def nominee_names(entity: NomineeEntity) -> set[str]:
    """Every form an official list may use for this nominee: full text, film or person."""
    names = {entity.name, *entity.person_names}
    if entity.film_title:
        names.add(entity.film_title)
    return {fold_name(n) for n in names}


def _incomplete(entity: NomineeEntity, expected_name: str) -> list[RosterIssue]:
    issues = []

    def flag(details: str, severity: str, recommendation: str) -> None:
        issues.append(
            RosterIssue(
                kind=RosterIssueKind.INCOMPLETE,
                category=entity.category,
                details=details,
                severity=severity,
                recommendation=recommendation,
            )
        )

    if not entity.tmdb_id or not entity.poster_path or entity.poster_path == PLACEHOLDER_POSTER:
        missing = "TMDb id" if not entity.tmdb_id else "poster"
        flag(
            f"Incomplete TMDb data for {expected_name}: missing {missing}",
            "high",
            "Update TMDb data for complete nominee information",
        )

    if entity.category is Category.PICTURE:
        for label, value in (
            ("overview", entity.overview),
            ("release date", entity.release_date),
            ("runtime", entity.runtime),
        ):
            if not value:
                flag(
                    f"Incomplete movie data for {expected_name}: missing {label}",
                    "high",
                    "Fetch complete movie details from TMDb",
                )
                break

    if entity.category.is_individual and not entity.biography:
        flag(
            f"Missing biography for {expected_name}",
            "medium",
            "Fetch biography data from TMDb",
        )
    return issues


def check_roster(
    entities: Iterable[NomineeEntity],
    expected: Mapping[Category, Sequence[str]],
    ceremony_year: int,
) -> RosterReport:
    """Report missing, extra and incomplete nominees per category.

    Only categories present in ``expected`` are compared. A stored nominee
    matches an expected name by its full nominee text, its film title or one
    of its person names, ignoring case and accents.
    """
    current = [e for e in entities if e.ceremony_year == ceremony_year]
    issues: list[RosterIssue] = []
    counts: dict[str, int] = {}

    for category, names in expected.items():
        stored = [e for e in current if e.category is category]
        counts[category.value] = len(stored)
        wanted = {fold_name(n) for n in names}

        for expected_name in names:
            key = fold_name(expected_name)
            found = next((e for e in stored if key in nominee_names(e)), None)
            if found is None:
                issues.append(
                    RosterIssue(
                        kind=RosterIssueKind.MISSING,
                        category=category,
                        details=f"Missing nominee: {expected_name} in {category.value}",
                        severity="high",
                        recommendation=f'Add nominee "{expected_name}" to {category.value}',
                    )
                )
                continue
            issues.extend(_incomplete(found, expected_name))

        for entity in stored:
            if not nominee_names(entity) & wanted:
                issues.append(
                    RosterIssue(
                        kind=RosterIssueKind.INCORRECT,
                        category=category,
                        details=f"Incorrect nominee in store: {entity.name} for {category.value}",
                        severity="high",
                        recommendation=(
                            f'Remove incorrect nominee "{entity.name}" from {category.value}'
                        ),
                    )
                )

    logger.info(
        "Roster check for %d: %d nominees, %d issues", ceremony_year, len(current), len(issues)
    )
    return RosterReport(
        ceremony_year=ceremony_year,
        total_nominees=len(current),
        issues=issues,
        category_counts=counts,
    )
