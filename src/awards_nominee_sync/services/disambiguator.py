"""Pick the right metadata record among ambiguous search candidates."""

import logging
from typing import Protocol

from attrs import define, frozen
from rapidfuzz.distance import Levenshtein

from ..errors import UpstreamError
from ..models.categories import Category
from ..models.tmdb import CandidateMetadata
from ..parsing import normalize_query

logger = logging.getLogger(__name__)

TITLE_WEIGHT = 0.7
YEAR_WEIGHT = 0.3
ACCEPTANCE_THRESHOLD = 0.6
TIE_MARGIN = 0.05
YEAR_TOLERANCE = 1


class TieBreaker(Protocol):
    async def choose(
        self,
        expected_text: str,
        category: Category,
        eligibility_year: int,
        candidates: list[CandidateMetadata],
    ) -> int | None: ...


@frozen
class ScoredCandidate:
    candidate: CandidateMetadata
    score: float
    similarity: float
    year_match: bool


def title_similarity(expected_text: str, candidate: CandidateMetadata) -> float:
    """Normalized Levenshtein similarity against the primary or original title, whichever is higher."""
    expected = normalize_query(expected_text)
    titles = [t for t in (candidate.title, candidate.original_title) if t]
    return max(
        (Levenshtein.normalized_similarity(expected, normalize_query(t)) for t in titles),
        default=0.0,
    )


def year_matches(candidate: CandidateMetadata, eligibility_year: int) -> bool:
    year = candidate.release_year
    return year is not None and abs(year - eligibility_year) <= YEAR_TOLERANCE


def score_candidate(
    expected_text: str, candidate: CandidateMetadata, eligibility_year: int
) -> ScoredCandidate:
    similarity = title_similarity(expected_text, candidate)
    year_match = year_matches(candidate, eligibility_year)
    return ScoredCandidate(
        candidate=candidate,
        score=TITLE_WEIGHT * similarity + YEAR_WEIGHT * (1.0 if year_match else 0.0),
        similarity=similarity,
        year_match=year_match,
    )


@define
class Disambiguator:
    """Score candidates by title similarity and release-year proximity.

    A lone candidate is accepted only when it was released within a year of
    the eligibility year. With several candidates the best score must exceed
    ``threshold``. When a ``tie_breaker`` is configured it is consulted if the
    top score is not above the threshold or the top two are within
    ``tie_margin`` of each other; its answer is final unless the call fails,
    in which case numeric scoring decides.
    """

    tie_breaker: TieBreaker | None = None
    threshold: float = ACCEPTANCE_THRESHOLD
    tie_margin: float = TIE_MARGIN

    def rank(
        self, expected_text: str, candidates: list[CandidateMetadata], eligibility_year: int
    ) -> list[ScoredCandidate]:
        scored = [score_candidate(expected_text, c, eligibility_year) for c in candidates]
        return sorted(scored, key=lambda s: s.score, reverse=True)

    async def select(
        self,
        expected_text: str,
        candidates: list[CandidateMetadata],
        eligibility_year: int,
        category: Category,
    ) -> ScoredCandidate | None:
        """Like ``select_best`` but keeps the score for confidence reporting."""
        if not candidates:
            return None

        if len(candidates) == 1:
            only = score_candidate(expected_text, candidates[0], eligibility_year)
            if not only.year_match:
                logger.info(
                    "Rejected lone candidate %r (%s) for %r: outside eligibility year %d",
                    only.candidate.title,
                    only.candidate.release_date,
                    expected_text,
                    eligibility_year,
                )
                return None
            return only

        ranked = self.rank(expected_text, candidates, eligibility_year)
        top = ranked[0]
        inconclusive = top.score <= self.threshold or (
            top.score - ranked[1].score < self.tie_margin
        )

        if self.tie_breaker is not None and inconclusive:
            try:
                choice = await self.tie_breaker.choose(
                    expected_text,
                    category,
                    eligibility_year,
                    [s.candidate for s in ranked],
                )
            except UpstreamError as e:
                logger.warning("Tie-break unavailable for %r, using scores: %s", expected_text, e)
            else:
                return None if choice is None else ranked[choice]

        if top.score > self.threshold:
            return top
        return None

    async def select_best(
        self,
        expected_text: str,
        candidates: list[CandidateMetadata],
        eligibility_year: int,
        category: Category,
    ) -> CandidateMetadata | None:
        selected = await self.select(expected_text, candidates, eligibility_year, category)
        return selected.candidate if selected else None
