"""Multi-strategy candidate search against TMDb, fronted by the metadata cache."""

import logging

from attrs import define, field, frozen

from ..errors import UpstreamError
from ..models.categories import Category, CategoryKind
from ..models.tmdb import NOT_FOUND, CandidateMetadata
from ..parsing import ParsedNominee, alternative_title_for, normalize_query, parse_nominee_text
from .cache import MetadataCache, cached_detail, make_key
from .disambiguator import Disambiguator, ScoredCandidate
from .tmdb import DEFAULT_LANGUAGE, TMDbService

logger = logging.getLogger(__name__)

ORIGINAL_TITLE_KINDS = (CategoryKind.DOCUMENTARY, CategoryKind.SHORT)


@frozen
class SearchStrategy:
    query: str
    year: int | None
    language: str | None = DEFAULT_LANGUAGE

    @property
    def key(self) -> str:
        return make_key(self.query, self.year, self.language)


@frozen
class SearchOutcome:
    """Result of a retrieval run. ``match`` is ``None`` when nothing resolved."""

    parsed: ParsedNominee
    candidates: tuple[CandidateMetadata, ...] = field(factory=tuple, converter=tuple)
    match: ScoredCandidate | None = None
    strategy: SearchStrategy | None = None


def build_strategies(
    parsed: ParsedNominee,
    category: Category,
    eligibility_year: int,
    alternative_title: str | None = None,
) -> list[SearchStrategy]:
    """Ordered search attempts: eligibility year, year before, alternate title, no year.

    Each attempt is repeated per locale variant. International entries add
    the submitting country's locale; documentaries and shorts add the
    original-title locale.
    """
    title = parsed.title
    queries: list[tuple[str, int | None]] = [
        (title, eligibility_year),
        (title, eligibility_year - 1),
    ]
    alternative = alternative_title or alternative_title_for(title)
    if alternative and normalize_query(alternative) != normalize_query(title):
        queries.append((alternative, eligibility_year))
    queries.append((title, None))

    locales: list[str | None] = [DEFAULT_LANGUAGE]
    if category.kind is CategoryKind.INTERNATIONAL and parsed.locale:
        locales.append(parsed.locale)
    elif category.kind in ORIGINAL_TITLE_KINDS:
        locales.append(None)

    strategies: list[SearchStrategy] = []
    seen: set[str] = set()
    for query, year in queries:
        for language in locales:
            strategy = SearchStrategy(query=query, year=year, language=language)
            if strategy.key not in seen:
                seen.add(strategy.key)
                strategies.append(strategy)
    return strategies


@define
class CandidateRetriever:
    """Find the metadata record a nomination refers to.

    Strategies run in order until one yields candidates the disambiguator
    accepts. A strategy whose calls fail after retries is skipped, but if no
    later strategy resolves the nominee its error is raised. Only when every
    strategy completed without a match is the primary key cached as not found,
    so identical lookups inside the TTL make no upstream calls.
    """

    tmdb: TMDbService
    cache: MetadataCache
    disambiguator: Disambiguator = field(factory=Disambiguator)
    max_candidates: int = 5

    async def resolve(
        self,
        nominee_text: str,
        category: Category,
        ceremony_year: int,
        eligibility_year: int | None = None,
        alternative_title: str | None = None,
    ) -> SearchOutcome:
        if eligibility_year is None:
            eligibility_year = ceremony_year - 1
        parsed = parse_nominee_text(nominee_text, category)
        strategies = build_strategies(parsed, category, eligibility_year, alternative_title)
        primary_key = strategies[0].key

        if self.cache.get(primary_key) is NOT_FOUND:
            logger.info("Skipping %r: cached as not found", parsed.title)
            return SearchOutcome(parsed=parsed)

        last_error: UpstreamError | None = None
        for strategy in strategies:
            try:
                candidates = await self._candidates_for(strategy)
            except UpstreamError as e:
                logger.warning("Abandoning search strategy %s: %s", strategy.key, e)
                last_error = e
                continue
            if not candidates:
                continue

            match = await self.disambiguator.select(
                parsed.title, list(candidates), eligibility_year, category
            )
            if match is not None:
                logger.info(
                    "Matched %r to TMDb %d %r via %s (score %.2f)",
                    nominee_text,
                    match.candidate.id,
                    match.candidate.title,
                    strategy.key,
                    match.score,
                )
                return SearchOutcome(
                    parsed=parsed, candidates=candidates, match=match, strategy=strategy
                )

        if last_error is not None:
            raise last_error

        logger.info("No TMDb match for %r after %d strategies", nominee_text, len(strategies))
        self.cache.put(primary_key, NOT_FOUND)
        return SearchOutcome(parsed=parsed)

    async def search(
        self,
        nominee_text: str,
        category: Category,
        ceremony_year: int,
        eligibility_year: int | None = None,
    ) -> list[CandidateMetadata]:
        """Return the first candidate list that contains a resolvable match, or ``[]``."""
        outcome = await self.resolve(nominee_text, category, ceremony_year, eligibility_year)
        return list(outcome.candidates)

    async def _candidates_for(self, strategy: SearchStrategy) -> tuple[CandidateMetadata, ...]:
        cached = self.cache.get(strategy.key)
        if cached is NOT_FOUND:
            return ()
        if isinstance(cached, tuple):
            return cached

        summaries = await self.tmdb.search_movies(
            strategy.query,
            year=strategy.year,
            language=strategy.language,
            limit=self.max_candidates,
        )
        if not summaries:
            self.cache.put(strategy.key, ())
            return ()

        top = await cached_detail(self.cache, self.tmdb, summaries[0].id, strategy.language)
        candidates = (top or summaries[0], *summaries[1:])
        self.cache.put(strategy.key, candidates)
        return candidates
