"""End-to-end nominee pipeline: search, disambiguate, enrich, validate, persist."""

import asyncio
import enum
import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from datetime import datetime, timezone

import attrs
from aiolimiter import AsyncLimiter
from attrs import define, field, frozen

from ..config import Settings, get_settings
from ..errors import ConfigurationError, TransientUpstreamError, UpstreamError
from ..models.categories import Category
from ..models.nominee import Nomination, NomineeEntity, ValidationReport, ValidationStatus
from ..models.validation import (
    BatchSummary,
    EnrichedData,
    ItemFailure,
    MediaValidation,
    RosterReport,
    ValidationResult,
    ValidationSweep,
)
from ..parsing import ParsedNominee
from .cache import MetadataCache
from .category_rules import validate_category
from .claude import ClaudeTieBreaker
from .disambiguator import Disambiguator
from .enricher import COMPLETENESS_FIELDS, Enricher, calculate_completeness
from .media import MediaValidator, trailer_url
from .retriever import CandidateRetriever
from .roster import check_roster
from .season import SeasonEligibilityChecker
from .storage import InMemoryNomineeStore, NomineeStore
from .tmdb import TMDbService

logger = logging.getLogger(__name__)

DATA_COMPLETE_MEDIA_SCORE = 70


class PipelineState(enum.Enum):
    PENDING = "pending"
    SEARCHING = "searching"
    FOUND = "found"
    NOT_FOUND = "not_found"
    ENRICHING = "enriching"
    VALIDATING = "validating"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    FAILED_NO_MATCH = "failed_no_match"


TRANSITIONS = {
    PipelineState.PENDING: {PipelineState.SEARCHING},
    PipelineState.SEARCHING: {PipelineState.FOUND, PipelineState.NOT_FOUND},
    PipelineState.FOUND: {PipelineState.ENRICHING},
    PipelineState.ENRICHING: {PipelineState.VALIDATING},
    PipelineState.VALIDATING: {PipelineState.SUCCEEDED, PipelineState.FAILED},
    PipelineState.NOT_FOUND: {PipelineState.FAILED_NO_MATCH},
}


@define
class NomineeRun:
    """State of one nominee moving through the pipeline."""

    nomination: Nomination
    state: PipelineState = PipelineState.PENDING
    history: list[PipelineState] = field(factory=lambda: [PipelineState.PENDING])

    def advance(self, state: PipelineState) -> None:
        if state not in TRANSITIONS.get(self.state, set()):
            raise RuntimeError(f"Illegal pipeline transition {self.state.name} -> {state.name}")
        logger.debug("%s: %s -> %s", self.nomination.nominee_text, self.state.name, state.name)
        self.state = state
        self.history.append(state)


@frozen
class SyncOutcome:
    nomination: Nomination
    state: PipelineState
    entity: NomineeEntity | None = None
    reason: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.state is PipelineState.SUCCEEDED


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def build_entity(
    nomination: Nomination,
    parsed: ParsedNominee,
    enriched: EnrichedData,
    match_score: float,
    synced_at: datetime,
) -> NomineeEntity:
    """Combine a nomination with its matched metadata. Validation fields start pending."""
    movie = enriched.candidate
    profile = enriched.people[0] if enriched.people else None
    return NomineeEntity(
        name=nomination.nominee_text,
        category=nomination.category,
        ceremony_year=nomination.ceremony_year,
        eligibility_year=nomination.eligibility_year,
        is_winner=nomination.is_winner,
        film_title=parsed.title,
        person_names=parsed.person_names,
        biography=profile.biography if profile else "",
        profile_path=profile.profile_path if profile else None,
        tmdb_id=movie.id,
        title=movie.title,
        overview=movie.overview,
        poster_path=movie.poster_path,
        backdrop_path=movie.backdrop_path,
        runtime=movie.runtime,
        release_date=movie.release_date,
        vote_average=movie.vote_average,
        genres=movie.genres,
        production_companies=movie.production_companies,
        extended_credits=enriched.credits,
        videos=movie.videos,
        trailer_url=trailer_url(enriched.trailer),
        match_confidence=round(match_score * 100),
        last_synced=synced_at,
    )


def build_report(
    entity: NomineeEntity,
    media: MediaValidation,
    errors: list[str],
    category_valid: bool,
    timestamp: datetime,
) -> ValidationReport:
    missing = [name for name in COMPLETENESS_FIELDS if not getattr(entity, name)]
    if entity.category.is_individual and not entity.biography:
        missing.append("biography")
    issues = [*errors, *media.issues, *(f"Missing field: {name}" for name in missing)]

    recommendations: list[str] = []
    if any(name in COMPLETENESS_FIELDS for name in missing):
        recommendations.append("Fetch complete movie details from TMDb")
    if "biography" in missing:
        recommendations.append("Fetch biography data from TMDb")
    if not media.poster or not media.backdrop:
        recommendations.append("Refresh poster and backdrop artwork from TMDb images")
    if not media.best_trailer:
        recommendations.append("Link an official trailer")
    if any("not found in the film's cast or crew" in e for e in errors):
        recommendations.append("Verify the nominee appears in the film's credits")
    if any(e.startswith("Missing required credits") for e in errors):
        recommendations.append("Check the film's crew credits for the category's required roles")
    if any("eligibility window" in e for e in errors):
        recommendations.append("Confirm the release date and ceremony year of the nomination")

    return ValidationReport(
        subject_id=entity.id,
        timestamp=timestamp,
        media_score=media.score,
        data_completeness=calculate_completeness(entity),
        issues=issues,
        recommendations=recommendations,
        category_valid=category_valid,
    )


@define
class NomineePipeline:
    """Drive nominations through search, enrichment and validation.

    ``sync_nominee`` handles one nomination and lets infrastructure faults
    propagate. ``process_batch`` runs ``batch_size`` nominations concurrently,
    pauses ``batch_pause`` seconds between batches, retries each item up to
    ``max_attempts`` times on transient faults, and always returns a summary.
    """

    retriever: CandidateRetriever
    enricher: Enricher
    media: MediaValidator
    store: NomineeStore = field(factory=InMemoryNomineeStore)
    season: SeasonEligibilityChecker = field(factory=SeasonEligibilityChecker)
    batch_size: int = 5
    batch_pause: float = 1.0
    max_attempts: int = 3
    retry_backoff: float = 1.0
    clock: Callable[[], datetime] = utcnow
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    async def run(self, nomination: Nomination) -> SyncOutcome:
        run = NomineeRun(nomination)
        logger.info("Processing nominee: %s (%s)", nomination.nominee_text, nomination.category.value)

        run.advance(PipelineState.SEARCHING)
        found = await self.retriever.resolve(
            nomination.nominee_text,
            nomination.category,
            nomination.ceremony_year,
            eligibility_year=nomination.eligibility_year,
            alternative_title=nomination.alternative_title,
        )
        if found.match is None:
            run.advance(PipelineState.NOT_FOUND)
            run.advance(PipelineState.FAILED_NO_MATCH)
            return SyncOutcome(
                nomination=nomination,
                state=run.state,
                reason=f"No TMDb match found for {found.parsed.title!r}",
            )
        run.advance(PipelineState.FOUND)

        run.advance(PipelineState.ENRICHING)
        enriched = await self.enricher.enrich(
            found.match.candidate, nomination.category, found.parsed.person_names
        )
        entity = build_entity(nomination, found.parsed, enriched, found.match.score, self.clock())
        entity = await self.store.upsert(entity)

        run.advance(PipelineState.VALIDATING)
        result = await self.validate_nominee(entity)
        run.advance(PipelineState.SUCCEEDED if result.valid else PipelineState.FAILED)
        return SyncOutcome(
            nomination=nomination,
            state=run.state,
            entity=result.entity,
            reason=None if result.valid else "; ".join(result.errors),
        )

    async def sync_nominee(self, nomination: Nomination) -> NomineeEntity | None:
        """Sync one nomination. Returns ``None`` when no metadata match exists."""
        outcome = await self.run(nomination)
        return outcome.entity

    async def validate_nominee(self, entity: NomineeEntity) -> ValidationResult:
        """Re-validate an enriched entity without re-fetching its metadata.

        The entity's status, errors and report are overwritten in the store;
        an entity the store does not know yet is inserted first.
        Media quality only feeds ``data_complete``; a nominee that passes the
        category and season checks without complete data stays ``pending``.
        """
        if entity.id is None or await self.store.get(entity.id) is None:
            entity = await self.store.upsert(entity)

        category = validate_category(entity)
        season = self.season.check_eligibility(
            entity.release_date, entity.ceremony_year, entity.category, entity.runtime
        )
        media = await self.media.validate_assets(
            entity.poster_path, entity.backdrop_path, entity.videos
        )

        errors = list(category.errors)
        if not season.eligible:
            errors.append(season.reason)
        data_complete = category.valid and media.score > DATA_COMPLETE_MEDIA_SCORE

        if errors:
            status = ValidationStatus.FAILED
        elif data_complete:
            status = ValidationStatus.SUCCESS
        else:
            status = ValidationStatus.PENDING

        report = build_report(entity, media, errors, category.valid, self.clock())
        updated = attrs.evolve(
            entity,
            data_complete=data_complete,
            validation_status=status,
            validation_errors=errors,
            validation_report=report,
            trailer_url=trailer_url(media.trailer) or entity.trailer_url,
        )
        updated = await self.store.put(updated)
        logger.info(
            "Validated %s: %s (media %d, completeness %d)",
            entity.name,
            status.value,
            media.score,
            report.data_completeness,
        )
        return ValidationResult(
            entity=updated, category=category, season=season, media=media, report=report
        )

    async def get_validation_report(self, subject_id: int) -> ValidationReport | None:
        entity = await self.store.get(subject_id)
        return entity.validation_report if entity else None

    async def validate_all(self, ceremony_year: int | None = None) -> ValidationSweep:
        """Re-validate every stored nominee, optionally only one ceremony's."""
        entities = await self.store.all()
        if ceremony_year is not None:
            entities = [e for e in entities if e.ceremony_year == ceremony_year]

        results = []
        for entity in entities:
            results.append(await self.validate_nominee(entity))
        valid = sum(1 for r in results if r.valid)
        logger.info("Validated %d stored nominees: %d valid", len(results), valid)
        return ValidationSweep(
            total_validated=len(results),
            valid=valid,
            invalid=len(results) - valid,
            results=results,
        )

    async def check_roster(
        self, ceremony_year: int, expected: Mapping[Category, Sequence[str]]
    ) -> RosterReport:
        return check_roster(await self.store.all(), expected, ceremony_year)

    async def process_batch(
        self,
        nominations: Sequence[Nomination],
        on_progress: Callable[[float], None] | None = None,
        batch_size: int | None = None,
    ) -> BatchSummary:
        size = batch_size or self.batch_size
        total = len(nominations)
        processed = 0
        succeeded = 0
        failures: list[ItemFailure] = []

        async def process(nomination: Nomination) -> None:
            nonlocal processed, succeeded
            outcome = await self._run_with_retry(nomination)
            processed += 1
            if outcome.succeeded:
                succeeded += 1
            else:
                failures.append(
                    ItemFailure(
                        name=nomination.nominee_text,
                        category=nomination.category.value,
                        reason=outcome.reason or outcome.state.value,
                    )
                )
            if on_progress:
                on_progress(processed / total)

        for start in range(0, total, size):
            if start:
                await self.sleep(self.batch_pause)
            tasks = [asyncio.create_task(process(n)) for n in nominations[start : start + size]]
            try:
                await asyncio.gather(*tasks)
            except ConfigurationError:
                for task in tasks:
                    task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
                raise
            logger.info("Batch progress: %d/%d processed, %d succeeded", processed, total, succeeded)

        return BatchSummary(
            processed=processed,
            total=total,
            succeeded=succeeded,
            failed=len(failures),
            failures=failures,
        )

    async def _run_with_retry(self, nomination: Nomination) -> SyncOutcome:
        for attempt in range(1, self.max_attempts + 1):
            try:
                return await self.run(nomination)
            except ConfigurationError:
                raise
            except TransientUpstreamError as e:
                if attempt == self.max_attempts:
                    logger.error(
                        "Giving up on %s after %d attempts: %s", nomination.nominee_text, attempt, e
                    )
                    return self._failed(nomination, f"Transient failure after {attempt} attempts: {e}")
                logger.warning(
                    "Transient failure for %s (attempt %d/%d): %s",
                    nomination.nominee_text,
                    attempt,
                    self.max_attempts,
                    e,
                )
                await self.sleep(self.retry_backoff * attempt)
            except UpstreamError as e:
                logger.error("Upstream failure for %s: %s", nomination.nominee_text, e)
                return self._failed(nomination, str(e))
            except Exception as e:
                logger.exception("Failed to process nominee %s", nomination.nominee_text)
                return self._failed(nomination, f"Error: {e}")
        raise AssertionError("max_attempts must be at least 1")

    def _failed(self, nomination: Nomination, reason: str) -> SyncOutcome:
        return SyncOutcome(nomination=nomination, state=PipelineState.FAILED, reason=reason)

    async def close(self) -> None:
        await self.retriever.tmdb.close()
        tie_breaker = self.retriever.disambiguator.tie_breaker
        if isinstance(tie_breaker, ClaudeTieBreaker):
            await tie_breaker.close()


def build_pipeline(
    settings: Settings | None = None, store: NomineeStore | None = None
) -> NomineePipeline:
    """Wire one shared cache, limiter and TMDb client into a pipeline."""
    settings = settings or get_settings()
    cache = MetadataCache(ttl=settings.cache_ttl)
    tmdb = TMDbService(
        read_access_token=settings.tmdb_read_access_token,
        api_key=settings.tmdb_api_key,
        limiter=AsyncLimiter(settings.rate_limit, settings.rate_window),
        timeout=settings.request_timeout,
        rate_limit_cooldown=settings.rate_limit_cooldown,
        max_attempts=settings.max_attempts,
    )
    tie_breaker = None
    if settings.claude_api_key:
        tie_breaker = ClaudeTieBreaker(
            api_key=settings.claude_api_key,
            model=settings.claude_model,
            timeout=settings.request_timeout,
        )

    return NomineePipeline(
        retriever=CandidateRetriever(
            tmdb=tmdb, cache=cache, disambiguator=Disambiguator(tie_breaker=tie_breaker)
        ),
        enricher=Enricher(tmdb=tmdb, cache=cache),
        media=MediaValidator(tmdb=tmdb, cache=cache),
        store=store or InMemoryNomineeStore(),
        batch_size=settings.batch_size,
        batch_pause=settings.batch_pause,
        max_attempts=settings.max_attempts,
    )
