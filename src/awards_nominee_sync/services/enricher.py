"""Reshape a selected candidate into the credits and scores stored on the nominee."""

import logging

from attrs import define

from ..errors import UpstreamError
from ..models.categories import Category
from ..models.tmdb import CandidateMetadata, Credits, Person, PersonProfile
from ..models.validation import EnrichedData
from ..parsing import fold_name
from .cache import MetadataCache, cached_detail, cached_person
from .category_rules import requirements_for
from .media import best_trailer
from .tmdb import TMDbService

logger = logging.getLogger(__name__)

TOP_CREDITS = 10
KEY_CREW_JOBS = ("Director", "Producer", "Screenplay", "Writer")
COMPLETENESS_FIELDS = ("overview", "release_date", "runtime", "genres")


def calculate_completeness(movie: CandidateMetadata) -> int:
    """Percentage of overview, release date, runtime and genres that are present."""
    present = sum(1 for name in COMPLETENESS_FIELDS if getattr(movie, name))
    return round(present / len(COMPLETENESS_FIELDS) * 100)


def relevant_jobs(category: Category) -> tuple[str, ...]:
    return KEY_CREW_JOBS + requirements_for(category).required_credit_roles


def _role_matches(person: Person, jobs: tuple[str, ...]) -> bool:
    role = person.role.casefold()
    return any(job.casefold() in role for job in jobs)


def _keep_named(
    top: list[Person], everyone: tuple[Person, ...], person_names: tuple[str, ...]
) -> list[Person]:
    """Append credits for named nominees that fell outside the top slice."""
    wanted = {fold_name(n) for n in person_names}
    present = {fold_name(p.name) for p in top}
    extra = [p for p in everyone if fold_name(p.name) in wanted - present]
    seen: set[str] = set()
    for person in extra:
        key = fold_name(person.name)
        if key not in seen:
            seen.add(key)
            top.append(person)
    return top


def trim_credits(
    movie: CandidateMetadata, category: Category, person_names: tuple[str, ...] = ()
) -> Credits:
    """Top cast, plus the top crew whose jobs matter for this category."""
    jobs = relevant_jobs(category)
    cast = list(movie.credits.cast[:TOP_CREDITS])
    crew = [p for p in movie.credits.crew if _role_matches(p, jobs)][:TOP_CREDITS]
    if person_names:
        cast = _keep_named(cast, movie.credits.cast, person_names)
        crew = _keep_named(crew, movie.credits.crew, person_names)
    return Credits(cast=cast, crew=crew)


def named_credits(credits: Credits, person_names: tuple[str, ...]) -> list[Person]:
    """First credit for each named nominee, in nomination order."""
    found = []
    for name in person_names:
        wanted = fold_name(name)
        person = next(
            (p for p in (*credits.cast, *credits.crew) if fold_name(p.name) == wanted), None
        )
        if person is not None:
            found.append(person)
    return found


@define
class Enricher:
    """Detail-fetch a candidate (through the cache) and build its EnrichedData."""

    tmdb: TMDbService
    cache: MetadataCache

    async def enrich(
        self,
        candidate: CandidateMetadata,
        category: Category,
        person_names: tuple[str, ...] = (),
    ) -> EnrichedData:
        movie = candidate
        if not candidate.detailed:
            movie = await cached_detail(self.cache, self.tmdb, candidate.id)
            if movie is None:
                raise UpstreamError(f"TMDb movie {candidate.id} is no longer available", 404)

        completeness = calculate_completeness(movie)
        logger.debug("Enriched TMDb %d (%s): completeness %d", movie.id, movie.title, completeness)
        credits = trim_credits(movie, category, person_names)
        people = []
        if category.is_individual:
            people = await self.fetch_people(named_credits(credits, person_names))
        return EnrichedData(
            candidate=movie,
            credits=credits,
            completeness=completeness,
            trailer=best_trailer(movie.videos),
            people=people,
        )

    async def fetch_people(self, credits: list[Person]) -> list[PersonProfile]:
        """Profiles for the credited nominees. A failed lookup leaves that person out."""
        people = []
        for credit in credits:
            try:
                profile = await cached_person(self.cache, self.tmdb, credit.id)
            except UpstreamError as e:
                logger.warning("Could not fetch TMDb person %d (%s): %s", credit.id, credit.name, e)
                continue
            if profile is not None:
                people.append(profile)
        return people
