"""Tests for the enricher."""

from datetime import date

import pytest

from awards_nominee_sync.errors import UpstreamError
from awards_nominee_sync.models import CandidateMetadata, Category, Credits, Person
from awards_nominee_sync.services.enricher import Enricher, calculate_completeness, trim_credits

from payloads import DOWNEY, OPPENHEIMER


def crew(name, job):
    return Person(id=0, name=name, role=job)


class TestCompleteness:
    """Tests for calculate_completeness."""

    def test_all_fields_present(self):
        """Test full metadata scores 100."""
        movie = CandidateMetadata(
            id=1,
            title="Barbie",
            overview="x",
            runtime=114,
            genres=["Comedy"],
            release_date=date(2023, 7, 21),
        )
        assert calculate_completeness(movie) == 100

    def test_partial(self):
        """Test two of four fields scores 50."""
        movie = CandidateMetadata(id=1, title="Barbie", overview="x", runtime=114)
        assert calculate_completeness(movie) == 50

    def test_empty(self):
        """Test a bare summary scores 0."""
        assert calculate_completeness(CandidateMetadata(id=1, title="Barbie")) == 0


class TestTrimCredits:
    """Tests for trim_credits."""

    def test_top_ten_cast(self):
        """Test cast is cut to the top ten."""
        cast = [Person(id=i, name=f"Actor {i}", role=f"Role {i}") for i in range(15)]
        movie = CandidateMetadata(id=1, title="Film", credits=Credits(cast=cast))
        assert len(trim_credits(movie, Category.PICTURE).cast) == 10

    def test_crew_filtered_to_relevant_jobs(self):
        """Test crew keeps key jobs plus the category's required roles."""
        movie = CandidateMetadata(
            id=1,
            title="Film",
            credits=Credits(
                crew=[
                    crew("Christopher Nolan", "Director"),
                    crew("Emma Thomas", "Producer"),
                    crew("Jennifer Lame", "Editor"),
                    crew("Someone", "Gaffer"),
                ]
            ),
        )
        picture = [p.role for p in trim_credits(movie, Category.PICTURE).crew]
        editing = [p.role for p in trim_credits(movie, Category.FILM_EDITING).crew]
        assert picture == ["Director", "Producer"]
        assert editing == ["Director", "Producer", "Editor"]

    def test_named_nominee_kept(self):
        """Test a nominated actor billed outside the top ten is kept."""
        cast = [Person(id=i, name=f"Actor {i}", role=f"Role {i}") for i in range(12)]
        cast.append(Person(id=99, name="Da'Vine Joy Randolph", role="Mary Lamb"))
        movie = CandidateMetadata(id=1, title="The Holdovers", credits=Credits(cast=cast))
        trimmed = trim_credits(movie, Category.SUPPORTING_ACTRESS, ("Da'Vine Joy Randolph",))
        assert len(trimmed.cast) == 11
        assert trimmed.cast[-1].name == "Da'Vine Joy Randolph"


class TestEnricher:
    """Tests for Enricher.enrich."""

    @pytest.mark.asyncio
    async def test_enrich_detailed_candidate(self, tmdb, tmdb_api, cache):
        """Test a detailed candidate needs no extra fetch."""
        tmdb_api.add_movie(OPPENHEIMER)
        movie = await tmdb.get_movie(872585)
        enriched = await Enricher(tmdb=tmdb, cache=cache).enrich(movie, Category.PICTURE)
        assert len(tmdb_api.detail_requests) == 1
        assert enriched.completeness == 100
        assert enriched.trailer.key == "uYPbbksJxIg"
        assert "Producer" in [p.role for p in enriched.credits.crew]

    @pytest.mark.asyncio
    async def test_enrich_summary_fetches_detail(self, tmdb, tmdb_api, cache):
        """Test a search summary is detail-fetched first."""
        tmdb_api.add_movie(OPPENHEIMER)
        summary = CandidateMetadata(id=872585, title="Oppenheimer")
        enriched = await Enricher(tmdb=tmdb, cache=cache).enrich(summary, Category.PICTURE)
        assert enriched.candidate.detailed is True
        assert enriched.candidate.runtime == 180
        assert len(tmdb_api.detail_requests) == 1

    @pytest.mark.asyncio
    async def test_enrich_vanished_movie(self, tmdb, cache):
        """Test a candidate that no longer exists is an upstream error."""
        summary = CandidateMetadata(id=5, title="Gone")
        with pytest.raises(UpstreamError) as exc_info:
            await Enricher(tmdb=tmdb, cache=cache).enrich(summary, Category.PICTURE)
        assert exc_info.value.status_code == 404


class TestPersonProfiles:
    """Tests for profile fetches on acting and directing nominees."""

    @pytest.mark.asyncio
    async def test_acting_nominee_profile(self, tmdb, tmdb_api, cache):
        """Test the named performer's profile is fetched once and cached."""
        tmdb_api.add_movie(OPPENHEIMER)
        tmdb_api.add_person(DOWNEY)
        movie = await tmdb.get_movie(872585)
        enricher = Enricher(tmdb=tmdb, cache=cache)

        enriched = await enricher.enrich(movie, Category.SUPPORTING_ACTOR, ("Robert Downey Jr.",))
        assert [p.id for p in enriched.people] == [1892]
        assert enriched.people[0].biography.startswith("Robert John Downey Jr.")

        await enricher.enrich(movie, Category.SUPPORTING_ACTOR, ("Robert Downey Jr.",))
        assert len(tmdb_api.person_requests) == 1

    @pytest.mark.asyncio
    async def test_picture_fetches_no_profiles(self, tmdb, tmdb_api, cache):
        """Test title categories never look up people."""
        tmdb_api.add_movie(OPPENHEIMER)
        movie = await tmdb.get_movie(872585)
        enriched = await Enricher(tmdb=tmdb, cache=cache).enrich(movie, Category.PICTURE)
        assert enriched.people == ()
        assert tmdb_api.person_requests == []

    @pytest.mark.asyncio
    async def test_uncredited_name_fetches_nothing(self, tmdb, tmdb_api, cache):
        """Test a nominee missing from the credits has no profile."""
        tmdb_api.add_movie(OPPENHEIMER)
        movie = await tmdb.get_movie(872585)
        enriched = await Enricher(tmdb=tmdb, cache=cache).enrich(
            movie, Category.ACTOR, ("Bradley Cooper",)
        )
        assert enriched.people == ()
        assert tmdb_api.person_requests == []

    @pytest.mark.asyncio
    async def test_failed_profile_fetch_is_skipped(self, tmdb, tmdb_api, cache):
        """Test an unavailable profile leaves the person out instead of failing enrichment."""
        tmdb_api.add_movie(OPPENHEIMER)
        movie = await tmdb.get_movie(872585)
        tmdb_api.queue(503, 503, 503)
        enriched = await Enricher(tmdb=tmdb, cache=cache).enrich(
            movie, Category.DIRECTING, ("Christopher Nolan",)
        )
        assert enriched.people == ()
        assert enriched.candidate.id == 872585
        assert len(tmdb_api.person_requests) == 3
