"""Tests for data models."""

from datetime import date, datetime, timezone

import pytest

from awards_nominee_sync.errors import ConfigurationError
from awards_nominee_sync.models import (
    CandidateMetadata,
    Category,
    CategoryKind,
    Credits,
    Nomination,
    NomineeEntity,
    NomineeShape,
    Person,
    ValidationReport,
    ValidationStatus,
)


class TestCategory:
    """Tests for the Category enum."""

    def test_parse_canonical_name(self):
        """Test canonical names parse regardless of case and spacing."""
        assert Category.parse("best  picture") is Category.PICTURE
        assert Category.parse("Writing (Adapted Screenplay)") is Category.ADAPTED_SCREENPLAY

    def test_parse_alias(self):
        """Test common aliases resolve to the canonical category."""
        assert Category.parse("Best Director") is Category.DIRECTING
        assert Category.parse("Foreign Language Film") is Category.INTERNATIONAL_FEATURE

    def test_parse_unknown_category(self):
        """Test unknown category text is rejected."""
        with pytest.raises(ConfigurationError, match="Unknown category"):
            Category.parse("Best Stunt Coordination")

    def test_category_count(self):
        """Test all competitive categories are present."""
        assert len(Category) == 23

    def test_kinds_and_shapes(self):
        """Test kind and nominee shape per category."""
        assert Category.ACTOR.kind is CategoryKind.ACTING
        assert Category.ACTOR.shape is NomineeShape.PERSON_WITH_TITLE
        assert Category.DIRECTING.shape is NomineeShape.PERSON_WITH_TITLE
        assert Category.ORIGINAL_SONG.shape is NomineeShape.ITEM_WITH_TITLE
        assert Category.INTERNATIONAL_FEATURE.shape is NomineeShape.TITLE_WITH_COUNTRY
        assert Category.CINEMATOGRAPHY.shape is NomineeShape.TITLE

    def test_feature_categories(self):
        """Test which categories count as feature-length films."""
        assert Category.PICTURE.is_feature
        assert Category.ANIMATED_FEATURE.is_feature
        assert Category.DOCUMENTARY_FEATURE.is_feature
        assert not Category.DOCUMENTARY_SHORT.is_feature
        assert not Category.ACTRESS.is_feature

    def test_individual_categories(self):
        """Test acting and directing name individuals."""
        assert Category.SUPPORTING_ACTRESS.is_individual
        assert Category.DIRECTING.is_individual
        assert not Category.FILM_EDITING.is_individual


class TestNomination:
    """Tests for Nomination model."""

    def test_from_camel_case_record(self):
        """Test building a nomination from a camelCase record."""
        nomination = Nomination.from_record(
            {
                "ceremonyYear": 2024,
                "eligibilityYear": 2023,
                "category": "Best Picture",
                "nomineeText": " Oppenheimer ",
                "isWinner": True,
            }
        )
        assert nomination.ceremony_year == 2024
        assert nomination.eligibility_year == 2023
        assert nomination.category is Category.PICTURE
        assert nomination.nominee_text == "Oppenheimer"
        assert nomination.is_winner is True

    def test_eligibility_year_defaults_to_previous_year(self):
        """Test eligibility year falls back to the year before the ceremony."""
        nomination = Nomination.from_record(
            {"ceremony_year": 2025, "category": "Actor", "nominee_text": "Adrien Brody (The Brutalist)"}
        )
        assert nomination.eligibility_year == 2024
        assert nomination.category is Category.ACTOR

    def test_missing_nominee_text(self):
        """Test a record without nominee text is rejected."""
        with pytest.raises(ConfigurationError):
            Nomination.from_record({"ceremonyYear": 2024, "category": "Best Picture"})

    def test_unknown_category_rejected(self):
        """Test unknown category fails at ingestion."""
        with pytest.raises(ConfigurationError):
            Nomination.from_record(
                {"ceremonyYear": 2024, "category": "Best Ensemble", "nomineeText": "X"}
            )

    def test_natural_key(self):
        """Test natural key is (name, category, ceremony year)."""
        nomination = Nomination(2024, 2023, Category.PICTURE, "Oppenheimer")
        assert nomination.natural_key == ("Oppenheimer", "Best Picture", 2024)


class TestNomineeEntity:
    """Tests for NomineeEntity model."""

    def test_entity_creation(self):
        """Test basic entity creation with defaults."""
        entity = NomineeEntity(
            name="Oppenheimer",
            category=Category.PICTURE,
            ceremony_year=2024,
            eligibility_year=2023,
        )
        assert entity.id is None
        assert entity.validation_status is ValidationStatus.PENDING
        assert entity.data_complete is False
        assert entity.extended_credits == Credits()
        assert entity.natural_key == ("Oppenheimer", "Best Picture", 2024)

    def test_success_requires_complete_data(self):
        """Test success status is rejected without complete data."""
        with pytest.raises(ValueError):
            NomineeEntity(
                name="Oppenheimer",
                category=Category.PICTURE,
                ceremony_year=2024,
                eligibility_year=2023,
                validation_status=ValidationStatus.SUCCESS,
                data_complete=False,
            )

    def test_success_requires_no_errors(self):
        """Test success status is rejected when errors are present."""
        with pytest.raises(ValueError):
            NomineeEntity(
                name="Oppenheimer",
                category=Category.PICTURE,
                ceremony_year=2024,
                eligibility_year=2023,
                validation_status=ValidationStatus.SUCCESS,
                data_complete=True,
                validation_errors=["Missing required credits: Producer"],
            )

    def test_list_fields_become_tuples(self):
        """Test list inputs are stored as tuples."""
        entity = NomineeEntity(
            name="Oppenheimer",
            category=Category.PICTURE,
            ceremony_year=2024,
            eligibility_year=2023,
            genres=["Drama", "History"],
        )
        assert entity.genres == ("Drama", "History")


class TestTMDbModels:
    """Tests for TMDb models."""

    def test_candidate_creation(self):
        """Test candidate creation and release year."""
        movie = CandidateMetadata(
            id=872585,
            title="Oppenheimer",
            release_date=date(2023, 7, 19),
            credits=Credits(crew=[Person(id=525, name="Christopher Nolan", role="Director")]),
        )
        assert movie.release_year == 2023
        assert movie.credits.crew[0].role == "Director"
        assert movie.detailed is False

    def test_release_year_without_date(self):
        """Test release year is None when the date is unknown."""
        assert CandidateMetadata(id=1, title="Untitled").release_year is None


class TestValidationReport:
    """Tests for ValidationReport model."""

    def test_report_creation(self):
        """Test report creation."""
        report = ValidationReport(
            subject_id=1,
            timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc),
            media_score=70,
            data_completeness=75,
            issues=["No official trailer available"],
        )
        assert report.issues == ("No official trailer available",)
        assert report.recommendations == ()
        assert report.category_valid is False
