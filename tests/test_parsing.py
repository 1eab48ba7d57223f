"""Tests for nominee text parsing and query normalization."""

from awards_nominee_sync.models import Category
from awards_nominee_sync.parsing import (
    alternative_title_for,
    fold_name,
    normalize_query,
    parse_nominee_text,
)


class TestParseNomineeText:
    """Tests for parse_nominee_text."""

    def test_plain_title(self):
        """Test a Best Picture nominee is the title itself."""
        parsed = parse_nominee_text("Oppenheimer", Category.PICTURE)
        assert parsed.title == "Oppenheimer"
        assert parsed.person_names == ()

    def test_person_with_title(self):
        """Test an acting nominee splits into person and film."""
        parsed = parse_nominee_text("Bradley Cooper (Maestro)", Category.ACTOR)
        assert parsed.title == "Maestro"
        assert parsed.person_names == ("Bradley Cooper",)

    def test_multiple_people(self):
        """Test several credited people are split on 'and' and commas."""
        parsed = parse_nominee_text(
            "Daniel Kwan and Daniel Scheinert (Everything Everywhere All at Once)",
            Category.DIRECTING,
        )
        assert parsed.title == "Everything Everywhere All at Once"
        assert parsed.person_names == ("Daniel Kwan", "Daniel Scheinert")

    def test_song_with_title(self):
        """Test an original song nominee searches for the film."""
        parsed = parse_nominee_text("What Was I Made For? (Barbie)", Category.ORIGINAL_SONG)
        assert parsed.title == "Barbie"
        assert parsed.person_names == ()

    def test_title_with_country(self):
        """Test an international entry keeps the title and maps the country to a locale."""
        parsed = parse_nominee_text("Io Capitano (Italy)", Category.INTERNATIONAL_FEATURE)
        assert parsed.title == "Io Capitano"
        assert parsed.country == "Italy"
        assert parsed.locale == "it-IT"

    def test_unknown_country_has_no_locale(self):
        """Test a country without a locale mapping."""
        parsed = parse_nominee_text("Some Film (Atlantis)", Category.INTERNATIONAL_FEATURE)
        assert parsed.locale is None

    def test_parenthetical_kept_for_title_categories(self):
        """Test a parenthetical is part of the title where the shape is a plain title."""
        parsed = parse_nominee_text("Fantastic Mr. Fox (Extended)", Category.ANIMATED_FEATURE)
        assert parsed.title == "Fantastic Mr. Fox (Extended)"

    def test_whitespace_collapsed(self):
        """Test repeated whitespace is collapsed."""
        parsed = parse_nominee_text("  Past   Lives ", Category.PICTURE)
        assert parsed.title == "Past Lives"


class TestNormalization:
    """Tests for query and name normalization."""

    def test_normalize_query(self):
        """Test case folding and punctuation collapse."""
        assert normalize_query("  Anatomy of a Fall!  ") == "anatomy of a fall"
        assert normalize_query("The Teachers' Lounge") == "the teachers lounge"

    def test_normalize_query_nfkc(self):
        """Test compatibility characters are normalized."""
        assert normalize_query("ＢＡＲＢＩＥ") == "barbie"

    def test_fold_name_ignores_accents(self):
        """Test accented and plain spellings fold to the same key."""
        assert fold_name("Ludwig Göransson") == fold_name("ludwig goransson")
        assert fold_name("Sandra Hüller") == "sandra huller"

    def test_alternative_title(self):
        """Test known alternative titles are looked up by normalized title."""
        assert alternative_title_for("Io Capitano") == "Me Captain"
        assert alternative_title_for("The Teachers' Lounge") == "Das Lehrerzimmer"
        assert alternative_title_for("Oppenheimer") is None
