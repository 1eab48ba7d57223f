"""Awards-season eligibility windows per ceremony year."""

from collections.abc import Mapping
from datetime import date

from attrs import define, field, frozen

from ..models.categories import Category
from ..models.validation import SeasonEligibility
from .category_rules import MIN_FEATURE_RUNTIME


@frozen
class EligibilityWindow:
    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


def calendar_year_window(ceremony_year: int) -> EligibilityWindow:
    """Standard rule: films released in the calendar year before the ceremony."""
    return EligibilityWindow(date(ceremony_year - 1, 1, 1), date(ceremony_year - 1, 12, 31))


DEFAULT_WINDOWS: dict[int, EligibilityWindow] = {
    year: calendar_year_window(year) for year in range(2018, 2027)
}
# 93rd ceremony: window extended through February 2021.
DEFAULT_WINDOWS[2021] = EligibilityWindow(date(2020, 1, 1), date(2021, 2, 28))


@define
class SeasonEligibilityChecker:
    """Check release dates against the configured window for a ceremony year."""

    windows: Mapping[int, EligibilityWindow] = field(factory=lambda: dict(DEFAULT_WINDOWS))

    def window_for(self, ceremony_year: int) -> EligibilityWindow | None:
        return self.windows.get(ceremony_year)

    def check_eligibility(
        self,
        release_date: date | None,
        ceremony_year: int,
        category: Category | None = None,
        runtime: int | None = None,
    ) -> SeasonEligibility:
        """Both window bounds are inclusive.

        Feature-length categories must also run at least the minimum feature
        length. That is a separate check from the category rules.
        """
        window = self.window_for(ceremony_year)
        if window is None:
            return SeasonEligibility(
                eligible=False, reason=f"No configuration for year {ceremony_year}"
            )
        if release_date is None:
            return SeasonEligibility(eligible=False, reason="Missing release date")
        if not window.contains(release_date):
            return SeasonEligibility(
                eligible=False,
                reason=(
                    f"Release date {release_date.isoformat()} falls outside the "
                    f"{ceremony_year} eligibility window "
                    f"{window.start.isoformat()} to {window.end.isoformat()}"
                ),
            )
        if category is not None and category.is_feature:
            if runtime is None or runtime < MIN_FEATURE_RUNTIME:
                return SeasonEligibility(
                    eligible=False,
                    reason=f"Feature films must run at least {MIN_FEATURE_RUNTIME} minutes",
                )
        return SeasonEligibility(eligible=True)
