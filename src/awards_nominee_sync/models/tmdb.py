"""TMDb data models."""

from datetime import date

from attrs import field, frozen


@frozen
class Person:
    """A cast or crew credit. ``role`` is the character for cast, the job for crew."""

    id: int
    name: str
    role: str = ""
    department: str | None = None
    profile_path: str | None = None


@frozen
class PersonProfile:
    """Detail record for a credited person, from /person/{id}."""

    id: int
    name: str
    biography: str = ""
    birthday: date | None = None
    place_of_birth: str | None = None
    profile_path: str | None = None
    known_for_department: str | None = None


@frozen
class Company:
    """Represents a production company."""

    id: int
    name: str
    logo_path: str | None = None


@frozen
class VideoRef:
    """Represents a TMDb video entry (trailer, teaser, clip)."""

    key: str
    site: str
    type: str
    name: str = ""
    official: bool = False
    size: int | None = None
    id: str = ""


@frozen
class Credits:
    """Cast and crew lists for a movie."""

    cast: tuple[Person, ...] = field(factory=tuple, converter=tuple)
    crew: tuple[Person, ...] = field(factory=tuple, converter=tuple)


@frozen
class CandidateMetadata:
    """Represents a movie returned by TMDb search or detail endpoints.

    Search summaries carry only the top-level fields. Detail fetches fill in
    runtime, genres, companies, credits and videos. A re-fetch produces a new
    instance; existing ones are never patched.
    """

    id: int
    title: str
    original_title: str | None = None
    release_date: date | None = None
    overview: str = ""
    vote_average: float = 0.0
    runtime: int | None = None
    genres: tuple[str, ...] = field(factory=tuple, converter=tuple)
    production_companies: tuple[Company, ...] = field(factory=tuple, converter=tuple)
    credits: Credits = field(factory=Credits)
    videos: tuple[VideoRef, ...] = field(factory=tuple, converter=tuple)
    poster_path: str | None = None
    backdrop_path: str | None = None
    detailed: bool = False

    @property
    def release_year(self) -> int | None:
        return self.release_date.year if self.release_date else None


@frozen
class NotFoundMarker:
    """Cached record of a lookup that was attempted and found nothing."""


NOT_FOUND = NotFoundMarker()
