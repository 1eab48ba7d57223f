"""In-process metadata cache with TTL and negative caching."""

import logging
import threading
import time
from collections.abc import Callable

from attrs import define, field, frozen

from ..models.tmdb import NOT_FOUND, CandidateMetadata, NotFoundMarker, PersonProfile
from ..parsing import normalize_query
from .tmdb import DEFAULT_LANGUAGE, TMDbService

logger = logging.getLogger(__name__)

DEFAULT_TTL = 24 * 60 * 60

CachePayload = CandidateMetadata | tuple[CandidateMetadata, ...] | PersonProfile | NotFoundMarker


@frozen
class CacheEntry:
    key: str
    payload: CachePayload
    fetched_at: float


def make_key(query: str, year: int | None = None, language: str | None = DEFAULT_LANGUAGE) -> str:
    """``normalized(query):year``, suffixed with ``@language`` for non-default locales.

    ``language=None`` means the provider's original-title locale.
    """
    key = f"{normalize_query(query)}:{year if year is not None else ''}"
    if language != DEFAULT_LANGUAGE:
        key = f"{key}@{language or 'original'}"
    return key


def detail_key(movie_id: int, language: str | None = DEFAULT_LANGUAGE) -> str:
    key = f"movie:{movie_id}"
    if language != DEFAULT_LANGUAGE:
        key = f"{key}@{language or 'original'}"
    return key


async def cached_detail(
    cache: "MetadataCache",
    tmdb: TMDbService,
    movie_id: int,
    language: str | None = DEFAULT_LANGUAGE,
) -> CandidateMetadata | None:
    """Detail-fetch a movie through the cache. Only complete fetches are written."""
    key = detail_key(movie_id, language)
    cached = cache.get(key)
    if isinstance(cached, CandidateMetadata):
        return cached
    if cached is NOT_FOUND:
        return None

    movie = await tmdb.get_movie(movie_id, language=language)
    cache.put(key, movie if movie is not None else NOT_FOUND)
    return movie


async def cached_person(
    cache: "MetadataCache", tmdb: TMDbService, person_id: int
) -> PersonProfile | None:
    key = f"person:{person_id}"
    cached = cache.get(key)
    if isinstance(cached, PersonProfile):
        return cached
    if cached is NOT_FOUND:
        return None

    person = await tmdb.get_person(person_id)
    cache.put(key, person if person is not None else NOT_FOUND)
    return person


@define
class MetadataCache:
    """Maps query keys to metadata, candidate lists, or a not-found marker.

    Single-process and shared by every pipeline task. Entries at or past
    ``ttl`` seconds old read as absent; nothing is ever deleted explicitly.
    Writes are last-write-wins.
    """

    ttl: float = DEFAULT_TTL
    clock: Callable[[], float] = time.time
    _entries: dict[str, CacheEntry] = field(factory=dict, init=False)
    _lock: threading.Lock = field(factory=threading.Lock, init=False)

    def get(self, key: str) -> CachePayload | None:
        """Return the cached payload, or ``None`` when absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            return None
        if self.clock() - entry.fetched_at >= self.ttl:
            logger.debug("Cache entry expired: %s", key)
            return None
        return entry.payload

    def put(self, key: str, payload: CachePayload) -> None:
        entry = CacheEntry(key=key, payload=payload, fetched_at=self.clock())
        with self._lock:
            self._entries[key] = entry

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
