"""TMDb API service for candidate search, detail fetches and image probes."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import date

import httpx
from aiolimiter import AsyncLimiter
from attrs import define, field

from ..errors import (
    ConfigurationError,
    MalformedPayloadError,
    TransientUpstreamError,
    UpstreamError,
)
from ..models.tmdb import CandidateMetadata, Company, Credits, Person, PersonProfile, VideoRef

logger = logging.getLogger(__name__)

API_BASE_URL = "https://api.themoviedb.org/3"
IMAGE_BASE_URL = "https://image.tmdb.org/t/p"
IMAGE_SIZES = ("w92", "w300", "w500", "w780", "w1280", "original")
DEFAULT_LANGUAGE = "en-US"


def parse_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


@define
class TMDbService:
    """Client for TMDb API.

    Every API call takes a token from ``limiter``; share one limiter across all
    services in a process so the provider quota (40 requests / 10 s) holds
    globally. HTTP 429 waits ``rate_limit_cooldown`` and retries once. Timeouts,
    transport errors and 5xx retry up to ``max_attempts`` with a linear backoff
    of ``backoff`` seconds times the attempt number.
    """

    read_access_token: str
    api_key: str | None = None
    limiter: AsyncLimiter = field(factory=lambda: AsyncLimiter(40, 10))
    timeout: float = 30.0
    rate_limit_cooldown: float = 10.0
    max_attempts: int = 3
    backoff: float = 1.0
    transport: httpx.AsyncBaseTransport | None = None
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    _client: httpx.AsyncClient | None = None
    _image_client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=API_BASE_URL,
                headers={
                    "Authorization": f"Bearer {self.read_access_token}",
                    "Accept": "application/json",
                },
                timeout=self.timeout,
                transport=self.transport,
            )
        return self._client

    async def _get_image_client(self) -> httpx.AsyncClient:
        if self._image_client is None:
            self._image_client = httpx.AsyncClient(
                base_url=IMAGE_BASE_URL,
                timeout=self.timeout,
                follow_redirects=True,
                transport=self.transport,
            )
        return self._image_client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None
        if self._image_client:
            await self._image_client.aclose()
            self._image_client = None

    async def _get_json(self, path: str, params: dict | None = None) -> dict:
        client = await self._get_client()
        cooled_down = False
        attempt = 1

        while True:
            try:
                async with self.limiter:
                    resp = await client.get(path, params=params)
            except httpx.TransportError as e:
                error = TransientUpstreamError(f"TMDb request {path} failed: {e!r}")
            else:
                if resp.status_code == 429:
                    if cooled_down:
                        raise TransientUpstreamError(
                            f"TMDb still rate limiting {path} after cooldown", 429
                        )
                    cooled_down = True
                    logger.warning(
                        "TMDb rate limit hit on %s, waiting %.1fs",
                        path,
                        self.rate_limit_cooldown,
                    )
                    await self.sleep(self.rate_limit_cooldown)
                    continue
                if resp.status_code in (401, 403):
                    raise ConfigurationError("TMDb rejected the access token")
                if resp.status_code >= 500:
                    error = TransientUpstreamError(
                        f"TMDb returned {resp.status_code} for {path}", resp.status_code
                    )
                elif resp.is_error:
                    raise UpstreamError(
                        f"TMDb returned {resp.status_code} for {path}", resp.status_code
                    )
                else:
                    try:
                        return resp.json()
                    except ValueError as e:
                        raise MalformedPayloadError(f"TMDb sent invalid JSON for {path}") from e

            if attempt >= self.max_attempts:
                raise error
            delay = self.backoff * attempt
            logger.warning(
                "%s (attempt %d/%d), retrying in %.1fs", error, attempt, self.max_attempts, delay
            )
            await self.sleep(delay)
            attempt += 1

    async def search_movies(
        self,
        query: str,
        year: int | None = None,
        language: str | None = DEFAULT_LANGUAGE,
        limit: int = 5,
    ) -> list[CandidateMetadata]:
        """Search for movies and return up to ``limit`` ranked summaries."""
        params = {"query": query, "include_adult": "false"}
        if year:
            params["year"] = year
        if language:
            params["language"] = language

        data = await self._get_json("/search/movie", params=params)
        results = data.get("results")
        if not isinstance(results, list):
            raise MalformedPayloadError("TMDb search response has no results list")
        return [self._parse_movie(item) for item in results[:limit]]

    async def get_movie(
        self, tmdb_id: int, language: str | None = DEFAULT_LANGUAGE
    ) -> CandidateMetadata | None:
        """Fetch movie details including credits, videos and images."""
        params = {"append_to_response": "credits,videos,images"}
        if language:
            params["language"] = language
            params["include_image_language"] = f"{language.split('-')[0]},null"
        try:
            data = await self._get_json(f"/movie/{tmdb_id}", params=params)
        except UpstreamError as e:
            if e.status_code == 404:
                return None
            raise
        return self._parse_movie(data, detailed=True)

    async def get_person(self, person_id: int) -> PersonProfile | None:
        """Fetch a person's profile, or ``None`` when TMDb has no such person."""
        try:
            data = await self._get_json(
                f"/person/{person_id}", params={"language": DEFAULT_LANGUAGE}
            )
        except UpstreamError as e:
            if e.status_code == 404:
                return None
            raise
        try:
            return PersonProfile(
                id=int(data["id"]),
                name=data["name"],
                biography=data.get("biography") or "",
                birthday=parse_date(data.get("birthday")),
                place_of_birth=data.get("place_of_birth"),
                profile_path=data.get("profile_path"),
                known_for_department=data.get("known_for_department"),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedPayloadError(f"TMDb person payload missing id/name: {e!r}") from e

    def image_url(self, path: str, size: str = "original") -> str:
        if size not in IMAGE_SIZES:
            raise ValueError(f"Unknown image size: {size}")
        return f"{IMAGE_BASE_URL}/{size}{path}"

    async def image_exists(self, path: str, size: str = "w500") -> bool:
        """Probe the image host. Network failures count as missing."""
        client = await self._get_image_client()
        try:
            resp = await client.head(f"/{size}{path}")
        except httpx.HTTPError as e:
            logger.warning("Image probe failed for %s: %r", path, e)
            return False
        return resp.is_success

    def _parse_movie(self, data: dict, detailed: bool = False) -> CandidateMetadata:
        """Parse a search result or detail payload into a CandidateMetadata."""
        try:
            movie_id = int(data["id"])
            title = data.get("title") or data["original_title"]
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedPayloadError(f"TMDb movie payload missing id/title: {e!r}") from e

        credits = data.get("credits") or {}
        images = data.get("images") or {}
        poster_path = data.get("poster_path")
        if not poster_path and images.get("posters"):
            poster_path = images["posters"][0].get("file_path")
        backdrop_path = data.get("backdrop_path")
        if not backdrop_path and images.get("backdrops"):
            backdrop_path = images["backdrops"][0].get("file_path")

        return CandidateMetadata(
            id=movie_id,
            title=title,
            original_title=data.get("original_title"),
            release_date=parse_date(data.get("release_date")),
            overview=data.get("overview") or "",
            vote_average=float(data.get("vote_average") or 0.0),
            runtime=data.get("runtime") or None,
            genres=[g["name"] for g in data.get("genres", []) if g.get("name")],
            production_companies=[
                Company(id=c.get("id", 0), name=c.get("name", ""), logo_path=c.get("logo_path"))
                for c in data.get("production_companies", [])
            ],
            credits=Credits(
                cast=[self._parse_person(p, p.get("character")) for p in credits.get("cast", [])],
                crew=[self._parse_person(p, p.get("job")) for p in credits.get("crew", [])],
            ),
            videos=[
                VideoRef(
                    key=v.get("key", ""),
                    site=v.get("site", ""),
                    type=v.get("type", ""),
                    name=v.get("name", ""),
                    official=bool(v.get("official")),
                    size=v.get("size"),
                    id=v.get("id", ""),
                )
                for v in (data.get("videos") or {}).get("results", [])
            ],
            poster_path=poster_path,
            backdrop_path=backdrop_path,
            detailed=detailed,
        )

    def _parse_person(self, item: dict, role: str | None) -> Person:
        return Person(
            id=item.get("id", 0),
            name=item.get("name", ""),
            role=role or "",
            department=item.get("department") or item.get("known_for_department"),
            profile_path=item.get("profile_path"),
        )
