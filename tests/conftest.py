"""Shared fixtures: a fake TMDb API served through httpx.MockTransport."""

import copy

import httpx
import pytest
from aiolimiter import AsyncLimiter

from awards_nominee_sync.services.cache import MetadataCache
from awards_nominee_sync.services.enricher import Enricher
from awards_nominee_sync.services.media import MediaValidator
from awards_nominee_sync.services.pipeline import NomineePipeline
from awards_nominee_sync.services.retriever import CandidateRetriever
from awards_nominee_sync.services.tmdb import TMDbService

SUMMARY_FIELDS = (
    "id",
    "title",
    "original_title",
    "release_date",
    "overview",
    "vote_average",
    "poster_path",
    "backdrop_path",
)


class FakeTMDbAPI:
    """In-memory TMDb: movies and people by id, title search, and HEAD probes on the image host."""

    def __init__(self):
        self.movies = {}
        self.people = {}
        self.requests = []
        self.queued = []
        self.missing_images = set()

    def add_movie(self, payload):
        self.movies[payload["id"]] = copy.deepcopy(payload)
        return payload

    def add_person(self, payload):
        self.people[payload["id"]] = copy.deepcopy(payload)
        return payload

    def queue(self, *responses):
        """Serve these responses (status codes or httpx.Response) before normal routing."""
        self.queued.extend(responses)

    @property
    def api_requests(self):
        return [r for r in self.requests if r.url.host == "api.themoviedb.org"]

    @property
    def search_requests(self):
        return [r for r in self.api_requests if r.url.path.endswith("/search/movie")]

    @property
    def detail_requests(self):
        return [r for r in self.api_requests if "/movie/" in r.url.path]

    @property
    def person_requests(self):
        return [r for r in self.api_requests if "/person/" in r.url.path]

    @property
    def image_requests(self):
        return [r for r in self.requests if r.url.host == "image.tmdb.org"]

    def handler(self, request):
        self.requests.append(request)
        if self.queued:
            queued = self.queued.pop(0)
            if isinstance(queued, Exception):
                raise queued
            if isinstance(queued, int):
                return httpx.Response(queued, json={"status_message": "queued"})
            return queued

        if request.url.host == "image.tmdb.org":
            file_path = "/" + request.url.path.rsplit("/", 1)[-1]
            return httpx.Response(404 if file_path in self.missing_images else 200)

        path = request.url.path
        if path == "/3/search/movie":
            return httpx.Response(200, json={"page": 1, "results": self._search(request)})
        if path.startswith("/3/person/"):
            person = self.people.get(int(path.rsplit("/", 1)[-1]))
            if person is None:
                return httpx.Response(404, json={"status_code": 34})
            return httpx.Response(200, json=person)
        if path.startswith("/3/movie/"):
            movie = self.movies.get(int(path.rsplit("/", 1)[-1]))
            if movie is None:
                return httpx.Response(404, json={"status_code": 34})
            return httpx.Response(200, json=movie)
        return httpx.Response(404)

    def _search(self, request):
        query = request.url.params["query"].casefold()
        year = request.url.params.get("year")
        results = []
        for movie in self.movies.values():
            titles = (movie["title"].casefold(), (movie.get("original_title") or "").casefold())
            if not any(query in t for t in titles):
                continue
            if year and not (movie.get("release_date") or "").startswith(year):
                continue
            results.append({k: movie.get(k) for k in SUMMARY_FIELDS})
        return results


@pytest.fixture
def tmdb_api():
    return FakeTMDbAPI()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def fake_sleep(sleeps):
    async def sleep(seconds):
        sleeps.append(seconds)

    return sleep


@pytest.fixture
def tmdb(tmdb_api, fake_sleep):
    return TMDbService(
        read_access_token="test-token",
        limiter=AsyncLimiter(1000, 1),
        transport=httpx.MockTransport(tmdb_api.handler),
        sleep=fake_sleep,
    )


@pytest.fixture
def cache():
    return MetadataCache()


@pytest.fixture
def retriever(tmdb, cache):
    return CandidateRetriever(tmdb=tmdb, cache=cache)


@pytest.fixture
def pipeline(tmdb, cache, retriever, fake_sleep):
    return NomineePipeline(
        retriever=retriever,
        enricher=Enricher(tmdb=tmdb, cache=cache),
        media=MediaValidator(tmdb=tmdb, cache=cache),
        sleep=fake_sleep,
    )
