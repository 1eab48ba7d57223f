"""Media asset validation: poster, backdrop and trailer availability."""

import logging

from attrs import define, field

from ..errors import UpstreamError
from ..models.tmdb import VideoRef
from ..models.validation import MediaValidation
from .cache import MetadataCache, cached_detail
from .tmdb import TMDbService

logger = logging.getLogger(__name__)

POSTER_PENALTY = 40
BACKDROP_PENALTY = 30
TRAILER_PENALTY = 30

VALID_VIDEO_SITES = ("YouTube", "Vimeo")
PLACEHOLDER_PATHS = frozenset(
    {"placeholder", "/placeholder-poster.jpg", "/placeholder-backdrop.jpg", "/placeholder.jpg"}
)
EMBED_URLS = {
    "YouTube": "https://www.youtube.com/embed/{key}",
    "Vimeo": "https://player.vimeo.com/video/{key}",
}


def is_placeholder(path: str | None) -> bool:
    return not path or path.strip() in PLACEHOLDER_PATHS


def best_trailer(videos) -> VideoRef | None:
    """Official trailers on a supported site, 1080p first, then newest id."""
    trailers = [
        v for v in videos if v.site in VALID_VIDEO_SITES and v.type == "Trailer" and v.official
    ]
    trailers.sort(key=lambda v: (v.size == 1080, v.id), reverse=True)
    return trailers[0] if trailers else None


def trailer_url(video: VideoRef | None) -> str | None:
    if video is None:
        return None
    return EMBED_URLS[video.site].format(key=video.key)


@define
class MediaValidator:
    """Score a movie's media: 100 minus 40 for poster, 30 for backdrop, 30 for trailer.

    Poster and backdrop are probed on the image host; placeholder paths are
    invalid without a probe.
    """

    tmdb: TMDbService
    cache: MetadataCache = field(factory=MetadataCache)
    poster_size: str = "w500"
    backdrop_size: str = "w780"

    async def validate_media(self, tmdb_id: int) -> MediaValidation:
        movie = await cached_detail(self.cache, self.tmdb, tmdb_id)
        if movie is None:
            raise UpstreamError(f"TMDb movie {tmdb_id} not found", 404)
        return await self.validate_assets(movie.poster_path, movie.backdrop_path, movie.videos)

    async def validate_assets(
        self,
        poster_path: str | None,
        backdrop_path: str | None,
        videos=(),
    ) -> MediaValidation:
        """Validate already-known asset paths without a metadata fetch."""
        poster = await self._image_available(poster_path, self.poster_size)
        backdrop = await self._image_available(backdrop_path, self.backdrop_size)
        trailer = best_trailer(videos)

        score = 100
        issues: list[str] = []
        if not poster:
            score -= POSTER_PENALTY
            issues.append("Missing valid poster image")
        if not backdrop:
            score -= BACKDROP_PENALTY
            issues.append("Backdrop image unavailable")
        if trailer is None:
            score -= TRAILER_PENALTY
            issues.append("No official trailer available")

        return MediaValidation(
            poster=poster,
            backdrop=backdrop,
            best_trailer=trailer is not None,
            score=score,
            trailer=trailer,
            issues=issues,
        )

    async def _image_available(self, path: str | None, size: str) -> bool:
        if is_placeholder(path):
            return False
        available = await self.tmdb.image_exists(path, size)
        if not available:
            logger.warning("Image %s not reachable at size %s", path, size)
        return available
