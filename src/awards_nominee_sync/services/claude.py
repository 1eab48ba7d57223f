"""Claude-backed tie-break for ambiguous metadata matches."""

import logging
import re

from anthropic import APIError, AsyncAnthropic
from attrs import define

from ..errors import UpstreamError
from ..models.categories import Category
from ..models.tmdb import CandidateMetadata

logger = logging.getLogger(__name__)

NO_MATCH = "no match"

PROMPT_TEMPLATE = """Task: pick the TMDb movie that matches an awards nomination.

Nominated title: "{expected}"
Category: {category}
Eligibility year: {year}

Candidates:
{candidates}

Consider title similarity (including international and alternate titles),
release date proximity to the eligibility year, and whether the overview fits
a film nominated in this category.

Reply with only the 0-based index of the best candidate, e.g. "2".
If none of them is the nominated film, reply "{no_match}"."""


def build_prompt(
    expected_text: str,
    category: Category,
    eligibility_year: int,
    candidates: list[CandidateMetadata],
) -> str:
    lines = []
    for index, movie in enumerate(candidates):
        released = movie.release_date.isoformat() if movie.release_date else "unknown"
        lines.append(
            f'{index}. "{movie.title}" ({released}), rating {movie.vote_average:.1f}\n'
            f"   Overview: {movie.overview or 'n/a'}"
        )
    return PROMPT_TEMPLATE.format(
        expected=expected_text,
        category=category.value,
        year=eligibility_year,
        candidates="\n".join(lines),
        no_match=NO_MATCH,
    )


def parse_choice(text: str, count: int) -> int | None:
    """Read a 0-based index from the reply. Anything else means no match."""
    answer = text.strip().strip("\"'.` ").casefold()
    if answer in (NO_MATCH, "null", "none"):
        return None
    if not re.fullmatch(r"\d+", answer):
        return None
    index = int(answer)
    if index >= count:
        return None
    return index


@define
class ClaudeTieBreaker:
    """Client for the Anthropic Messages API, used only to break ties."""

    api_key: str
    model: str = "claude-3-5-haiku-latest"
    timeout: float = 30.0
    _client: AsyncAnthropic | None = None

    def _get_client(self) -> AsyncAnthropic:
        if self._client is None:
            self._client = AsyncAnthropic(api_key=self.api_key, timeout=self.timeout)
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.close()
            self._client = None

    async def choose(
        self,
        expected_text: str,
        category: Category,
        eligibility_year: int,
        candidates: list[CandidateMetadata],
    ) -> int | None:
        """Return the index of the matching candidate, or ``None`` for no match."""
        prompt = build_prompt(expected_text, category, eligibility_year, candidates)
        try:
            message = await self._get_client().messages.create(
                model=self.model,
                max_tokens=16,
                temperature=0,
                messages=[{"role": "user", "content": prompt}],
            )
        except APIError as e:
            raise UpstreamError(f"Claude tie-break failed: {e}") from e

        text = "".join(block.text for block in message.content if block.type == "text")
        choice = parse_choice(text, len(candidates))
        if choice is None:
            logger.info("Tie-break found no match for %r (reply %r)", expected_text, text)
        return choice
