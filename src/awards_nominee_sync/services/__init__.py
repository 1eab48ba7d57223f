"""Service layer: external API clients and the reconciliation pipeline."""

from .cache import MetadataCache
from .claude import ClaudeTieBreaker
from .disambiguator import Disambiguator
from .enricher import Enricher
from .media import MediaValidator
from .pipeline import NomineePipeline, build_pipeline
from .retriever import CandidateRetriever
from .season import SeasonEligibilityChecker
from .storage import InMemoryNomineeStore, NomineeStore
from .tmdb import TMDbService

__all__ = [
    "CandidateRetriever",
    "ClaudeTieBreaker",
    "Disambiguator",
    "Enricher",
    "InMemoryNomineeStore",
    "MediaValidator",
    "MetadataCache",
    "NomineePipeline",
    "NomineeStore",
    "SeasonEligibilityChecker",
    "TMDbService",
    "build_pipeline",
]
