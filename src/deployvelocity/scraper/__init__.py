"""Page retrieval and fingerprinting for deploy-velocity.

This module provides:
- an aiohttp fetcher with a swappable Fetcher protocol
- fingerprint extraction from script/style includes and head metadata
- bounded-concurrency orchestration of fetch + extract over a URL batch
"""

from .fetcher import Fetcher, HttpFetcher
from .hashing import FingerprintExtractor, digest
from .orchestrator import FetchOrchestrator, ResultHook
from .types import (
    NO_HEADER,
    NO_INCLUDES,
    ContentHash,
    ExtractionResult,
    FetchError,
    FetchResponse,
    FetchResult,
    FingerprintKind,
    ScrapingError,
)

__all__ = [
    # Types
    "ScrapingError",
    "FetchError",
    "FetchResponse",
    "FetchResult",
    "ContentHash",
    "ExtractionResult",
    "FingerprintKind",
    "NO_INCLUDES",
    "NO_HEADER",
    # Fetching
    "Fetcher",
    "HttpFetcher",
    # Fingerprinting
    "FingerprintExtractor",
    "digest",
    # Orchestration
    "FetchOrchestrator",
    "ResultHook",
]
