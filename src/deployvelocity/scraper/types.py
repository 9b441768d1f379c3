"""Type definitions for the scraper module."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

NO_INCLUDES = "no_includes"
NO_HEADER = "no_header"


class ScrapingError(Exception):
    """Base exception for scraping-related errors."""

    pass


class FetchError(ScrapingError):
    """Raised by a fetcher when the request could not be completed."""

    def __init__(self, message: str, status_code: int = 0):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class FetchResponse:
    """Raw response returned by a fetcher."""

    status_code: int
    body: bytes
    url: Optional[str] = None

    @property
    def text(self) -> str:
        """Body decoded for extraction; undecodable bytes survive as surrogates."""
        return self.body.decode("utf-8", errors="surrogateescape")


class FingerprintKind(str, Enum):
    """Whether a fingerprint is a real digest or an absence sentinel."""

    HASH = "hash"
    ABSENT = "absent"


@dataclass(frozen=True)
class ContentHash:
    """A fingerprint value with its kind and the digest that produced it."""

    value: str
    kind: FingerprintKind
    hash_type: str

    @property
    def is_present(self) -> bool:
        return self.kind is FingerprintKind.HASH

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ExtractionResult:
    """Fingerprints extracted from a single page body."""

    includes: ContentHash
    includes_list: str
    header: ContentHash
    version: ContentHash
    includes_count: int = 0
    header_tag_count: int = 0


@dataclass
class FetchResult:
    """Outcome of fetching and fingerprinting one URL in a run."""

    host: str
    url: str
    success: bool = False
    error_message: str = ""
    status_code: int = 0
    version_fingerprint: str = ""
    header_fingerprint: str = ""
    includes_fingerprint: str = ""
    includes_list: str = ""
    observed_at: int = 0
    extraction: Optional[ExtractionResult] = field(default=None, repr=False)

    @classmethod
    def failed(
        cls, host: str, url: str, message: str, status_code: int = 0
    ) -> "FetchResult":
        return cls(
            host=host,
            url=url,
            success=False,
            error_message=message,
            status_code=status_code,
        )

    @classmethod
    def from_extraction(
        cls, host: str, url: str, extraction: ExtractionResult, observed_at: int
    ) -> "FetchResult":
        return cls(
            host=host,
            url=url,
            success=True,
            status_code=200,
            version_fingerprint=extraction.version.value,
            header_fingerprint=extraction.header.value,
            includes_fingerprint=extraction.includes.value,
            includes_list=extraction.includes_list,
            observed_at=observed_at,
            extraction=extraction,
        )
