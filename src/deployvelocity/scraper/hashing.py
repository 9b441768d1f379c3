"""Version fingerprint extraction from page bodies.

A page's version fingerprint is composed from two parts:

- the *includes* fingerprint, a digest over every ``src``/``href`` attribute
  value pointing at a ``.js`` or ``.css`` resource, in document order;
- the *header* fingerprint, a digest over the normalized ``<meta>`` and
  ``<link>`` tags of the first ``<head>`` block, with anti-forgery tokens and
  padding fields neutralized.

When a part has nothing to hash it takes a fixed sentinel string instead of a
digest. The composite is always a digest of the two part values concatenated,
so it never equals a sentinel.
"""

import hashlib
import re

import blake3

from ..utils.logging import get_structured_logger
from .types import NO_HEADER, NO_INCLUDES, ContentHash, ExtractionResult, FingerprintKind

logger = get_structured_logger(__name__)

INCLUDES_PATTERN = re.compile(r'(src|href)="([^"]+\.(js|css)[^"]*)"')
HEAD_PATTERN = re.compile(r"<head>(.*)</head>", re.IGNORECASE | re.DOTALL)
HEAD_TAG_PATTERN = re.compile(r"<(meta|link)([^>]*)>")

# Attribute strings containing these churn on every request.
NOISY_ATTRIBUTE_MARKERS = ("csrf", "_pad")
REMOVED_PLACEHOLDER = "removed"


def digest(content: str, hash_type: str = "md5") -> str:
    """Hex digest of ``content`` using the named algorithm."""
    # Bodies decoded with surrogateescape hash as their original bytes.
    data = content.encode("utf-8", errors="surrogateescape")

    if hash_type == "md5":
        return hashlib.md5(data).hexdigest()
    elif hash_type == "sha256":
        return hashlib.sha256(data).hexdigest()
    elif hash_type == "blake3":
        return blake3.blake3(data).hexdigest()
    else:
        raise ValueError(f"Unsupported hash type: {hash_type}")


def printable(text: str) -> str:
    """Replace undecodable bytes so ``text`` is safe to log and store."""
    return text.encode("utf-8", errors="surrogateescape").decode(
        "utf-8", errors="replace"
    )


class FingerprintExtractor:
    """Derives includes, header and version fingerprints from page bodies."""

    def __init__(self, parse_headers: bool = False, hash_type: str = "md5"):
        # Fail at construction rather than on the first page.
        digest("", hash_type)
        self.parse_headers = parse_headers
        self.hash_type = hash_type

    def extract(self, body: str) -> ExtractionResult:
        """Extract all fingerprints from a page body."""
        includes, includes_list, includes_count = self.extract_includes(body)
        header, header_tag_count = self.extract_header(body)
        version = self.compose_version(includes, header)

        logger.debug(
            "Extracted fingerprints",
            includes=includes_list,
            includes_hash=includes.value,
            header_hash=header.value,
            version_hash=version.value,
        )

        return ExtractionResult(
            includes=includes,
            includes_list=includes_list,
            header=header,
            version=version,
            includes_count=includes_count,
            header_tag_count=header_tag_count,
        )

    def extract_includes(self, body: str) -> tuple[ContentHash, str, int]:
        """Fingerprint the script and stylesheet references in a body.

        Returns the fingerprint, the comma-joined reference list and the
        number of references found.
        """
        includes = [match.group(2) for match in INCLUDES_PATTERN.finditer(body)]

        if not includes:
            return self._absent(NO_INCLUDES), NO_INCLUDES, 0

        includes_list = ",".join(includes)
        return self._hash(includes_list), printable(includes_list), len(includes)

    def extract_header(self, body: str) -> tuple[ContentHash, int]:
        """Fingerprint the meta and link tags of the first head block."""
        if not self.parse_headers:
            return self._absent(NO_HEADER), 0

        match = HEAD_PATTERN.search(body)
        if match is None:
            return self._absent(NO_HEADER), 0

        head = "".join(match.group(1).split()).lower()

        head_tags = []
        for tag in HEAD_TAG_PATTERN.finditer(head):
            attributes = tag.group(2)
            if any(marker in attributes for marker in NOISY_ATTRIBUTE_MARKERS):
                head_tags.append(REMOVED_PLACEHOLDER)
            else:
                head_tags.append(attributes)

        return self._hash("\n".join(head_tags)), len(head_tags)

    def compose_version(self, includes: ContentHash, header: ContentHash) -> ContentHash:
        """Combine the two part fingerprints into the version fingerprint."""
        return self._hash(includes.value + header.value)

    def _hash(self, content: str) -> ContentHash:
        return ContentHash(
            value=digest(content, self.hash_type),
            kind=FingerprintKind.HASH,
            hash_type=self.hash_type,
        )

    def _absent(self, sentinel: str) -> ContentHash:
        return ContentHash(
            value=sentinel, kind=FingerprintKind.ABSENT, hash_type=self.hash_type
        )
