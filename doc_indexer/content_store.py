"""
Content-addressed store interface

A document's identity is the SHA-256 of its raw bytes; its object
storage key is that digest in hex, a dash, and the URI-encoded file
name. Deduplication must use the digest: the same bytes uploaded
under two names share a digest but get two keys.

Nothing here performs I/O. The registry of known digests is
whatever the orchestration layer backs it with.
"""

import hashlib
from typing import Optional, Protocol, Set, Union
from urllib.parse import quote

from .errors import DuplicateDocumentError
from .models import DocumentDigest

DIGEST_SIZE = 32


def digest(data: bytes) -> bytes:
    """SHA-256 of data (32 bytes)"""
    return hashlib.sha256(data).digest()


def storage_key(sha256: bytes, filename: str) -> str:
    """
    Object storage key for a digest and file name

    Every character of the file name outside the unreserved URI set
    is percent-encoded (including '/'), so the key is always a single
    valid path segment.
    """
    if len(sha256) != DIGEST_SIZE:
        raise ValueError(f"Expected a {DIGEST_SIZE}-byte SHA-256 digest, got {len(sha256)} bytes")
    return f"{sha256.hex()}-{quote(filename, safe='')}"


def digest_and_key(data: bytes, filename: str) -> DocumentDigest:
    """Digest and storage key of a document in one call"""
    sha256 = digest(data)
    return DocumentDigest(sha256=sha256, storage_key=storage_key(sha256, filename))


class DigestRegistry(Protocol):
    """Membership interface over the digests already indexed"""

    def __contains__(self, sha256: bytes) -> bool:
        ...

    def add(self, sha256: bytes) -> None:
        ...


class InMemoryDigestRegistry:
    """Process-local DigestRegistry"""

    def __init__(self):
        self._digests: Set[bytes] = set()

    def __contains__(self, sha256: bytes) -> bool:
        return sha256 in self._digests

    def add(self, sha256: bytes) -> None:
        self._digests.add(sha256)

    def discard(self, sha256: bytes) -> None:
        self._digests.discard(sha256)

    def __len__(self) -> int:
        return len(self._digests)


class ContentAddressedStore:
    """Digest/key computation plus the duplicate check against a registry"""

    def __init__(self, registry: Optional[DigestRegistry] = None):
        self.registry = registry if registry is not None else InMemoryDigestRegistry()

    def is_known(self, document: Union[bytes, DocumentDigest]) -> bool:
        """True when the digest (or a DocumentDigest's digest) is registered"""
        sha256 = document.sha256 if isinstance(document, DocumentDigest) else document
        return sha256 in self.registry

    def admit(self, data: bytes, filename: str) -> DocumentDigest:
        """
        Register a new document

        Raises:
            DuplicateDocumentError: the same bytes were admitted before,
                whatever their file name was
        """
        document_digest = digest_and_key(data, filename)
        if self.is_known(document_digest):
            raise DuplicateDocumentError(document_digest)
        self.registry.add(document_digest.sha256)
        return document_digest
